import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sponta.models.base import Base
from sponta.timeutil import utcnow

STATUS_ACCEPTED = "accepted"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
USER_CHALLENGE_STATUSES = [STATUS_ACCEPTED, STATUS_COMPLETED, STATUS_FAILED]

VERIFIED_BY_AI = "AI"


def _new_id() -> str:
    return uuid.uuid4().hex


class UserChallenge(Base):
    __tablename__ = "user_challenges"
    __table_args__ = (UniqueConstraint("user_id", "challenge_id", name="uq_user_challenge_user_challenge"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    # No foreign key: completion must survive a catalog entry being removed.
    challenge_id: Mapped[str] = mapped_column(String(64), index=True)
    status: Mapped[str] = mapped_column(String(16), default=STATUS_ACCEPTED, index=True)

    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    verified_by: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    ai_confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    ai_reasoning: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    points_earned: Mapped[int] = mapped_column(Integer, default=0)
    counts_for_streak: Mapped[bool] = mapped_column(Boolean, default=True)

    accepted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    location_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    challenge_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    challenge_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    challenge_category: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    challenge_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    challenge_is_daily: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

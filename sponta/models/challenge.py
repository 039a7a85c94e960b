import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sponta.models.base import Base
from sponta.timeutil import utcnow

CHALLENGE_CATEGORIES = [
    "adventure",
    "social",
    "creative",
    "fitness",
    "academic",
    "wellness",
    "exploration",
]
CHALLENGE_DIFFICULTIES = ["easy", "medium", "hard"]
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_ONE_TIME = "one-time"
CHALLENGE_FREQUENCIES = [FREQUENCY_DAILY, FREQUENCY_WEEKLY, FREQUENCY_ONE_TIME]


def _new_id() -> str:
    return uuid.uuid4().hex


class Challenge(Base):
    __tablename__ = "challenges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(String(32), index=True)
    difficulty: Mapped[str] = mapped_column(String(16), default="easy", index=True)
    points: Mapped[int] = mapped_column(Integer, default=10)
    frequency: Mapped[str] = mapped_column(String(16), default=FREQUENCY_DAILY)
    is_daily: Mapped[bool] = mapped_column(Boolean, default=True)
    counts_for_streak: Mapped[bool] = mapped_column(Boolean, default=True)
    requires_photo: Mapped[bool] = mapped_column(Boolean, default=True)
    requires_location: Mapped[bool] = mapped_column(Boolean, default=False)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    total_accepts: Mapped[int] = mapped_column(Integer, default=0)
    total_completions: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sponta.models.base import Base
from sponta.timeutil import utcnow

TYPE_STREAK_MILESTONE = "streak_milestone"
TYPE_STREAK_UPDATE = "streak_update"
TYPE_STREAK_REMINDER = "streak_reminder"
TYPE_STREAK_BROKEN = "streak_broken"

PRIORITY_NORMAL = "normal"
PRIORITY_HIGH = "high"


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String(32), index=True)
    title: Mapped[str] = mapped_column(String(255))
    body: Mapped[str] = mapped_column(String(1024))
    data_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(16), default=PRIORITY_NORMAL)
    read: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

"""Streak notifications. Every sender here is best effort: failures are logged, never raised."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from sponta.crud.notifications import create_notification
from sponta.crud.user import get_user
from sponta.models import Notification
from sponta.models.notification import (
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    TYPE_STREAK_BROKEN,
    TYPE_STREAK_MILESTONE,
    TYPE_STREAK_REMINDER,
    TYPE_STREAK_UPDATE,
)

logger = logging.getLogger(__name__)


def is_milestone(streak: int) -> bool:
    return streak > 0 and (streak == 7 or streak == 30 or streak % 7 == 0)


def streak_notification(streak: int) -> Optional[tuple[str, str, str]]:
    """Return ``(type, title, body)`` for a streak that just went up, or None for no streak."""
    if streak <= 0:
        return None
    if not is_milestone(streak):
        return (
            TYPE_STREAK_UPDATE,
            "🔥 Streak Update",
            f"You're on a {streak}-day streak! Keep it up!",
        )
    if streak == 7:
        return (
            TYPE_STREAK_MILESTONE,
            "🔥 7 Day Streak!",
            f"Amazing! You've maintained a {streak}-day streak. Keep it going!",
        )
    if streak == 30:
        return (
            TYPE_STREAK_MILESTONE,
            "🔥🔥 30 Day Streak!",
            f"Incredible! You've reached a {streak}-day streak milestone!",
        )
    return (
        TYPE_STREAK_MILESTONE,
        f"🔥 {streak} Day Streak!",
        f"Congratulations on your {streak}-day streak!",
    )


def _safe_create(
    db: Session,
    user_id: str,
    type: str,
    title: str,
    body: str,
    data: dict,
    priority: str,
) -> Optional[Notification]:
    try:
        return create_notification(db, user_id, type, title, body, data=data, priority=priority)
    except Exception:
        db.rollback()
        logger.exception("Could not create %s notification for user %s", type, user_id)
        return None


def notify_streak_change(db: Session, user_id: str, streak: int) -> Optional[Notification]:
    message = streak_notification(streak)
    if message is None:
        return None

    type, title, body = message
    priority = PRIORITY_HIGH if type == TYPE_STREAK_MILESTONE else PRIORITY_NORMAL
    return _safe_create(db, user_id, type, title, body, {"streakCount": streak, "type": type}, priority)


def send_streak_broken(db: Session, user_id: str, previous_streak: int) -> Optional[Notification]:
    return _safe_create(
        db,
        user_id,
        TYPE_STREAK_BROKEN,
        "💔 Streak Broken",
        f"Your {previous_streak}-day streak has ended. Start a new one today!",
        {"previousStreak": previous_streak, "type": TYPE_STREAK_BROKEN},
        PRIORITY_NORMAL,
    )


def send_streak_reminder(db: Session, user_id: str) -> Optional[Notification]:
    user = get_user(db, user_id)
    if not user:
        logger.warning("Streak reminder skipped: user %s not found", user_id)
        return None

    streak = user.current_streak or 0
    return _safe_create(
        db,
        user_id,
        TYPE_STREAK_REMINDER,
        "⏰ Don't Break Your Streak!",
        f"You're on a {streak}-day streak! Complete a challenge today to keep it going.",
        {"currentStreak": streak, "type": TYPE_STREAK_REMINDER},
        PRIORITY_HIGH,
    )

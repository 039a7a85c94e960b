"""Daily streak derivation.

The streak is recomputed from the full completion history on every call;
stored counters are only used as the "previous streak" input of the
transition table.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from sponta.crud.challenges import get_challenges_by_ids
from sponta.crud.user import get_user, set_streak
from sponta.crud.user_challenges import list_user_challenges
from sponta.models import UserChallenge
from sponta.models.user_challenge import STATUS_COMPLETED
from sponta.services import notifications
from sponta.services.errors import NotFoundError
from sponta.timeutil import ensure_aware, local_date, today_and_yesterday, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakSnapshot:
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[date]
    completed_today: bool

    def to_dict(self) -> dict:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_activity_date": self.last_activity_date,
            "completed_today": self.completed_today,
        }


def next_streak(previous: int, completed_today: bool, completed_yesterday: bool) -> int:
    if completed_today and completed_yesterday:
        return previous + 1
    if completed_today:
        return 1
    if completed_yesterday:
        return previous
    return 0


def daily_completion_dates(db: Session, completions: list[UserChallenge]) -> set[date]:
    """Local calendar days with at least one verified daily-challenge completion."""
    verified = [uc for uc in completions if uc.verified is True and uc.completed_at is not None]
    catalog = get_challenges_by_ids(db, [uc.challenge_id for uc in verified])

    days: set[date] = set()
    for uc in verified:
        challenge = catalog.get(uc.challenge_id)
        is_daily = challenge.is_daily if challenge is not None else uc.challenge_is_daily
        if is_daily is not True or uc.counts_for_streak is False:
            continue
        days.add(local_date(ensure_aware(uc.completed_at)))
    return days


def update_streak(db: Session, user_id: str, now: Optional[datetime] = None) -> StreakSnapshot:
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    previous_streak = user.current_streak or 0
    longest_streak = user.longest_streak or 0

    completions = list_user_challenges(db, user_id, status=STATUS_COMPLETED)
    days = daily_completion_dates(db, completions)
    today, yesterday = today_and_yesterday(now)
    completed_today = today in days
    completed_yesterday = yesterday in days

    if completed_today and user.last_activity_date == today:
        # Today is already part of the stored streak.
        current_streak = max(previous_streak, 1)
    else:
        current_streak = next_streak(previous_streak, completed_today, completed_yesterday)
    last_activity_date = today if completed_today else user.last_activity_date
    if last_activity_date is None:
        current_streak = 0

    longest_streak = max(longest_streak, current_streak)
    set_streak(db, user_id, current_streak, longest_streak, last_activity_date)
    logger.info(
        "Streak for %s: %s -> %s (today=%s yesterday=%s)",
        user_id,
        previous_streak,
        current_streak,
        completed_today,
        completed_yesterday,
    )

    if current_streak > previous_streak:
        notifications.notify_streak_change(db, user_id, current_streak)
    elif previous_streak > 0 and current_streak == 0:
        notifications.send_streak_broken(db, user_id, previous_streak)

    return StreakSnapshot(
        current_streak=current_streak,
        longest_streak=longest_streak,
        last_activity_date=last_activity_date,
        completed_today=completed_today,
    )


def get_streak_info(db: Session, user_id: str, now: Optional[datetime] = None) -> dict:
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    today, _ = today_and_yesterday(now or utcnow())
    return {
        "current_streak": user.current_streak or 0,
        "longest_streak": user.longest_streak or 0,
        "last_activity_date": user.last_activity_date,
        "is_active_today": user.last_activity_date == today,
    }

"""Operations commands: catalog seeding, streak reminders, verification reconciliation.

Usage:
    python main.py seed
    python main.py remind
    python main.py reconcile [--fix]
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from sponta.crud import seed_challenges_if_empty
from sponta.crud.user import get_users_with_active_streak
from sponta.crud.user_challenges import list_inconsistent_verified, update_user_challenge
from sponta.db import SessionLocal
from sponta.logging_config import configure_logging
from sponta.models.user_challenge import STATUS_COMPLETED
from sponta.services.notifications import send_streak_reminder
from sponta.timeutil import ensure_aware, today_and_yesterday

logger = logging.getLogger("sponta.ops")


def send_reminders(db: Session, now: Optional[datetime] = None) -> int:
    """Nudge users who have a streak going but nothing logged today."""
    today, _ = today_and_yesterday(now)
    sent = 0
    for user in get_users_with_active_streak(db):
        if user.last_activity_date == today:
            continue
        if send_streak_reminder(db, user.id) is not None:
            sent += 1
    return sent


def reconcile_verified(db: Session, fix: bool = False) -> int:
    """Report verified relationships whose status or completion time drifted.

    Points are not re-credited here; a crediting gap needs a manual look.
    """
    rows = list_inconsistent_verified(db)
    for row in rows:
        logger.warning(
            "Relationship %s (user=%s challenge=%s) verified but status=%s completed_at=%s",
            row.id,
            row.user_id,
            row.challenge_id,
            row.status,
            row.completed_at,
        )
        if fix:
            update_user_challenge(
                db,
                row.id,
                {
                    "status": STATUS_COMPLETED,
                    "completed_at": ensure_aware(row.completed_at or row.verified_at or row.updated_at),
                },
            )
    return len(rows)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Sponta operations")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("seed", help="Seed the challenge catalog if it is empty")
    sub.add_parser("remind", help="Send streak reminders")
    reconcile = sub.add_parser("reconcile", help="Find verified challenges not marked completed")
    reconcile.add_argument("--fix", action="store_true", help="Repair status and completed_at")
    args = parser.parse_args(argv)

    configure_logging()
    with SessionLocal() as db:
        if args.command == "seed":
            logger.info("Seeded %s challenges", seed_challenges_if_empty(db))
        elif args.command == "remind":
            logger.info("Sent %s streak reminders", send_reminders(db))
        elif args.command == "reconcile":
            count = reconcile_verified(db, fix=args.fix)
            logger.info("%s inconsistent relationships %s", count, "fixed" if args.fix else "found")
    return 0


if __name__ == "__main__":
    sys.exit(main())

import json
from typing import Any, Optional

from sqlalchemy import and_, not_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sponta.models import Challenge, UserChallenge
from sponta.models.user_challenge import STATUS_ACCEPTED, STATUS_COMPLETED
from sponta.timeutil import utcnow


def find_user_challenge(db: Session, user_id: str, challenge_id: str) -> Optional[UserChallenge]:
    return db.scalar(
        select(UserChallenge).where(
            and_(UserChallenge.user_id == user_id, UserChallenge.challenge_id == challenge_id)
        )
    )


def create_user_challenge(db: Session, user_id: str, challenge: Challenge) -> tuple[UserChallenge, bool]:
    """Insert the accepted relationship unless one already exists.

    Returns ``(user_challenge, created)``. The unique constraint on
    (user_id, challenge_id) decides concurrent accepts; the loser gets the
    winner's row back.
    """
    user_challenge = UserChallenge(
        user_id=user_id,
        challenge_id=challenge.id,
        status=STATUS_ACCEPTED,
        verified=False,
        points_earned=0,
        counts_for_streak=True if challenge.counts_for_streak is None else bool(challenge.counts_for_streak),
        challenge_title=challenge.title,
        challenge_description=challenge.description,
        challenge_category=challenge.category,
        challenge_points=challenge.points,
        challenge_is_daily=bool(challenge.is_daily),
    )
    db.add(user_challenge)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_user_challenge(db, user_id, challenge.id)
        if existing is None:
            raise
        return existing, False

    db.refresh(user_challenge)
    return user_challenge, True


def _column_values(patch: dict[str, Any]) -> dict[str, Any]:
    values = dict(patch)
    if "location" in values:
        location = values.pop("location")
        values["location_json"] = json.dumps(location, ensure_ascii=False) if location is not None else None
    return values


def update_user_challenge(db: Session, user_challenge_id: str, patch: dict[str, Any]) -> Optional[UserChallenge]:
    user_challenge = db.get(UserChallenge, user_challenge_id)
    if not user_challenge:
        return None

    values = _column_values(patch)
    for key, value in values.items():
        setattr(user_challenge, key, value)
    db.add(user_challenge)
    db.commit()
    db.refresh(user_challenge)
    return user_challenge


def record_attempt(db: Session, user_challenge_id: str, patch: dict[str, Any]) -> Optional[UserChallenge]:
    """Write a completion attempt unless the row is already a verified completion.

    The check and the write are one UPDATE, so of two overlapping attempts
    only one can land on a row that is still open. Returns None when the
    row was already completed.
    """
    result = db.execute(
        update(UserChallenge)
        .where(
            UserChallenge.id == user_challenge_id,
            not_(and_(UserChallenge.status == STATUS_COMPLETED, UserChallenge.verified.is_(True))),
        )
        .values(**_column_values(patch), updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount != 1:
        return None
    return db.get(UserChallenge, user_challenge_id)


def list_user_challenges(db: Session, user_id: str, status: Optional[str] = None) -> list[UserChallenge]:
    query = select(UserChallenge).where(UserChallenge.user_id == user_id)
    if status:
        query = query.where(UserChallenge.status == status)
    return list(db.scalars(query.order_by(UserChallenge.accepted_at.desc())))


def list_inconsistent_verified(db: Session) -> list[UserChallenge]:
    """Rows marked verified whose status or completion time drifted."""
    return list(
        db.scalars(
            select(UserChallenge).where(
                and_(
                    UserChallenge.verified.is_(True),
                    or_(UserChallenge.status != STATUS_COMPLETED, UserChallenge.completed_at.is_(None)),
                )
            )
        )
    )


def load_location(user_challenge: UserChallenge) -> Optional[Any]:
    if not user_challenge.location_json:
        return None
    try:
        return json.loads(user_challenge.location_json)
    except ValueError:
        return None

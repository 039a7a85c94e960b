from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from sponta.models import Challenge
from sponta.models.challenge import FREQUENCY_DAILY

DEFAULT_CHALLENGES = [
    {
        "title": "Try a New Coffee Shop",
        "description": "Visit a coffee shop you've never been to before and try their signature drink.",
        "category": "exploration",
        "difficulty": "easy",
        "points": 10,
        "frequency": "daily",
        "requires_photo": True,
        "requires_location": True,
        "is_featured": True,
    },
    {
        "title": "Strike Up a Conversation",
        "description": "Start a conversation with a stranger and learn something new about them.",
        "category": "social",
        "difficulty": "medium",
        "points": 15,
        "frequency": "daily",
        "requires_photo": False,
        "is_featured": True,
    },
    {
        "title": "Take a 30-Minute Walk",
        "description": "Go for a 30-minute walk in a new area or park you haven't explored.",
        "category": "fitness",
        "difficulty": "easy",
        "points": 10,
        "frequency": "daily",
        "requires_location": True,
    },
    {
        "title": "Learn a New Skill",
        "description": "Spend an hour learning something new and share what you made.",
        "category": "academic",
        "difficulty": "hard",
        "points": 25,
        "frequency": "weekly",
    },
    {
        "title": "Cook a New Recipe",
        "description": "Cook a dish you have never made before.",
        "category": "creative",
        "difficulty": "medium",
        "points": 20,
        "frequency": "weekly",
    },
    {
        "title": "Attend a Campus Event",
        "description": "Show up to a campus event and meet at least one new person.",
        "category": "social",
        "difficulty": "easy",
        "points": 15,
        "frequency": "weekly",
        "requires_location": True,
        "latitude": 40.7128,
        "longitude": -74.0060,
    },
    {
        "title": "Meditation Session",
        "description": "Take 10 minutes for a quiet meditation session.",
        "category": "wellness",
        "difficulty": "easy",
        "points": 10,
        "frequency": "daily",
        "requires_photo": False,
    },
    {
        "title": "Volunteer for 2 Hours",
        "description": "Give two hours of your time to a local cause.",
        "category": "social",
        "difficulty": "hard",
        "points": 30,
        "frequency": "weekly",
        "requires_location": True,
    },
]


def build_challenge(data: dict) -> Challenge:
    payload = dict(data)
    frequency = payload.get("frequency") or FREQUENCY_DAILY
    payload["frequency"] = frequency
    payload.setdefault("is_daily", frequency == FREQUENCY_DAILY)
    payload.setdefault("counts_for_streak", True)
    return Challenge(**payload)


def create_challenge(db: Session, data: dict) -> Challenge:
    challenge = build_challenge(data)
    db.add(challenge)
    db.commit()
    db.refresh(challenge)
    return challenge


def seed_challenges_if_empty(db: Session) -> int:
    existing = db.scalar(select(Challenge.id).limit(1))
    if existing:
        return 0

    for item in DEFAULT_CHALLENGES:
        db.add(build_challenge(item))
    db.commit()
    return len(DEFAULT_CHALLENGES)


def get_challenge(db: Session, challenge_id: str) -> Optional[Challenge]:
    return db.get(Challenge, challenge_id)


def get_challenges_by_ids(db: Session, challenge_ids: list[str]) -> dict[str, Challenge]:
    if not challenge_ids:
        return {}
    rows = db.scalars(select(Challenge).where(Challenge.id.in_(set(challenge_ids))))
    return {row.id: row for row in rows}


def get_active_challenges(
    db: Session,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
) -> list[Challenge]:
    query = select(Challenge).where(Challenge.is_active.is_(True))
    if category:
        query = query.where(Challenge.category == category)
    if difficulty:
        query = query.where(Challenge.difficulty == difficulty)
    return list(db.scalars(query.order_by(Challenge.is_featured.desc(), Challenge.created_at)))


def increment_accept_count(db: Session, challenge_id: str) -> None:
    db.execute(
        update(Challenge)
        .where(Challenge.id == challenge_id)
        .values(total_accepts=Challenge.total_accepts + 1)
    )
    db.commit()


def increment_completion_count(db: Session, challenge_id: str) -> None:
    db.execute(
        update(Challenge)
        .where(Challenge.id == challenge_id)
        .values(total_completions=Challenge.total_completions + 1)
    )
    db.commit()

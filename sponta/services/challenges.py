"""Challenge lifecycle: accept, photo-verified completion, point award.

A relationship moves NONE -> ACCEPTED -> COMPLETED. COMPLETED is reachable
only through a successful verification; an unverified attempt leaves the
relationship ACCEPTED so the user can retry.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from math import atan2, cos, radians, sin, sqrt
from typing import Any, Optional, Union

from sqlalchemy.orm import Session

from sponta.config import settings
from sponta.crud import challenges as catalog
from sponta.crud import user as users
from sponta.crud import user_challenges as relationships
from sponta.models import Challenge, UserChallenge
from sponta.models.challenge import CHALLENGE_CATEGORIES, CHALLENGE_DIFFICULTIES
from sponta.models.user_challenge import (
    STATUS_ACCEPTED,
    STATUS_COMPLETED,
    USER_CHALLENGE_STATUSES,
    VERIFIED_BY_AI,
)
from sponta.services.errors import ConflictError, NotFoundError, ValidationError
from sponta.services.streaks import StreakSnapshot, update_streak
from sponta.services.verification import PhotoVerifier, VerificationResult, get_verifier
from sponta.timeutil import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChallengeSummary:
    """Minimal challenge info rebuilt from a relationship when the catalog entry is gone."""

    id: str
    title: str
    description: str
    category: Optional[str]
    points: Optional[int]
    is_daily: Optional[bool]

    @classmethod
    def from_user_challenge(cls, user_challenge: UserChallenge) -> "ChallengeSummary":
        return cls(
            id=user_challenge.challenge_id,
            title=user_challenge.challenge_title or "",
            description=user_challenge.challenge_description or "",
            category=user_challenge.challenge_category,
            points=user_challenge.challenge_points,
            is_daily=user_challenge.challenge_is_daily,
        )


ChallengeLike = Union[Challenge, ChallengeSummary]


@dataclass
class AcceptResult:
    user_challenge: UserChallenge
    challenge: Challenge
    already_accepted: bool


@dataclass
class CompletionResult:
    user_challenge: UserChallenge
    challenge: ChallengeLike
    points_earned: int
    verification: VerificationResult
    streak: Optional[StreakSnapshot] = None


def _get_user_or_404(db: Session, user_id: str):
    user = users.get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def get_challenge(db: Session, challenge_id: str) -> Challenge:
    challenge = catalog.get_challenge(db, challenge_id)
    if not challenge:
        raise NotFoundError("Challenge not found")
    return challenge


def list_challenges(
    db: Session,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Challenge], int]:
    if category and category not in CHALLENGE_CATEGORIES:
        raise ValidationError(f"Unknown category: {category}")
    if difficulty and difficulty not in CHALLENGE_DIFFICULTIES:
        raise ValidationError(f"Unknown difficulty: {difficulty}")
    if offset < 0 or limit < 1:
        raise ValidationError("offset must be >= 0 and limit >= 1")

    items = catalog.get_active_challenges(db, category=category, difficulty=difficulty)
    return items[offset : offset + limit], len(items)


def distance_m(lat_a: float, lng_a: float, lat_b: float, lng_b: float) -> float:
    """Return distance in metres using haversine formula."""
    radius = 6371000
    d_lat = radians(lat_b - lat_a)
    d_lng = radians(lng_b - lng_a)
    lat1 = radians(lat_a)
    lat2 = radians(lat_b)
    a = sin(d_lat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(d_lng / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return radius * c


def get_nearby_challenges(
    db: Session,
    latitude: float,
    longitude: float,
    radius_m: Optional[int] = None,
) -> list[tuple[Challenge, float]]:
    """Active challenges with coordinates within ``radius_m``, nearest first."""
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise ValidationError("Latitude and longitude are out of range")
    radius = radius_m or settings.NEARBY_DEFAULT_RADIUS_M
    if radius <= 0:
        raise ValidationError("radius must be positive")

    nearby: list[tuple[Challenge, float]] = []
    for challenge in catalog.get_active_challenges(db):
        if challenge.latitude is None or challenge.longitude is None:
            continue
        dist = distance_m(latitude, longitude, challenge.latitude, challenge.longitude)
        if dist <= radius:
            nearby.append((challenge, dist))
    nearby.sort(key=lambda item: item[1])
    return nearby


def list_user_challenges(db: Session, user_id: str, status: Optional[str] = None) -> list[UserChallenge]:
    if status and status not in USER_CHALLENGE_STATUSES:
        raise ValidationError(f"Unknown status: {status}")
    return relationships.list_user_challenges(db, user_id, status=status)


def get_challenge_progress(db: Session, user_id: str, challenge_id: str) -> dict[str, Any]:
    challenge = get_challenge(db, challenge_id)
    user_challenge = relationships.find_user_challenge(db, user_id, challenge_id)
    return {
        "challenge": challenge,
        "user_challenge": user_challenge,
        "has_accepted": user_challenge is not None,
        "is_completed": bool(user_challenge and user_challenge.status == STATUS_COMPLETED),
    }


def accept_challenge(db: Session, user_id: str, challenge_id: str) -> AcceptResult:
    challenge = get_challenge(db, challenge_id)
    _get_user_or_404(db, user_id)

    existing = relationships.find_user_challenge(db, user_id, challenge_id)
    if existing:
        return AcceptResult(user_challenge=existing, challenge=challenge, already_accepted=True)

    user_challenge, created = relationships.create_user_challenge(db, user_id, challenge)
    if not created:
        logger.info("Concurrent accept for user=%s challenge=%s resolved to existing row", user_id, challenge_id)
        return AcceptResult(user_challenge=user_challenge, challenge=challenge, already_accepted=True)

    try:
        catalog.increment_accept_count(db, challenge_id)
    except Exception:
        db.rollback()
        logger.exception("Could not increment accept count for challenge %s", challenge_id)

    logger.info("User %s accepted challenge %s", user_id, challenge_id)
    return AcceptResult(user_challenge=user_challenge, challenge=challenge, already_accepted=False)


def _points_for(challenge: ChallengeLike) -> int:
    if challenge.points is None:
        return settings.DEFAULT_CHALLENGE_POINTS
    return max(0, int(challenge.points))


def complete_challenge(
    db: Session,
    user_id: str,
    challenge_id: str,
    photo_url: Optional[str] = None,
    location: Any = None,
    verifier: Optional[PhotoVerifier] = None,
    now: Optional[datetime] = None,
) -> CompletionResult:
    """Run one completion attempt.

    The result is returned whatever the verdict; callers must look at
    ``verification.verified`` to learn whether the attempt counted.
    Raises ConflictError if another attempt completed the relationship
    while this one was being verified.
    """
    user_challenge = relationships.find_user_challenge(db, user_id, challenge_id)
    if not user_challenge:
        raise NotFoundError("Challenge not accepted. Please accept the challenge first.")
    if user_challenge.status == STATUS_COMPLETED and user_challenge.verified is True:
        raise ConflictError("Challenge already completed")

    challenge: ChallengeLike
    found = catalog.get_challenge(db, challenge_id)
    if found is not None:
        challenge = found
    else:
        logger.warning("Challenge %s missing from catalog; using cached relationship fields", challenge_id)
        challenge = ChallengeSummary.from_user_challenge(user_challenge)

    verification = (verifier or get_verifier()).verify(challenge, photo_url, location)
    is_verified = verification.verified is True
    points_earned = _points_for(challenge) if is_verified else 0
    stamp = now or utcnow()

    patch = {
        "status": STATUS_COMPLETED if is_verified else STATUS_ACCEPTED,
        "completed_at": stamp if is_verified else None,
        "verified": is_verified,
        "verified_at": stamp if is_verified else None,
        "verified_by": VERIFIED_BY_AI if is_verified else None,
        "ai_confidence": verification.confidence,
        "ai_reasoning": verification.reasoning,
        "points_earned": points_earned,
        "photo_url": photo_url,
        "location": location,
    }
    updated = relationships.record_attempt(db, user_challenge.id, patch)
    if updated is None:
        logger.info("Completion of %s by %s lost to a concurrent completion", challenge_id, user_id)
        raise ConflictError("Challenge already completed")

    streak: Optional[StreakSnapshot] = None
    if is_verified:
        users.increment_points(db, user_id, points_earned)

        try:
            streak = update_streak(db, user_id, now=stamp)
        except Exception:
            db.rollback()
            logger.exception("Streak recompute failed for user %s after completing %s", user_id, challenge_id)

        try:
            catalog.increment_completion_count(db, challenge_id)
        except Exception:
            db.rollback()
            logger.exception("Could not increment completion count for challenge %s", challenge_id)

        logger.info("User %s completed challenge %s (+%s points)", user_id, challenge_id, points_earned)
    else:
        logger.info(
            "Completion of %s by %s not verified: %s",
            challenge_id,
            user_id,
            verification.reasoning,
        )

    return CompletionResult(
        user_challenge=updated,
        challenge=challenge,
        points_earned=points_earned,
        verification=verification,
        streak=streak,
    )

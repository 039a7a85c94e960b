from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sponta.api.deps import get_current_user_id, get_db, get_photo_verifier
from sponta.crud.user_challenges import load_location
from sponta.models import UserChallenge
from sponta.models.challenge import CHALLENGE_CATEGORIES
from sponta.schemas import (
    AcceptOut,
    ChallengeOut,
    ChallengePageOut,
    CompletionIn,
    CompletionOut,
    NearbyChallengeOut,
    ProgressOut,
    UserChallengeOut,
    VerificationOut,
)
from sponta.services import challenges as lifecycle
from sponta.services.verification import PhotoVerifier

router = APIRouter(prefix="/v1/challenges", tags=["challenges"])


def _user_challenge_out(user_challenge: UserChallenge) -> UserChallengeOut:
    out = UserChallengeOut.model_validate(user_challenge)
    return out.model_copy(update={"location": load_location(user_challenge)})


@router.get("", response_model=ChallengePageOut)
def list_challenges(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> ChallengePageOut:
    items, total = lifecycle.list_challenges(db, category, difficulty, offset, limit)
    return ChallengePageOut(
        items=[ChallengeOut.model_validate(item) for item in items],
        offset=offset,
        limit=limit,
        total=total,
    )


@router.get("/categories")
def list_categories() -> dict[str, list[str]]:
    return {"items": CHALLENGE_CATEGORIES}


@router.get("/nearby", response_model=list[NearbyChallengeOut])
def nearby_challenges(
    lat: float,
    lng: float,
    radius: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
) -> list[NearbyChallengeOut]:
    return [
        NearbyChallengeOut(**ChallengeOut.model_validate(challenge).model_dump(), distance_m=round(dist, 1))
        for challenge, dist in lifecycle.get_nearby_challenges(db, lat, lng, radius)
    ]


@router.get("/my", response_model=list[UserChallengeOut])
def my_challenges(
    status: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[UserChallengeOut]:
    return [_user_challenge_out(uc) for uc in lifecycle.list_user_challenges(db, user_id, status)]


@router.get("/{challenge_id}", response_model=ChallengeOut)
def get_challenge(challenge_id: str, db: Session = Depends(get_db)) -> ChallengeOut:
    return ChallengeOut.model_validate(lifecycle.get_challenge(db, challenge_id))


@router.get("/{challenge_id}/progress", response_model=ProgressOut)
def challenge_progress(
    challenge_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProgressOut:
    progress = lifecycle.get_challenge_progress(db, user_id, challenge_id)
    user_challenge = progress["user_challenge"]
    return ProgressOut(
        challenge=ChallengeOut.model_validate(progress["challenge"]),
        user_challenge=_user_challenge_out(user_challenge) if user_challenge else None,
        has_accepted=progress["has_accepted"],
        is_completed=progress["is_completed"],
    )


@router.post("/{challenge_id}/accept", response_model=AcceptOut)
def accept_challenge(
    challenge_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> AcceptOut:
    result = lifecycle.accept_challenge(db, user_id, challenge_id)
    return AcceptOut(
        user_challenge=_user_challenge_out(result.user_challenge),
        challenge=ChallengeOut.model_validate(result.challenge),
        already_accepted=result.already_accepted,
    )


@router.post("/{challenge_id}/complete", response_model=CompletionOut)
def complete_challenge(
    challenge_id: str,
    payload: CompletionIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    verifier: PhotoVerifier = Depends(get_photo_verifier),
) -> CompletionOut:
    # 200 even when the photo is rejected; clients read verification.verified.
    result = lifecycle.complete_challenge(
        db,
        user_id,
        challenge_id,
        photo_url=payload.photo_url,
        location=payload.location,
        verifier=verifier,
    )
    return CompletionOut(
        user_challenge=_user_challenge_out(result.user_challenge),
        challenge=ChallengeOut.model_validate(result.challenge),
        points_earned=result.points_earned,
        verification=VerificationOut(**result.verification.to_dict()),
    )

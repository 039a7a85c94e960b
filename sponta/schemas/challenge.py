from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ChallengeOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    points: Optional[int] = None
    frequency: Optional[str] = None
    is_daily: Optional[bool] = None
    requires_photo: Optional[bool] = None
    requires_location: Optional[bool] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    total_accepts: Optional[int] = None
    total_completions: Optional[int] = None

    class Config:
        from_attributes = True


class NearbyChallengeOut(ChallengeOut):
    distance_m: float


class ChallengePageOut(BaseModel):
    items: list[ChallengeOut]
    offset: int
    limit: int
    total: int


class UserChallengeOut(BaseModel):
    id: str
    user_id: str
    challenge_id: str
    status: str
    verified: bool
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    ai_confidence: Optional[float] = None
    ai_reasoning: Optional[str] = None
    points_earned: int
    counts_for_streak: bool
    accepted_at: datetime
    completed_at: Optional[datetime] = None
    photo_url: Optional[str] = None
    location: Optional[Any] = None

    class Config:
        from_attributes = True


class CompletionIn(BaseModel):
    photo_url: Optional[str] = None
    location: Optional[dict[str, Any]] = None


class VerificationOut(BaseModel):
    verified: bool
    confidence: float
    reasoning: str
    outcome: str


class AcceptOut(BaseModel):
    user_challenge: UserChallengeOut
    challenge: ChallengeOut
    already_accepted: bool


class CompletionOut(BaseModel):
    user_challenge: UserChallengeOut
    challenge: ChallengeOut
    points_earned: int
    verification: VerificationOut


class ProgressOut(BaseModel):
    challenge: ChallengeOut
    user_challenge: Optional[UserChallengeOut] = None
    has_accepted: bool
    is_completed: bool

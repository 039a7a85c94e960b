from sponta.schemas.challenge import (
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
from sponta.schemas.notification import NotificationOut, UnreadCountOut
from sponta.schemas.streak import StreakOut

__all__ = [
    "AcceptOut",
    "ChallengeOut",
    "ChallengePageOut",
    "CompletionIn",
    "CompletionOut",
    "NearbyChallengeOut",
    "ProgressOut",
    "UserChallengeOut",
    "VerificationOut",
    "NotificationOut",
    "UnreadCountOut",
    "StreakOut",
]

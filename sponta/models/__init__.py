from sponta.models.base import Base
from sponta.models.challenge import Challenge
from sponta.models.notification import Notification
from sponta.models.user import User
from sponta.models.user_challenge import UserChallenge

__all__ = [
    "Base",
    "Challenge",
    "Notification",
    "User",
    "UserChallenge",
]

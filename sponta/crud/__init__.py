from sponta.crud.challenges import (
    get_active_challenges,
    get_challenge,
    get_challenges_by_ids,
    increment_accept_count,
    increment_completion_count,
    seed_challenges_if_empty,
)
from sponta.crud.notifications import (
    create_notification,
    delete_notification,
    get_unread_count,
    get_user_notifications,
    mark_all_as_read,
    mark_as_read,
)
from sponta.crud.user import get_user, increment_points, set_streak, upsert_user
from sponta.crud.user_challenges import (
    create_user_challenge,
    find_user_challenge,
    list_user_challenges,
    record_attempt,
    update_user_challenge,
)

__all__ = [
    "get_challenge",
    "get_challenges_by_ids",
    "get_active_challenges",
    "increment_accept_count",
    "increment_completion_count",
    "seed_challenges_if_empty",
    "find_user_challenge",
    "create_user_challenge",
    "update_user_challenge",
    "record_attempt",
    "list_user_challenges",
    "get_user",
    "upsert_user",
    "increment_points",
    "set_streak",
    "create_notification",
    "get_user_notifications",
    "get_unread_count",
    "mark_as_read",
    "mark_all_as_read",
    "delete_notification",
]

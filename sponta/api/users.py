from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sponta.api.deps import get_current_user_id, get_db
from sponta.crud import (
    delete_notification,
    get_unread_count,
    get_user_notifications,
    mark_all_as_read,
    mark_as_read,
)
from sponta.crud.notifications import load_data
from sponta.schemas import NotificationOut, StreakOut, UnreadCountOut
from sponta.services.streaks import get_streak_info

router = APIRouter(prefix="/v1", tags=["users"])


@router.get("/streak", response_model=StreakOut)
def streak(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)) -> StreakOut:
    return StreakOut(**get_streak_info(db, user_id))


@router.get("/notifications", response_model=list[NotificationOut])
def notifications(
    limit: int = 50,
    unread_only: bool = False,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[NotificationOut]:
    return [
        NotificationOut(
            id=item.id,
            type=item.type,
            title=item.title,
            body=item.body,
            data=load_data(item),
            priority=item.priority,
            read=item.read,
            created_at=item.created_at,
        )
        for item in get_user_notifications(db, user_id, limit=limit, unread_only=unread_only)
    ]


@router.get("/notifications/unread-count", response_model=UnreadCountOut)
def unread_count(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)) -> UnreadCountOut:
    return UnreadCountOut(unread=get_unread_count(db, user_id))


@router.post("/notifications/read-all")
def read_all(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)) -> dict[str, int]:
    return {"updated": mark_all_as_read(db, user_id)}


@router.post("/notifications/{notification_id}/read")
def read_one(
    notification_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    if not mark_as_read(db, user_id, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"ok": True}


@router.delete("/notifications/{notification_id}")
def remove(
    notification_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    if not delete_notification(db, user_id, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"ok": True}

import json
from typing import Any, Optional

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.orm import Session

from sponta.models import Notification
from sponta.models.notification import PRIORITY_NORMAL


def create_notification(
    db: Session,
    user_id: str,
    type: str,
    title: str,
    body: str,
    data: Optional[dict[str, Any]] = None,
    priority: str = PRIORITY_NORMAL,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        body=body,
        data_json=json.dumps(data or {}, ensure_ascii=False),
        priority=priority,
        read=False,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def get_user_notifications(
    db: Session,
    user_id: str,
    limit: int = 50,
    unread_only: bool = False,
) -> list[Notification]:
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.read.is_(False))
    query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
    if limit:
        query = query.limit(limit)
    return list(db.scalars(query))


def get_unread_count(db: Session, user_id: str) -> int:
    return db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(and_(Notification.user_id == user_id, Notification.read.is_(False)))
    ) or 0


def mark_as_read(db: Session, user_id: str, notification_id: int) -> bool:
    result = db.execute(
        update(Notification)
        .where(and_(Notification.id == notification_id, Notification.user_id == user_id))
        .values(read=True)
    )
    db.commit()
    return result.rowcount > 0


def mark_all_as_read(db: Session, user_id: str) -> int:
    result = db.execute(
        update(Notification)
        .where(and_(Notification.user_id == user_id, Notification.read.is_(False)))
        .values(read=True)
    )
    db.commit()
    return result.rowcount


def delete_notification(db: Session, user_id: str, notification_id: int) -> bool:
    result = db.execute(
        delete(Notification).where(and_(Notification.id == notification_id, Notification.user_id == user_id))
    )
    db.commit()
    return result.rowcount > 0


def load_data(notification: Notification) -> dict[str, Any]:
    if not notification.data_json:
        return {}
    try:
        data = json.loads(notification.data_json)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}

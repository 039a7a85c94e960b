from datetime import date
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from sponta.models import User


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.get(User, user_id)


def upsert_user(db: Session, user_id: str, display_name: Optional[str] = None) -> User:
    user = db.get(User, user_id)
    if user:
        if display_name and user.display_name != display_name:
            user.display_name = display_name
            db.add(user)
            db.commit()
            db.refresh(user)
        return user

    user = User(id=user_id, display_name=display_name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def increment_points(db: Session, user_id: str, delta: int) -> None:
    if delta <= 0:
        return
    db.execute(update(User).where(User.id == user_id).values(points=User.points + delta))
    db.commit()


def set_streak(
    db: Session,
    user_id: str,
    current_streak: int,
    longest_streak: int,
    last_activity_date: Optional[date],
) -> Optional[User]:
    user = db.get(User, user_id)
    if not user:
        return None

    user.current_streak = current_streak
    user.longest_streak = longest_streak
    user.last_activity_date = last_activity_date
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_users_with_active_streak(db: Session) -> list[User]:
    return list(db.scalars(select(User).where(User.current_streak > 0).order_by(User.id)))

from typing import Generator, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from sponta.crud import upsert_user
from sponta.db import SessionLocal
from sponta.services.verification import PhotoVerifier, get_verifier


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> str:
    """Caller identity is established upstream; this only trusts the forwarded header."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="User authentication required")
    upsert_user(db, user_id, (x_user_name or "").strip() or None)
    return user_id


def get_photo_verifier() -> PhotoVerifier:
    return get_verifier()

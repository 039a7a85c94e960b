from datetime import datetime
from typing import Any

from pydantic import BaseModel


class NotificationOut(BaseModel):
    id: int
    type: str
    title: str
    body: str
    data: dict[str, Any]
    priority: str
    read: bool
    created_at: datetime


class UnreadCountOut(BaseModel):
    unread: int

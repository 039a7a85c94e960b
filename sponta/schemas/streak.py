from datetime import date
from typing import Optional

from pydantic import BaseModel


class StreakOut(BaseModel):
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[date] = None
    is_active_today: bool

"""Timestamp helpers shared by the stores and the streak engine.

Every timestamp leaving the storage layer is a timezone-aware UTC datetime.
SQLite drops tzinfo on the way back, so reads go through ``ensure_aware``.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from sponta.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def app_timezone() -> ZoneInfo:
    return ZoneInfo(settings.APP_TIMEZONE)


def local_date(value: datetime, tz: Optional[ZoneInfo] = None) -> date:
    """Calendar day of ``value`` in the app timezone (local midnight boundary)."""
    aware = ensure_aware(value)
    return aware.astimezone(tz or app_timezone()).date()


def today_and_yesterday(now: Optional[datetime] = None, tz: Optional[ZoneInfo] = None) -> tuple[date, date]:
    today = local_date(now or utcnow(), tz)
    return today, today - timedelta(days=1)

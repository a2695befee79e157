"""
Timezone-aware datetime helpers.
- Store and compare booking times in UTC.
- "Today", digest windows and ISO week numbers use the business timezone (settings.TZ).
- Starter start dates are stored as wall-clock datetimes in the business timezone.
"""
from datetime import date, datetime, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from app.core.config import settings

UTC = timezone.utc


def business_tz() -> ZoneInfo:
    """Configured business timezone (Europe/Brussels by default)"""
    return ZoneInfo(settings.TZ)


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware). Use for created_at, cancelled_at, completed_at, etc."""
    return datetime.now(UTC)


def today_local() -> date:
    """Calendar date of 'now' in the business timezone"""
    return datetime.now(business_tz()).date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def to_local_naive(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize to a naive wall-clock datetime in the business timezone.

    Naive input is assumed to already be local wall-clock time and is returned unchanged.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(business_tz()).replace(tzinfo=None)


def iso_week(dt: datetime) -> Tuple[int, int]:
    """ISO-8601 (year, week) of a local wall-clock datetime"""
    iso = dt.isocalendar()
    return iso[0], iso[1]


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC."""
    if dt is None:
        return None
    utc = ensure_utc(dt)
    s = utc.isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s

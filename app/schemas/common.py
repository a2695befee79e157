"""
Shared schema helpers
"""
import re
from datetime import datetime
from typing import Optional

from app.utils.datetime_utils import iso_8601_utc

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
COLOR_HEX_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def check_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_RE.match(value):
        raise ValueError("Invalid email address")
    return value


def ser_utc(dt: Optional[datetime]) -> Optional[str]:
    """Serialize stored UTC datetimes (naive values from SQLite are UTC)"""
    return iso_8601_utc(dt) if dt is not None else None

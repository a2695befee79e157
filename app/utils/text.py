"""Free-text normalization for user-entered fields."""
import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def normalize_text(value: Optional[str]) -> Optional[str]:
    """
    Trim and collapse internal whitespace; empty strings become None.

    Examples:
        >>> normalize_text("  Jan   Peeters ")
        'Jan Peeters'
        >>> normalize_text("   ")
        None
    """
    if value is None:
        return None
    value = _WHITESPACE.sub(" ", value).strip()
    return value or None


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Lower-case and trim an email address"""
    if value is None:
        return None
    value = value.strip().lower()
    return value or None

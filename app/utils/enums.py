"""Utility functions for handling enum/string values safely."""
from enum import Enum


def enum_to_str(v):
    """
    Safely convert enum or string value to string.

    Columns store enum values as plain strings, so callers may hand in either.

    Examples:
        >>> enum_to_str(Role.HR_ADMIN)
        'HR_ADMIN'
        >>> enum_to_str('HR_ADMIN')
        'HR_ADMIN'
        >>> enum_to_str(None)
        None
    """
    if v is None:
        return None
    if isinstance(v, Enum):
        return v.value
    return str(v)

"""
Digest types and their date windows

All windows are half-open ``[start, end)`` and expressed as naive midnight
datetimes in the business timezone, matching how starter start dates are stored.
"""
import enum
from datetime import date, datetime, timedelta
from typing import NamedTuple


class DigestType(str, enum.Enum):
    WEEKLY = "WEEKLY_REMINDER"
    MONTHLY = "MONTHLY_SUMMARY"
    QUARTERLY = "QUARTERLY_SUMMARY"
    YEARLY = "YEARLY_SUMMARY"


# NotificationPreference flag consulted for each digest type
PREFERENCE_FLAGS = {
    DigestType.WEEKLY: "weekly_reminder",
    DigestType.MONTHLY: "monthly_summary",
    DigestType.QUARTERLY: "quarterly_summary",
    DigestType.YEARLY: "yearly_summary",
}


class Window(NamedTuple):
    start: datetime
    end: datetime
    label: str

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def _midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


def weekly_window(today: date) -> Window:
    """Starters beginning exactly seven days from today"""
    target = today + timedelta(days=7)
    return Window(_midnight(target), _midnight(target + timedelta(days=1)), target.isoformat())


def monthly_window(today: date) -> Window:
    """The whole previous calendar month"""
    first_this_month = today.replace(day=1)
    last_month_day = first_this_month - timedelta(days=1)
    first_last_month = last_month_day.replace(day=1)
    return Window(
        _midnight(first_last_month),
        _midnight(first_this_month),
        f"{first_last_month.year}-{first_last_month.month:02d}",
    )


def quarterly_window(today: date) -> Window:
    """
    The whole previous calendar quarter

    Jan-Mar rolls back to Q4 (Oct 1 - Dec 31) of the previous year.
    """
    current_quarter = (today.month - 1) // 3 + 1
    if current_quarter == 1:
        quarter, year = 4, today.year - 1
    else:
        quarter, year = current_quarter - 1, today.year

    start = date(year, 3 * (quarter - 1) + 1, 1)
    end = date(year + 1, 1, 1) if quarter == 4 else date(year, 3 * quarter + 1, 1)
    return Window(_midnight(start), _midnight(end), f"Q{quarter} {year}")


def yearly_window(today: date) -> Window:
    """The whole previous calendar year"""
    year = today.year - 1
    return Window(datetime(year, 1, 1), datetime(year + 1, 1, 1), str(year))


_WINDOWS = {
    DigestType.WEEKLY: weekly_window,
    DigestType.MONTHLY: monthly_window,
    DigestType.QUARTERLY: quarterly_window,
    DigestType.YEARLY: yearly_window,
}


def compute_window(digest_type: DigestType, today: date) -> Window:
    return _WINDOWS[DigestType(digest_type)](today)

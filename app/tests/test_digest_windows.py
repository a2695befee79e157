"""
Tests for digest date windows (half-open, business-local midnights)
"""
from datetime import date, datetime

import pytest
from app.services.digest_windows import DigestType, compute_window


def test_weekly_window_is_the_day_one_week_ahead():
    window = compute_window(DigestType.WEEKLY, date(2024, 6, 1))

    assert window.start == datetime(2024, 6, 8)
    assert window.end == datetime(2024, 6, 9)
    assert window.contains(datetime(2024, 6, 8, 10, 0))
    assert not window.contains(datetime(2024, 6, 9, 0, 0))
    assert not window.contains(datetime(2024, 6, 7, 23, 59))


def test_weekly_window_crosses_month_end():
    window = compute_window(DigestType.WEEKLY, date(2024, 12, 28))

    assert window.start == datetime(2025, 1, 4)


def test_monthly_window_is_previous_month():
    window = compute_window(DigestType.MONTHLY, date(2024, 3, 1))

    assert window.start == datetime(2024, 2, 1)
    assert window.end == datetime(2024, 3, 1)
    assert window.contains(datetime(2024, 2, 29, 23, 0))


def test_monthly_window_in_january_is_previous_december():
    window = compute_window(DigestType.MONTHLY, date(2025, 1, 15))

    assert (window.start, window.end) == (datetime(2024, 12, 1), datetime(2025, 1, 1))
    assert window.label == "2024-12"


@pytest.mark.parametrize("today", [date(2025, 1, 1), date(2025, 2, 14), date(2025, 3, 31)])
def test_quarterly_window_rolls_back_to_q4(today):
    window = compute_window(DigestType.QUARTERLY, today)

    assert window.start == datetime(2024, 10, 1)
    assert window.end == datetime(2025, 1, 1)
    assert window.label == "Q4 2024"


@pytest.mark.parametrize("today,start,end", [
    (date(2025, 4, 1), datetime(2025, 1, 1), datetime(2025, 4, 1)),
    (date(2025, 8, 20), datetime(2025, 4, 1), datetime(2025, 7, 1)),
    (date(2025, 12, 31), datetime(2025, 7, 1), datetime(2025, 10, 1)),
])
def test_quarterly_window_previous_quarter(today, start, end):
    window = compute_window(DigestType.QUARTERLY, today)

    assert (window.start, window.end) == (start, end)


def test_yearly_window_is_previous_year():
    window = compute_window(DigestType.YEARLY, date(2025, 1, 1))

    assert (window.start, window.end) == (datetime(2024, 1, 1), datetime(2025, 1, 1))
    assert window.label == "2024"


def test_compute_window_accepts_stored_type_value():
    assert compute_window("MONTHLY_SUMMARY", date(2024, 5, 10)).start == datetime(2024, 4, 1)

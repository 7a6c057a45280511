"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import Tuple

from wallet_tracker.domain.exceptions import InvalidRangeError


def days_in_month(month: int, year: int) -> int:
    """Number of days in the given month, leap years included"""
    if not 1 <= month <= 12:
        raise InvalidRangeError(f"Month must be within 1..12, got {month}")
    if not date.min.year <= year <= date.max.year:
        raise InvalidRangeError(f"Year out of range: {year}")
    return calendar.monthrange(year, month)[1]


def month_range(month: int, year: int) -> Tuple[date, date]:
    """First and last calendar day (inclusive) of a month"""
    last_day = days_in_month(month, year)
    return date(year, month, 1), date(year, month, last_day)


def month_of(day: date) -> Tuple[int, int]:
    """(month, year) pair a date falls into"""
    return day.month, day.year

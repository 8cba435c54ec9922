"""Date manipulation utilities"""

import calendar
from datetime import date


def days_in_month(year: int, month: int) -> int:
    """Length of a calendar month (28-31)"""
    return calendar.monthrange(year, month)[1]


def anchor_to_day(year: int, month: int, day: int) -> date:
    """Date for `day` of the given month, clamped to the month's last day"""
    return date(year, month, min(day, days_in_month(year, month)))


def next_month_on_day(from_date: date, day: int) -> date:
    """`day` of the calendar month after from_date (clamped)"""
    year, month = from_date.year, from_date.month + 1
    if month > 12:
        year, month = year + 1, 1
    return anchor_to_day(year, month, day)


def days_between(start: date, end: date) -> int:
    """Whole days in [start, end); 0 when end is not after start"""
    return max((end - start).days, 0)


def month_bounds(day: date) -> tuple[date, date]:
    """First and last day of the month containing `day`"""
    return date(day.year, day.month, 1), anchor_to_day(day.year, day.month, 31)

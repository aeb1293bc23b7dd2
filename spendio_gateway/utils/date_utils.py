"""Calendar month helpers; months are keyed as YYYY-MM"""

import calendar
from datetime import date
from typing import Tuple


def parse_month(month: str) -> Tuple[int, int]:
    """
    Split a YYYY-MM key into (year, month).

    Raises:
        ValueError: when the key is not a valid calendar month
    """
    year_str, sep, month_str = month.partition("-")
    if not sep or len(year_str) != 4 or len(month_str) != 2:
        raise ValueError(f"Invalid month key: {month!r}")
    year, month_num = int(year_str), int(month_str)
    if not 1 <= month_num <= 12:
        raise ValueError(f"Invalid month key: {month!r}")
    return year, month_num


def month_bounds(month: str) -> Tuple[date, date]:
    """First and last day of the month (inclusive)"""
    year, month_num = parse_month(month)
    last_day = calendar.monthrange(year, month_num)[1]
    return date(year, month_num, 1), date(year, month_num, last_day)


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def previous_month(month: str) -> str:
    year, month_num = parse_month(month)
    if month_num == 1:
        return f"{year - 1:04d}-12"
    return f"{year:04d}-{month_num - 1:02d}"


def shift_month(month: str, delta: int) -> str:
    """Month key `delta` months away; negative goes back in time"""
    year, month_num = parse_month(month)
    index = year * 12 + (month_num - 1) + delta
    return f"{index // 12:04d}-{index % 12 + 1:02d}"

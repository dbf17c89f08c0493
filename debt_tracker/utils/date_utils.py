"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import Optional


def parse_iso_date(value: str) -> Optional[date]:
    """Parse 'YYYY-MM-DD' (or a full ISO timestamp) into a date, None when blank"""
    if not value:
        return None
    return date.fromisoformat(clean_date_cell(value))


def clean_date_cell(value: str) -> str:
    """Trim a spreadsheet timestamp like '2026-01-20T08:00:00.000Z' to '2026-01-20'"""
    if not value:
        return ""
    return value.split("T", 1)[0].strip()


def add_months(from_date: date, months: int = 1) -> date:
    """
    Shift a date by whole calendar months.

    Day-of-month is kept when it exists in the target month, otherwise clamped
    to the month's last day (Jan 31 + 1 month = Feb 29 in 2024, not Mar 2).
    """
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(from_date.day, last_day))

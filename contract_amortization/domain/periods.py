"""Calendar-month arithmetic for schedule periods."""
from __future__ import annotations

from datetime import date


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start``'s month to ``end``'s month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(value: date, months: int) -> date:
    """First day of the month ``months`` after ``value``'s month."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def period_label(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"

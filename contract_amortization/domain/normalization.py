"""Coercion of loosely typed editor values into canonical domain values."""
from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .models import AmortizationEntry


class DateGranularity(str, Enum):
    MONTH = "month"
    DAY = "day"


_STRFTIME_PATTERNS = {
    DateGranularity.MONTH: "%Y-%m",
    DateGranularity.DAY: "%Y-%m-%d",
}

# Token patterns understood by ``format``-style date objects (arrow, pendulum, ...).
_TOKEN_PATTERNS = {
    DateGranularity.MONTH: "YYYY-MM",
    DateGranularity.DAY: "YYYY-MM-DD",
}


@runtime_checkable
class SupportsStrftime(Protocol):
    def strftime(self, fmt: str) -> str:
        ...


def normalize_date(value: Any, granularity: DateGranularity = DateGranularity.MONTH) -> str:
    """Render a period/date value as canonical text, or ``""`` if it cannot be.

    Text passes through unchanged. ``date``/``datetime``/``pandas.Timestamp``
    render through ``strftime``; other objects exposing ``format(pattern)``
    are asked for the token pattern. Anything else becomes ``""``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (date, SupportsStrftime)):
        try:
            return value.strftime(_STRFTIME_PATTERNS[granularity])
        except (ValueError, TypeError):
            # NaT and friends expose strftime but cannot render.
            return ""
    formatter = getattr(value, "format", None)
    if callable(formatter):
        try:
            rendered = formatter(_TOKEN_PATTERNS[granularity])
        except (ValueError, TypeError, KeyError):
            return ""
        return rendered if isinstance(rendered, str) else ""
    return ""


def to_amount(value: Any) -> Decimal | None:
    """Coerce an editor amount to ``Decimal``; ``None`` when absent or unreadable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return Decimal(str(value))
    s = str(value).strip()
    if not s:
        return None
    for ch in [",", "$", "€", "£", "¥", " "]:
        s = s.replace(ch, "")
    try:
        result = Decimal(s)
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def normalize_entry(entry: AmortizationEntry) -> AmortizationEntry:
    """Entry with canonical ``YYYY-MM`` periods and a ``Decimal`` (or ``None``) amount."""
    return replace(
        entry,
        amount=to_amount(entry.amount),
        amortization_period=normalize_date(entry.amortization_period),
        accounting_period=normalize_date(entry.accounting_period),
    )

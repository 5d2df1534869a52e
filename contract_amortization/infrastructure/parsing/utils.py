"""Shared parsing utilities for host payloads."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

import pandas as pd

from contract_amortization.domain.normalization import to_amount


def parse_decimal(value: Any, field: str) -> Decimal:
    """Parse a required amount; unreadable values are a payload error."""
    result = to_amount(value)
    if result is None:
        raise ValueError(f"{field} is not a valid amount: {value!r}")
    return result


def parse_date(value: Any, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field} is not a valid date: {value!r}")
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as exc:
        raise ValueError(f"{field} is not a valid date: {value!r}") from exc


def parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    stamp = pd.to_datetime(value, errors="coerce")
    if pd.isna(stamp):
        return None
    return stamp.to_pydatetime()

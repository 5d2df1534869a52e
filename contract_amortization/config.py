"""Central configuration for the contract amortization package."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timezone, tzinfo
from decimal import ROUND_HALF_UP, Context, Decimal
from enum import Enum
from pathlib import Path
from typing import Mapping

ENV_PREFIX = "CONTRACT_AMORT_"


class DataSourceKind(str, Enum):
    MOCK = "mock"
    HTTP = "http"


@dataclass(slots=True, frozen=True)
class Settings:
    decimal_context: Context
    minor_unit: Decimal
    rounding: str
    timezone: tzinfo
    data_source: DataSourceKind
    api_base_url: str
    request_timeout_s: float
    page_size: int
    archive_dir: Path | None
    log_level: str


def _parse_positive_float(raw: str, name: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _parse_positive_int(raw: str, name: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from ``CONTRACT_AMORT_*`` environment variables."""
    env = os.environ if environ is None else environ

    def get(name: str, default: str) -> str:
        return env.get(f"{ENV_PREFIX}{name}", default).strip()

    source_raw = get("DATA_SOURCE", DataSourceKind.MOCK.value).lower()
    try:
        data_source = DataSourceKind(source_raw)
    except ValueError as exc:
        choices = ", ".join(kind.value for kind in DataSourceKind)
        raise ValueError(f"{ENV_PREFIX}DATA_SOURCE must be one of {choices}, got {source_raw!r}") from exc

    archive_raw = get("ARCHIVE_DIR", "")

    return Settings(
        decimal_context=Context(prec=28, rounding=ROUND_HALF_UP),
        minor_unit=Decimal("0.01"),
        rounding=ROUND_HALF_UP,
        timezone=timezone.utc,
        data_source=data_source,
        api_base_url=get("API_BASE", "http://localhost:8080/api").rstrip("/"),
        request_timeout_s=_parse_positive_float(get("TIMEOUT_S", "10"), f"{ENV_PREFIX}TIMEOUT_S"),
        page_size=_parse_positive_int(get("PAGE_SIZE", "10"), f"{ENV_PREFIX}PAGE_SIZE"),
        archive_dir=Path(archive_raw) if archive_raw else None,
        log_level=get("LOG_LEVEL", "INFO").upper(),
    )


SETTINGS = load_settings()

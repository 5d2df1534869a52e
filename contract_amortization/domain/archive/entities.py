"""Archive domain entities for storing committed schedules."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence


@dataclass(frozen=True)
class ArchiveFile:
    name: str
    content: bytes


@dataclass(frozen=True)
class ArchiveScheduleRequest:
    run_id: str
    contract_id: int | None
    files: Sequence[ArchiveFile]
    metadata: dict[str, str]


@dataclass(frozen=True)
class ArchiveReceipt:
    run_id: str
    location: Path


def iter_all_files(request: ArchiveScheduleRequest) -> Iterable[ArchiveFile]:
    yield from request.files

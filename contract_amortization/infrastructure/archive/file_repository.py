"""Filesystem repository for archiving committed schedules."""
from __future__ import annotations

import json
import re
from pathlib import Path

from contract_amortization.domain.archive.entities import (
    ArchiveFile,
    ArchiveReceipt,
    ArchiveScheduleRequest,
    iter_all_files,
)


def _normalize_run_id(run_id: str) -> str:
    if not run_id:
        return "run"
    digits = re.findall(r"\d", run_id)
    if len(digits) >= 14:
        date_part = "".join(digits[:8])
        time_part = "".join(digits[8:14])
        rest = "".join(digits[14:])
        normalized = f"{date_part}_{time_part}"
        if rest:
            normalized += rest
        return normalized
    sanitized = re.sub(r"[^0-9A-Za-z_-]+", "", run_id.strip())
    return sanitized or "run"


class FileSystemScheduleArchive:
    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def save_run(self, request: ArchiveScheduleRequest) -> ArchiveReceipt:
        normalized_run_id = _normalize_run_id(request.run_id)
        folder = f"contract_{request.contract_id}" if request.contract_id is not None else "unbound"
        run_dir = self._root / folder / normalized_run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        for file in iter_all_files(request):
            self._write_file(run_dir, file)

        manifest = {
            "run_id": normalized_run_id,
            "contract_id": request.contract_id,
            "metadata": dict(request.metadata),
            "files": [self._manifest_entry(file) for file in request.files],
        }
        (run_dir / "manifest.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")

        return ArchiveReceipt(run_id=normalized_run_id, location=run_dir)

    @staticmethod
    def _write_file(run_dir: Path, archive_file: ArchiveFile) -> None:
        target = run_dir / Path(archive_file.name).name
        target.write_bytes(archive_file.content)

    @staticmethod
    def _manifest_entry(archive_file: ArchiveFile) -> dict[str, object]:
        return {"name": archive_file.name, "bytes": len(archive_file.content)}

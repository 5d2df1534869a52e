"""Archive application use cases."""
from __future__ import annotations

from dataclasses import dataclass

from contract_amortization.domain.archive.entities import ArchiveReceipt, ArchiveScheduleRequest
from contract_amortization.infrastructure.archive.file_repository import FileSystemScheduleArchive


@dataclass(slots=True)
class ArchiveScheduleUseCase:
    repository: FileSystemScheduleArchive

    def execute(self, request: ArchiveScheduleRequest) -> ArchiveReceipt:
        return self.repository.save_run(request)

"""Application services orchestrating contract and schedule operations."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from pathlib import PurePath
from typing import Sequence

from contract_amortization.config import SETTINGS
from contract_amortization.domain.errors import DataSourceError
from contract_amortization.domain.models import (
    AmortizationEntry,
    AmortizationSchedule,
    Contract,
    ContractPage,
    ContractUpdate,
)
from contract_amortization.domain.repositories import ContractDirectory, SchedulePersistence
from contract_amortization.domain.services import ScheduleGenerator
from contract_amortization.logging_config import get_logger

from .workflow import ReconciliationWorkflow

logger = get_logger("application.use_cases")


@dataclass(slots=True)
class ScheduleContext:
    directory: ContractDirectory
    persistence: SchedulePersistence | None
    generator: ScheduleGenerator


class ListContractsUseCase:
    def __init__(self, directory: ContractDirectory, default_page_size: int | None = None) -> None:
        self._directory = directory
        self._default_page_size = default_page_size or SETTINGS.page_size

    def execute(self, page: int = 0, size: int | None = None) -> ContractPage:
        size = self._default_page_size if size is None else size
        if page < 0:
            raise ValueError(f"page must be >= 0, got {page}")
        if size <= 0:
            raise ValueError(f"size must be > 0, got {size}")
        return self._directory.list(page, size)


class UploadContractUseCase:
    def __init__(self, directory: ContractDirectory) -> None:
        self._directory = directory

    def execute(self, file_name: str, content: bytes) -> Contract:
        name = PurePath(file_name or "").name
        if not name:
            raise ValueError("Uploaded contract needs a file name")
        contract = self._directory.create(name, content)
        logger.info("contract_uploaded", extra={"contract_id": contract.contract_id, "attachment": name})
        return contract


class UpdateContractUseCase:
    def __init__(self, directory: ContractDirectory) -> None:
        self._directory = directory

    def execute(self, contract_id: int, patch: ContractUpdate) -> Contract:
        patch.validate()
        return self._directory.update(contract_id, patch)


class LoadScheduleUseCase:
    """Fetches (or locally derives) a contract's schedule and seeds a workflow with it."""

    def __init__(self, context: ScheduleContext) -> None:
        self._context = context

    def execute(self, contract_id: int, reference_instant: date | datetime | None = None) -> AmortizationSchedule:
        if self._context.persistence is not None:
            return self._context.persistence.calculate(contract_id)
        contract = self._context.directory.fetch_one(contract_id)
        return self._context.generator.generate(contract, reference_instant)

    def load_into(
        self,
        workflow: ReconciliationWorkflow,
        contract_id: int,
        reference_instant: date | datetime | None = None,
    ) -> bool:
        token = workflow.begin_load()
        try:
            schedule = self.execute(contract_id, reference_instant)
        except DataSourceError as exc:
            workflow.abandon_load(token, str(exc))
            raise
        return workflow.seed(schedule, token=token, contract_id=contract_id)


class SaveScheduleUseCase:
    def __init__(self, persistence: SchedulePersistence) -> None:
        self._persistence = persistence

    def execute(self, contract_id: int | None, entries: Sequence[AmortizationEntry]) -> None:
        if contract_id is None:
            raise ValueError("Schedule is not bound to a contract")
        self._persistence.save_updated(contract_id, entries)
        logger.info("schedule_saved", extra={"contract_id": contract_id, "row_count": len(entries)})

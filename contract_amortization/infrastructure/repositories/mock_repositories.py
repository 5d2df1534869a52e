"""In-memory repositories backing the mock data source."""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import PurePath
from typing import Callable, Iterable, Sequence

from contract_amortization.config import SETTINGS
from contract_amortization.domain.errors import DataSourceError
from contract_amortization.domain.models import (
    AmortizationEntry,
    AmortizationSchedule,
    Contract,
    ContractPage,
    ContractStatus,
    ContractUpdate,
)
from contract_amortization.domain.repositories import ContractDirectory, SchedulePersistence
from contract_amortization.domain.services import ScheduleGenerator

_CST = timezone(timedelta(hours=8))

SAMPLE_CONTRACTS: tuple[Contract, ...] = (
    Contract(
        contract_id=3,
        total_amount=Decimal("8000.00"),
        start_date=date(2024, 3, 1),
        end_date=date(2024, 8, 31),
        tax_rate=Decimal("0.06"),
        vendor_name="Vendor C",
        attachment_name="contract_20240324_150230_x9y8z7w6.pdf",
        created_at=datetime(2024, 3, 24, 15, 2, 30, 123456, tzinfo=_CST),
        status=ContractStatus.ACTIVE,
    ),
    Contract(
        contract_id=2,
        total_amount=Decimal("7500.00"),
        start_date=date(2024, 2, 1),
        end_date=date(2024, 7, 31),
        tax_rate=Decimal("0.06"),
        vendor_name="Vendor B",
        attachment_name="contract_20240224_143052_b2c3d4e5.pdf",
        created_at=datetime(2024, 2, 24, 14, 30, 52, 789012, tzinfo=_CST),
        status=ContractStatus.ACTIVE,
    ),
    Contract(
        contract_id=1,
        total_amount=Decimal("6000.00"),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 6, 30),
        tax_rate=Decimal("0.06"),
        vendor_name="Vendor A",
        attachment_name="contract_20240124_143052_a1b2c3d4.pdf",
        created_at=datetime(2024, 1, 24, 14, 30, 52, 123456, tzinfo=_CST),
        status=ContractStatus.ACTIVE,
    ),
)

# Placeholder terms for uploaded files; document parsing happens on the host.
UPLOAD_DEFAULTS = {
    "total_amount": Decimal("6000.00"),
    "start_date": date(2024, 1, 1),
    "end_date": date(2024, 6, 30),
    "tax_rate": Decimal("0.06"),
}


class InMemoryContractDirectory(ContractDirectory):
    def __init__(
        self,
        contracts: Iterable[Contract] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        source = SAMPLE_CONTRACTS if contracts is None else tuple(contracts)
        self._contracts = {contract.contract_id: contract for contract in source}
        self._clock = clock or (lambda: datetime.now(SETTINGS.timezone))

    def list(self, page: int, size: int) -> ContractPage:
        ordered = sorted(self._contracts.values(), key=lambda c: c.contract_id or 0, reverse=True)
        start = page * size
        return ContractPage(
            records=ordered[start : start + size],
            total_count=len(ordered),
            message="ok",
        )

    def fetch_one(self, contract_id: int) -> Contract:
        try:
            return self._contracts[contract_id]
        except KeyError:
            raise DataSourceError("fetch contract", f"contract {contract_id} not found") from None

    def create(self, file_name: str, content: bytes) -> Contract:
        if not content:
            raise DataSourceError("upload contract", f"{file_name} is empty")
        contract_id = max((cid or 0 for cid in self._contracts), default=0) + 1
        contract = Contract(
            contract_id=contract_id,
            vendor_name=f"Vendor {PurePath(file_name).stem}",
            attachment_name=file_name,
            created_at=self._clock(),
            status=ContractStatus.ACTIVE,
            **UPLOAD_DEFAULTS,
        )
        self._contracts[contract_id] = contract
        return contract

    def update(self, contract_id: int, patch: ContractUpdate) -> Contract:
        current = self.fetch_one(contract_id)
        updated = replace(
            current,
            total_amount=patch.total_amount,
            start_date=patch.start_date,
            end_date=patch.end_date,
            tax_rate=patch.tax_rate,
            vendor_name=patch.vendor_name,
        )
        self._contracts[contract_id] = updated
        return updated


class LocalSchedulePersistence(SchedulePersistence):
    """Computes schedules with the local generator and keeps saved edits in memory."""

    def __init__(self, directory: ContractDirectory, generator: ScheduleGenerator | None = None) -> None:
        self._directory = directory
        self._generator = generator or ScheduleGenerator()
        self._saved: dict[int, tuple[AmortizationEntry, ...]] = {}

    def calculate(self, contract_id: int) -> AmortizationSchedule:
        return self._generator.generate(self._directory.fetch_one(contract_id))

    def save_updated(self, contract_id: int, entries: Sequence[AmortizationEntry]) -> None:
        self._directory.fetch_one(contract_id)
        self._saved[contract_id] = tuple(entries)

    def saved_entries(self, contract_id: int) -> tuple[AmortizationEntry, ...] | None:
        return self._saved.get(contract_id)

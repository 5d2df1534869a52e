"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import AmortizationEntry, AmortizationSchedule, Contract, ContractPage, ContractUpdate


class ContractDirectory(Protocol):
    """Provides contract records from the host system."""

    def list(self, page: int, size: int) -> ContractPage:
        ...

    def fetch_one(self, contract_id: int) -> Contract:
        ...

    def create(self, file_name: str, content: bytes) -> Contract:
        ...

    def update(self, contract_id: int, patch: ContractUpdate) -> Contract:
        ...


class SchedulePersistence(Protocol):
    """Calculates and stores amortization schedules on behalf of the host."""

    def calculate(self, contract_id: int) -> AmortizationSchedule:
        ...

    def save_updated(self, contract_id: int, entries: Sequence[AmortizationEntry]) -> None:
        ...

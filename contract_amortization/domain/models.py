"""Domain models for contract amortization.

Contracts are read-only inputs; schedules and entries are the values the
generator derives from them and the store edits.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Sequence

from .errors import InvalidAmount, InvalidContractField, InvalidContractRange


class ContractStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"


class EntryStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class Scenario(str, Enum):
    """Where a reference instant falls relative to a contract's validity window."""

    BEFORE_START = "BEFORE_START"
    IN_PROGRESS = "IN_PROGRESS"
    AFTER_END = "AFTER_END"


@dataclass(frozen=True)
class Contract:
    total_amount: Decimal
    start_date: date
    end_date: date
    vendor_name: str
    tax_rate: Decimal = Decimal("0")
    attachment_name: str = ""
    created_at: datetime | None = None
    contract_id: int | None = None
    status: ContractStatus = ContractStatus.ACTIVE


@dataclass(frozen=True)
class ContractUpdate:
    """Editable contract fields as submitted from the contract form."""

    total_amount: Decimal
    start_date: date
    end_date: date
    tax_rate: Decimal
    vendor_name: str

    def validate(self) -> None:
        if self.total_amount <= 0:
            raise InvalidAmount(self.total_amount)
        if self.end_date < self.start_date:
            raise InvalidContractRange(self.start_date, self.end_date)
        if not Decimal("0") <= self.tax_rate <= Decimal("1"):
            raise InvalidContractField("tax_rate", f"must be within [0, 1], got {self.tax_rate}")
        if not self.vendor_name or not self.vendor_name.strip():
            raise InvalidContractField("vendor_name", "must not be empty")


@dataclass(frozen=True)
class AmortizationEntry:
    """One scheduled monthly allocation.

    ``id`` is ``None`` until the row has been persisted. Period fields hold
    ``YYYY-MM`` text once normalized; while a row is being edited they may
    carry whatever the editor produced (a ``date``, a formatted object, ...).
    """

    amortization_period: Any = ""
    accounting_period: Any = ""
    amount: Decimal | None = Decimal("0")
    status: EntryStatus = EntryStatus.PENDING
    id: int | None = None


@dataclass(frozen=True)
class AmortizationSchedule:
    total_amount: Decimal
    start_period: str
    end_period: str
    scenario: Scenario
    generated_at: datetime
    entries: tuple[AmortizationEntry, ...] = field(default_factory=tuple)

    def entries_total(self) -> Decimal:
        return sum((entry.amount or Decimal("0") for entry in self.entries), Decimal("0"))


@dataclass(frozen=True)
class ContractPage:
    records: Sequence[Contract]
    total_count: int
    message: str = ""

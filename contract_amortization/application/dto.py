"""Application-level DTOs for the reconciliation workflow."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from contract_amortization.domain.models import AmortizationEntry, Scenario


@dataclass(slots=True, frozen=True)
class CommittedSchedule:
    contract_id: int | None
    entries: Sequence[AmortizationEntry]
    entries_total: Decimal
    expected_total: Decimal | None
    scenario: Scenario | None
    committed_at: datetime

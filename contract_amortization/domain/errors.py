"""Typed exceptions for the amortization core.

Every exception carries a machine-readable ``code`` so callers (and the JSON
log formatter) can branch on type rather than message text.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .results import RowViolation


class AmortizationError(Exception):
    """Base exception for all contract amortization errors."""

    code: str = "AMORTIZATION_ERROR"


class InvalidContractRange(AmortizationError):
    """Contract end date precedes its start date."""

    code: str = "INVALID_CONTRACT_RANGE"

    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(f"Contract end date {end_date} precedes start date {start_date}")


class InvalidAmount(AmortizationError):
    """Contract total amount is zero or negative."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: Decimal):
        self.amount = amount
        super().__init__(f"Contract total amount must be positive, got {amount}")


class InvalidContractField(AmortizationError):
    """A contract field failed validation."""

    code: str = "INVALID_CONTRACT_FIELD"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid contract field {field}: {reason}")


class ValidationError(AmortizationError):
    """One or more schedule rows failed validation; nothing was committed."""

    code: str = "SCHEDULE_VALIDATION_FAILED"

    def __init__(self, violations: Sequence[RowViolation]):
        self.violations = tuple(violations)
        rows = sorted({v.row_index for v in self.violations})
        super().__init__(f"{len(self.violations)} violation(s) in rows {rows}")


class DuplicateEntryError(AmortizationError):
    """Two rows would share the same persisted entry id."""

    code: str = "DUPLICATE_ENTRY"

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Schedule already holds a row with id {entry_id}")


class WorkflowStateError(AmortizationError):
    """Operation is not allowed in the workflow's current state."""

    code: str = "WORKFLOW_STATE"

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while workflow is {state}")


class DataSourceError(AmortizationError):
    """A host data source (contract directory, schedule service) failed."""

    code: str = "DATA_SOURCE_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")

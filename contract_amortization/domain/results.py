"""Domain-level results for schedule validation."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping, Sequence


@dataclass(frozen=True)
class RowViolation:
    """A single rule a schedule row failed."""

    row_index: int
    field: str
    issue_type: str
    message: str
    row_key: str | None = None


@dataclass(frozen=True)
class ValidationReport:
    row_count: int
    entries_total: Decimal
    generated_at: datetime
    violations: Sequence[RowViolation] = field(default_factory=tuple)
    expected_total: Decimal | None = None

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def total_difference(self) -> Decimal | None:
        """Edited total minus the base schedule total. Advisory only."""
        if self.expected_total is None:
            return None
        return self.entries_total - self.expected_total

    def has_total_mismatch(self) -> bool:
        difference = self.total_difference
        return difference is not None and difference != 0

    def invalid_rows(self) -> list[int]:
        return sorted({violation.row_index for violation in self.violations})

    def violations_by_row(self) -> Mapping[int, list[RowViolation]]:
        grouped: dict[int, list[RowViolation]] = defaultdict(list)
        for violation in self.violations:
            grouped[violation.row_index].append(violation)
        return dict(grouped)

    def iter_messages(self) -> Iterable[str]:
        for violation in self.violations:
            yield f"Row {violation.row_index + 1}: {violation.message}"

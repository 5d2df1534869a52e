"""Translate data-grid edits into working-copy operations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import pandas as pd

from contract_amortization.application.store import ScheduleRow
from contract_amortization.application.workflow import ReconciliationWorkflow
from contract_amortization.domain.models import AmortizationEntry, EntryStatus
from contract_amortization.domain.normalization import to_amount

EDITOR_COLUMNS = ["row_key", "amortization_period", "accounting_period", "amount", "status"]


@dataclass(frozen=True)
class SyncResult:
    added: int = 0
    removed: int = 0
    updated: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.updated)


def rows_to_dataframe(rows: Sequence[ScheduleRow]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [
            {
                "row_key": row.key,
                "amortization_period": row.entry.amortization_period,
                "accounting_period": row.entry.accounting_period,
                "amount": None if row.entry.amount is None else float(row.entry.amount),
                "status": row.entry.status.value,
            }
            for row in rows
        ],
        columns=EDITOR_COLUMNS,
    )
    frame["amount"] = pd.to_numeric(frame["amount"], errors="coerce")
    return frame


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _patch_from_record(record: dict[str, Any]) -> dict[str, Any]:
    status = record.get("status")
    return {
        "amortization_period": "" if _blank(record.get("amortization_period")) else record["amortization_period"],
        "accounting_period": "" if _blank(record.get("accounting_period")) else record["accounting_period"],
        "amount": None if _blank(record.get("amount")) else record["amount"],
        "status": EntryStatus.PENDING.value if _blank(status) else str(status).upper(),
    }


def _changes(entry: AmortizationEntry, patch: dict[str, Any]) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for field in ("amortization_period", "accounting_period"):
        if patch[field] != getattr(entry, field):
            changes[field] = patch[field]
    if to_amount(patch["amount"]) != entry.amount:
        changes["amount"] = patch["amount"]
    if patch["status"] != entry.status.value:
        changes["status"] = patch["status"]
    return changes


def apply_editor_changes(workflow: ReconciliationWorkflow, edited: pd.DataFrame) -> SyncResult:
    """Diff an edited grid against the working copy and replay the difference.

    Rows without a known ``row_key`` are additions, known rows with changed
    cells are updates, and working-copy rows missing from the grid are removed.
    """
    current = {row.key: row.entry for row in workflow.store.rows()}
    seen: set[str] = set()
    added = updated = removed = 0

    for record in edited.to_dict("records"):
        key = record.get("row_key")
        patch = _patch_from_record(record)
        if not isinstance(key, str) or key not in current:
            workflow.add(patch)
            added += 1
            continue
        seen.add(key)
        changes = _changes(current[key], patch)
        if changes:
            workflow.update(key, changes)
            updated += 1

    for key in current:
        if key not in seen:
            workflow.remove(key)
            removed += 1

    return SyncResult(added=added, removed=removed, updated=updated)

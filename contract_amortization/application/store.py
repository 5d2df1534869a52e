"""Editable working copy of an amortization schedule."""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping
from uuid import uuid4

from contract_amortization.domain.errors import DuplicateEntryError
from contract_amortization.domain.models import AmortizationEntry, EntryStatus
from contract_amortization.domain.normalization import to_amount
from contract_amortization.logging_config import get_logger

logger = get_logger("application.store")

EDITABLE_FIELDS = frozenset({"amortization_period", "accounting_period", "amount", "status", "id"})


@dataclass(frozen=True)
class ScheduleRow:
    key: str
    entry: AmortizationEntry


def _transient_key() -> str:
    return f"row-{uuid4().hex}"


def _persisted_key(entry_id: int) -> str:
    return f"entry-{entry_id}"


def _coerce_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(patch) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown entry field(s): {', '.join(sorted(unknown))}")
    values = dict(patch)
    if "amount" in values:
        values["amount"] = to_amount(values["amount"])
    if "status" in values:
        values["status"] = EntryStatus(values["status"])
    if "id" in values:
        raw_id = values["id"]
        values["id"] = None if raw_id is None or raw_id == "" else int(raw_id)
    return values


class EditableScheduleStore:
    """Identity-keyed rows of a schedule under edit.

    Rows are addressed by a row key: ``entry-<id>`` for persisted entries and
    a generated ``row-<hex>`` key for rows that have no id yet. Rows keep
    insertion order; new rows are appended.
    """

    def __init__(self, key_factory: Callable[[], str] | None = None) -> None:
        self._key_factory = key_factory or _transient_key
        self._rows: dict[str, AmortizationEntry] = {}
        self._editable: set[str] = set()

    def seed(self, entries: Iterable[AmortizationEntry]) -> None:
        """Replace every row. Amounts are coerced like edits; unreadable ones become ``None``."""
        rows: dict[str, AmortizationEntry] = {}
        seen_ids: set[int] = set()
        for entry in entries:
            entry = replace(entry, amount=to_amount(entry.amount))
            if entry.id is not None:
                if entry.id in seen_ids:
                    raise DuplicateEntryError(entry.id)
                seen_ids.add(entry.id)
                rows[_persisted_key(entry.id)] = entry
            else:
                rows[self._new_key(rows)] = entry
        self._rows = rows
        self._editable = set(rows)
        logger.debug("store_seeded", extra={"row_count": len(rows)})

    def add(self, partial: Mapping[str, Any] | None = None) -> str:
        """Append a row, defaulting every field not in ``partial``.

        Raises ``DuplicateEntryError`` if ``partial`` carries an id another row
        already holds, and ``ValueError`` for fields an entry does not have.
        """
        entry = AmortizationEntry(
            amortization_period="",
            accounting_period="",
            amount=Decimal("0"),
            status=EntryStatus.PENDING,
            id=None,
        )
        if partial:
            entry = replace(entry, **_coerce_patch(partial))
            self._ensure_unique_id(entry.id, exclude=None)
        key = self._new_key(self._rows)
        self._rows[key] = entry
        self._editable.add(key)
        return key

    def remove(self, row_key: str) -> bool:
        if self._rows.pop(row_key, None) is None:
            logger.debug("remove_missing_row", extra={"row_key": row_key})
            return False
        self._editable.discard(row_key)
        return True

    def update(self, row_key: str, patch: Mapping[str, Any]) -> bool:
        current = self._rows.get(row_key)
        if current is None:
            # Deleting a row while its edit is in flight is a normal race.
            logger.warning("update_missing_row", extra={"row_key": row_key})
            return False
        values = _coerce_patch(patch)
        if "id" in values:
            self._ensure_unique_id(values["id"], exclude=row_key)
        self._rows[row_key] = replace(current, **values)
        return True

    def snapshot(self) -> tuple[AmortizationEntry, ...]:
        return tuple(self._rows.values())

    def rows(self) -> tuple[ScheduleRow, ...]:
        return tuple(ScheduleRow(key=key, entry=entry) for key, entry in self._rows.items())

    def get(self, row_key: str) -> AmortizationEntry | None:
        return self._rows.get(row_key)

    @property
    def editable_keys(self) -> frozenset[str]:
        return frozenset(self._editable)

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, row_key: object) -> bool:
        return row_key in self._rows

    def _new_key(self, taken: Mapping[str, Any]) -> str:
        key = self._key_factory()
        while key in taken:
            key = self._key_factory()
        return key

    def _ensure_unique_id(self, entry_id: int | None, exclude: str | None) -> None:
        if entry_id is None:
            return
        for key, entry in self._rows.items():
            if key != exclude and entry.id == entry_id:
                raise DuplicateEntryError(entry_id)

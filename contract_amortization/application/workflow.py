"""Lifecycle of one schedule editing session: seed, edit, then commit or cancel."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Sequence

from contract_amortization.config import SETTINGS
from contract_amortization.domain.errors import ValidationError, WorkflowStateError
from contract_amortization.domain.models import AmortizationEntry, AmortizationSchedule
from contract_amortization.domain.normalization import normalize_entry
from contract_amortization.domain.results import ValidationReport
from contract_amortization.domain.services import ScheduleValidator
from contract_amortization.logging_config import get_logger

from .dto import CommittedSchedule
from .store import EditableScheduleStore

logger = get_logger("application.workflow")

CommitCallback = Callable[[tuple[AmortizationEntry, ...]], None]
CancelCallback = Callable[[], None]


class WorkflowState(str, Enum):
    IDLE = "IDLE"
    EDITING = "EDITING"
    COMMITTED = "COMMITTED"
    CANCELLED = "CANCELLED"


class ReconciliationWorkflow:
    """Drives an EditableScheduleStore from seed to commit or cancel.

    Each asynchronous load is tagged with a session token from
    :meth:`begin_load`; a seed carrying a token older than the latest one is
    dropped, so a slow response can never overwrite a newer schedule.
    """

    def __init__(
        self,
        on_commit: CommitCallback,
        on_cancel: CancelCallback | None = None,
        store: EditableScheduleStore | None = None,
        validator: ScheduleValidator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._on_commit = on_commit
        self._on_cancel = on_cancel
        self._store = store if store is not None else EditableScheduleStore()
        self._validator = validator if validator is not None else ScheduleValidator(clock=clock)
        self._clock = clock if clock is not None else (lambda: datetime.now(SETTINGS.timezone))
        self._state = WorkflowState.IDLE
        self._base_entries: tuple[AmortizationEntry, ...] = ()
        self._base_schedule: AmortizationSchedule | None = None
        self._contract_id: int | None = None
        self._token = 0
        self._committed: CommittedSchedule | None = None

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def store(self) -> EditableScheduleStore:
        return self._store

    @property
    def base_schedule(self) -> AmortizationSchedule | None:
        return self._base_schedule

    @property
    def contract_id(self) -> int | None:
        return self._contract_id

    @property
    def committed(self) -> CommittedSchedule | None:
        return self._committed

    def begin_load(self) -> int:
        self._token += 1
        return self._token

    def is_current(self, token: int) -> bool:
        return token == self._token

    def abandon_load(self, token: int, reason: str = "") -> None:
        logger.warning(
            "schedule_load_failed",
            extra={"session_token": token, "state": self._state, "reason": reason},
        )

    def seed(
        self,
        source: AmortizationSchedule | Iterable[AmortizationEntry],
        token: int | None = None,
        contract_id: int | None = None,
    ) -> bool:
        if token is not None and not self.is_current(token):
            logger.info("stale_seed_discarded", extra={"session_token": token, "current_token": self._token})
            return False
        if token is None:
            self._token += 1

        if isinstance(source, AmortizationSchedule):
            schedule: AmortizationSchedule | None = source
            entries = tuple(source.entries)
        else:
            schedule = None
            entries = tuple(source)

        self._store.seed(entries)
        self._base_entries = entries
        self._base_schedule = schedule
        self._contract_id = contract_id
        self._committed = None
        self._state = WorkflowState.EDITING
        logger.info(
            "session_started",
            extra={"contract_id": contract_id, "row_count": len(entries), "session_token": self._token},
        )
        return True

    def add(self, partial: Mapping[str, Any] | None = None) -> str:
        self._require_editing("add rows")
        return self._store.add(partial)

    def remove(self, row_key: str) -> bool:
        self._require_editing("remove rows")
        return self._store.remove(row_key)

    def update(self, row_key: str, patch: Mapping[str, Any]) -> bool:
        self._require_editing("update rows")
        return self._store.update(row_key, patch)

    def validate(self, entries: Sequence[AmortizationEntry] | None = None) -> ValidationReport:
        """Check every row; the report is ok only if no row fails."""
        row_keys: list[str] | None = None
        if entries is None:
            rows = self._store.rows()
            row_keys = [row.key for row in rows]
            entries = [row.entry for row in rows]
        normalized = [normalize_entry(entry) for entry in entries]
        return self._validator.validate(normalized, expected_total=self._expected_total(), row_keys=row_keys)

    def confirm(self) -> CommittedSchedule:
        self._require_editing("confirm")
        rows = self._store.rows()
        entries = tuple(normalize_entry(row.entry) for row in rows)
        report = self._validator.validate(
            entries,
            expected_total=self._expected_total(),
            row_keys=[row.key for row in rows],
        )
        if not report.ok:
            logger.info(
                "schedule_confirm_rejected",
                extra={"contract_id": self._contract_id, "invalid_rows": report.invalid_rows()},
            )
            raise ValidationError(report.violations)

        self._on_commit(entries)

        self._committed = CommittedSchedule(
            contract_id=self._contract_id,
            entries=entries,
            entries_total=report.entries_total,
            expected_total=report.expected_total,
            scenario=self._base_schedule.scenario if self._base_schedule else None,
            committed_at=self._clock(),
        )
        self._state = WorkflowState.COMMITTED
        if report.has_total_mismatch():
            logger.warning(
                "schedule_total_mismatch",
                extra={"contract_id": self._contract_id, "difference": report.total_difference},
            )
        logger.info("schedule_committed", extra={"contract_id": self._contract_id, "row_count": len(entries)})
        return self._committed

    def cancel(self) -> None:
        if self._state is WorkflowState.COMMITTED:
            logger.info("cancel_after_commit_ignored", extra={"contract_id": self._contract_id})
            return
        self._token += 1
        self._store.seed(self._base_entries)
        self._state = WorkflowState.CANCELLED
        logger.info("session_cancelled", extra={"contract_id": self._contract_id})
        if self._on_cancel is not None:
            self._on_cancel()

    def _expected_total(self) -> Decimal | None:
        return self._base_schedule.total_amount if self._base_schedule is not None else None

    def _require_editing(self, operation: str) -> None:
        if self._state is not WorkflowState.EDITING:
            raise WorkflowStateError(operation, self._state.value)

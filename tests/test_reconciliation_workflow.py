from datetime import date
from decimal import Decimal

import pytest

from conftest import make_contract
from contract_amortization.application.store import EditableScheduleStore
from contract_amortization.application.workflow import ReconciliationWorkflow, WorkflowState
from contract_amortization.domain.errors import DataSourceError, ValidationError, WorkflowStateError
from contract_amortization.domain.models import AmortizationEntry, Scenario


class Recorder:
    def __init__(self) -> None:
        self.commits: list[tuple[AmortizationEntry, ...]] = []
        self.cancels = 0

    def on_commit(self, entries) -> None:
        self.commits.append(entries)

    def on_cancel(self) -> None:
        self.cancels += 1


class MonthToken:
    """Stand-in for a date-picker value exposing ``format(pattern)``."""

    def __init__(self, year: int, month: int) -> None:
        self.year = year
        self.month = month

    def format(self, pattern: str) -> str:
        assert pattern == "YYYY-MM"
        return f"{self.year:04d}-{self.month:02d}"


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def workflow(recorder, key_factory, clock) -> ReconciliationWorkflow:
    return ReconciliationWorkflow(
        on_commit=recorder.on_commit,
        on_cancel=recorder.on_cancel,
        store=EditableScheduleStore(key_factory=key_factory),
        clock=clock,
    )


@pytest.fixture
def schedule(generator):
    return generator.generate(make_contract("100.00", date(2024, 1, 1), date(2024, 3, 31)))


def test_starts_idle_and_rejects_edits(workflow):
    assert workflow.state is WorkflowState.IDLE

    with pytest.raises(WorkflowStateError):
        workflow.add()
    with pytest.raises(WorkflowStateError):
        workflow.confirm()


def test_seed_enters_editing(workflow, schedule):
    assert workflow.seed(schedule, contract_id=1) is True

    assert workflow.state is WorkflowState.EDITING
    assert workflow.store.snapshot() == schedule.entries
    assert workflow.base_schedule is schedule
    assert workflow.contract_id == 1


def test_confirm_commits_full_snapshot_once(workflow, schedule, recorder):
    workflow.seed(schedule, contract_id=1)

    committed = workflow.confirm()

    assert recorder.commits == [schedule.entries]
    assert workflow.state is WorkflowState.COMMITTED
    assert committed.entries == schedule.entries
    assert committed.entries_total == Decimal("100.00")
    assert committed.contract_id == 1
    assert committed.scenario is Scenario.IN_PROGRESS
    assert workflow.committed is committed


def test_confirm_with_invalid_rows_keeps_editing(workflow, schedule, recorder):
    workflow.seed(schedule)
    new_key = workflow.add()
    first_key = workflow.store.rows()[0].key
    workflow.update(first_key, {"amount": "40.00"})

    with pytest.raises(ValidationError) as excinfo:
        workflow.confirm()

    assert recorder.commits == []
    assert workflow.state is WorkflowState.EDITING
    assert {v.row_key for v in excinfo.value.violations} == {new_key}
    assert excinfo.value.code == "SCHEDULE_VALIDATION_FAILED"
    # Edits survive a failed confirm.
    assert workflow.store.get(first_key).amount == Decimal("40.00")
    assert new_key in workflow.store


@pytest.mark.parametrize("amount", ["0", "-1", None])
def test_confirm_never_commits_non_positive_amounts(workflow, schedule, recorder, amount):
    workflow.seed(schedule)
    workflow.update(workflow.store.rows()[1].key, {"amount": amount})

    with pytest.raises(ValidationError):
        workflow.confirm()

    assert recorder.commits == []


def test_fixing_rows_then_confirming_succeeds(workflow, schedule, recorder):
    workflow.seed(schedule)
    key = workflow.add()
    with pytest.raises(ValidationError):
        workflow.confirm()

    workflow.update(key, {"amortization_period": "2024-04", "accounting_period": "2024-04", "amount": "10"})
    committed = workflow.confirm()

    assert len(recorder.commits) == 1
    assert len(committed.entries) == 4
    assert committed.expected_total == Decimal("100.00")
    assert committed.entries_total == Decimal("110.00")


def test_confirm_normalizes_period_values(workflow, recorder):
    workflow.seed([])
    key = workflow.add(
        {
            "amortization_period": date(2024, 7, 15),
            "accounting_period": MonthToken(2024, 8),
            "amount": Decimal("5"),
        }
    )

    workflow.confirm()

    (entry,) = recorder.commits[0]
    assert entry.amortization_period == "2024-07"
    assert entry.accounting_period == "2024-08"
    # The working copy is not rewritten.
    assert workflow.store.get(key).amortization_period == date(2024, 7, 15)


def test_unformattable_period_fails_validation(workflow, recorder):
    workflow.seed([])
    workflow.add({"amortization_period": 202407, "accounting_period": "2024-07", "amount": "1"})

    with pytest.raises(ValidationError) as excinfo:
        workflow.confirm()

    assert [v.field for v in excinfo.value.violations] == ["amortization_period"]
    assert recorder.commits == []


def test_cancel_restores_seeded_entries(workflow, schedule, recorder):
    workflow.seed(schedule)
    workflow.add()
    workflow.remove(workflow.store.rows()[0].key)
    workflow.update(workflow.store.rows()[0].key, {"amount": "1"})

    workflow.cancel()

    assert workflow.state is WorkflowState.CANCELLED
    assert workflow.store.snapshot() == schedule.entries
    assert recorder.cancels == 1
    assert recorder.commits == []


def test_cancel_from_idle_succeeds(workflow, recorder):
    workflow.cancel()

    assert workflow.state is WorkflowState.CANCELLED
    assert recorder.cancels == 1


def test_cancel_after_commit_is_ignored(workflow, schedule, recorder):
    workflow.seed(schedule)
    workflow.confirm()

    workflow.cancel()

    assert workflow.state is WorkflowState.COMMITTED
    assert recorder.cancels == 0


def test_reseed_while_editing_discards_edits(workflow, schedule, generator):
    workflow.seed(schedule)
    workflow.add()
    other = generator.generate(make_contract("6000.00", date(2024, 1, 1), date(2024, 6, 30)))

    workflow.seed(other)

    assert workflow.state is WorkflowState.EDITING
    assert workflow.store.snapshot() == other.entries


def test_seed_after_commit_starts_new_session(workflow, schedule):
    workflow.seed(schedule)
    workflow.confirm()

    workflow.seed(schedule)

    assert workflow.state is WorkflowState.EDITING
    assert workflow.committed is None


def test_stale_seed_is_discarded(workflow, schedule, generator):
    slow = workflow.begin_load()
    fast = workflow.begin_load()
    newer = generator.generate(make_contract("6000.00", date(2024, 1, 1), date(2024, 6, 30)))

    assert workflow.seed(newer, token=fast) is True
    assert workflow.seed(schedule, token=slow) is False

    assert workflow.store.snapshot() == newer.entries
    assert workflow.is_current(fast)


def test_direct_seed_invalidates_in_flight_loads(workflow, schedule):
    token = workflow.begin_load()
    workflow.seed(schedule)

    assert workflow.seed([], token=token) is False
    assert workflow.store.snapshot() == schedule.entries


def test_abandoned_load_stays_idle(workflow):
    token = workflow.begin_load()

    workflow.abandon_load(token, "timeout")

    assert workflow.state is WorkflowState.IDLE


def test_commit_callback_failure_keeps_editing(schedule, key_factory, clock):
    def failing_commit(entries):
        raise DataSourceError("save schedule", "HTTP 503")

    workflow = ReconciliationWorkflow(
        on_commit=failing_commit,
        store=EditableScheduleStore(key_factory=key_factory),
        clock=clock,
    )
    workflow.seed(schedule)

    with pytest.raises(DataSourceError):
        workflow.confirm()

    assert workflow.state is WorkflowState.EDITING
    assert workflow.committed is None


def test_validate_reports_total_difference(workflow, schedule):
    workflow.seed(schedule)
    workflow.remove(workflow.store.rows()[-1].key)

    report = workflow.validate()

    assert report.ok
    assert report.total_difference == Decimal("-33.34")


def test_validate_explicit_entries(workflow):
    report = workflow.validate([AmortizationEntry("2024-01", "", Decimal("1"))])

    assert not report.ok
    assert report.violations[0].field == "accounting_period"


def test_uses_the_store_it_is_given(recorder, key_factory):
    store = EditableScheduleStore(key_factory=key_factory)
    wf = ReconciliationWorkflow(on_commit=recorder.on_commit, store=store)

    assert wf.store is store
    wf.seed([AmortizationEntry("2024-01", "2024-01", Decimal("5"))])
    assert [row.key for row in store.rows()] == ["row-1"]


@pytest.mark.parametrize("amount", [100.0, "100.00", 100])
def test_seeded_amounts_of_any_numeric_type_commit(workflow, recorder, amount):
    workflow.seed([AmortizationEntry("2024-01", "2024-01", amount)])

    committed = workflow.confirm()

    assert committed.entries_total == Decimal("100")
    assert recorder.commits[0][0].amount == Decimal("100")


def test_unreadable_seeded_amount_is_reported_not_raised(workflow, recorder):
    workflow.seed([AmortizationEntry("2024-01", "2024-01", "n/a")])

    with pytest.raises(ValidationError) as excinfo:
        workflow.confirm()

    assert [v.issue_type for v in excinfo.value.violations] == ["missing_amount"]
    assert workflow.state is WorkflowState.EDITING
    assert recorder.commits == []


def test_validate_coerces_explicit_float_amounts(workflow):
    report = workflow.validate([AmortizationEntry("2024-01", "2024-01", 12.5)])

    assert report.ok
    assert report.entries_total == Decimal("12.5")

"""Domain services: schedule generation, scenario classification, row validation."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Sequence

from contract_amortization.config import SETTINGS
from contract_amortization.logging_config import get_logger

from .errors import InvalidAmount, InvalidContractRange
from .models import AmortizationEntry, AmortizationSchedule, Contract, EntryStatus, Scenario
from .periods import add_months, months_between, period_label
from .results import RowViolation, ValidationReport

logger = get_logger("domain.services")

Clock = Callable[[], datetime]


def _default_clock() -> datetime:
    return datetime.now(SETTINGS.timezone)


def _as_date(instant: date | datetime) -> date:
    return instant.date() if isinstance(instant, datetime) else instant


class ScenarioClassifier:
    """Tags a contract as not yet started, running, or finished."""

    def classify(self, contract: Contract, reference_instant: date | datetime) -> Scenario:
        reference = _as_date(reference_instant)
        if reference < contract.start_date:
            return Scenario.BEFORE_START
        if reference <= contract.end_date:
            return Scenario.IN_PROGRESS
        return Scenario.AFTER_END


class ScheduleGenerator:
    """Splits a contract's total evenly across the calendar months it covers.

    The first ``n - 1`` monthly amounts are rounded half-up to the minor
    unit; the last month takes whatever remains, so the entries always sum
    to the contract total exactly.
    """

    def __init__(
        self,
        classifier: ScenarioClassifier | None = None,
        clock: Clock | None = None,
        minor_unit: Decimal | None = None,
        rounding: str | None = None,
    ) -> None:
        self._classifier = classifier or ScenarioClassifier()
        self._clock = clock or _default_clock
        self._minor_unit = minor_unit if minor_unit is not None else SETTINGS.minor_unit
        self._rounding = rounding or SETTINGS.rounding

    def generate(
        self,
        contract: Contract,
        reference_instant: date | datetime | None = None,
    ) -> AmortizationSchedule:
        if contract.total_amount <= 0:
            raise InvalidAmount(contract.total_amount)
        if contract.end_date < contract.start_date:
            raise InvalidContractRange(contract.start_date, contract.end_date)

        generated_at = self._clock()
        month_count = months_between(contract.start_date, contract.end_date) + 1
        amounts = self._split(contract.total_amount, month_count)

        entries = []
        for offset, amount in enumerate(amounts):
            label = period_label(add_months(contract.start_date, offset))
            entries.append(
                AmortizationEntry(
                    amortization_period=label,
                    accounting_period=label,
                    amount=amount,
                    status=EntryStatus.PENDING,
                    id=None,
                )
            )

        scenario = self._classifier.classify(
            contract, reference_instant if reference_instant is not None else generated_at
        )

        logger.debug(
            "schedule_generated",
            extra={
                "contract_id": contract.contract_id,
                "total_amount": contract.total_amount,
                "months": month_count,
                "scenario": scenario,
            },
        )

        return AmortizationSchedule(
            total_amount=contract.total_amount,
            start_period=period_label(contract.start_date),
            end_period=period_label(contract.end_date),
            scenario=scenario,
            generated_at=generated_at,
            entries=tuple(entries),
        )

    def _split(self, total: Decimal, count: int) -> list[Decimal]:
        share = SETTINGS.decimal_context.divide(total, Decimal(count))
        leading = [share.quantize(self._minor_unit, rounding=self._rounding) for _ in range(count - 1)]
        last = total - sum(leading, Decimal("0"))
        return leading + [last]


class ScheduleValidator:
    """Row-level completeness rules applied before a schedule is committed."""

    PERIOD_FIELDS = ("amortization_period", "accounting_period")

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or _default_clock

    def validate(
        self,
        entries: Sequence[AmortizationEntry],
        expected_total: Decimal | None = None,
        row_keys: Sequence[str] | None = None,
    ) -> ValidationReport:
        violations: list[RowViolation] = []
        total = Decimal("0")

        for index, entry in enumerate(entries):
            key = row_keys[index] if row_keys is not None else None
            for field_name in self.PERIOD_FIELDS:
                value = getattr(entry, field_name)
                if not isinstance(value, str) or not value.strip():
                    violations.append(
                        RowViolation(
                            row_index=index,
                            field=field_name,
                            issue_type="missing_period",
                            message=f"{field_name} is required",
                            row_key=key,
                        )
                    )

            amount = entry.amount
            if amount is None:
                violations.append(
                    RowViolation(
                        row_index=index,
                        field="amount",
                        issue_type="missing_amount",
                        message="amount is required",
                        row_key=key,
                    )
                )
            elif amount <= 0:
                violations.append(
                    RowViolation(
                        row_index=index,
                        field="amount",
                        issue_type="non_positive_amount",
                        message=f"amount must be greater than 0, got {amount}",
                        row_key=key,
                    )
                )
            else:
                total += amount

        return ValidationReport(
            row_count=len(entries),
            entries_total=total,
            generated_at=self._clock(),
            violations=tuple(violations),
            expected_total=expected_total,
        )

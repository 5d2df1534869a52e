from datetime import date, datetime, timezone
from decimal import Decimal
from itertools import count

import pytest

from contract_amortization.application.store import EditableScheduleStore
from contract_amortization.domain.models import Contract
from contract_amortization.domain.services import ScheduleGenerator
from contract_amortization.logging_config import reset_logging

FIXED_NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def generator(clock) -> ScheduleGenerator:
    return ScheduleGenerator(clock=clock)


@pytest.fixture
def key_factory():
    counter = count(1)
    return lambda: f"row-{next(counter)}"


@pytest.fixture
def store(key_factory) -> EditableScheduleStore:
    return EditableScheduleStore(key_factory=key_factory)


def make_contract(amount: str, start: date, end: date, contract_id: int | None = 1) -> Contract:
    return Contract(
        contract_id=contract_id,
        total_amount=Decimal(amount),
        start_date=start,
        end_date=end,
        vendor_name="Vendor A",
        tax_rate=Decimal("0.06"),
    )

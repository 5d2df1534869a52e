from datetime import date, datetime, timezone

import pytest

from conftest import make_contract
from contract_amortization.domain.models import Scenario
from contract_amortization.domain.services import ScenarioClassifier

CONTRACT = make_contract("6000.00", date(2024, 1, 1), date(2024, 6, 30))


@pytest.mark.parametrize(
    "reference, expected",
    [
        (date(2023, 12, 31), Scenario.BEFORE_START),
        (date(2024, 1, 1), Scenario.IN_PROGRESS),
        (date(2024, 3, 15), Scenario.IN_PROGRESS),
        (date(2024, 6, 30), Scenario.IN_PROGRESS),
        (date(2024, 7, 1), Scenario.AFTER_END),
    ],
)
def test_classify_by_date(reference, expected):
    assert ScenarioClassifier().classify(CONTRACT, reference) is expected


def test_start_instant_is_in_progress():
    instant = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)

    assert ScenarioClassifier().classify(CONTRACT, instant) is Scenario.IN_PROGRESS


def test_last_day_is_in_progress_until_midnight():
    instant = datetime(2024, 6, 30, 23, 59, 59)

    assert ScenarioClassifier().classify(CONTRACT, instant) is Scenario.IN_PROGRESS

import csv
import io
import json
from decimal import Decimal

import pandas as pd
import pytest

from conftest import FIXED_NOW
from contract_amortization.application.dto import CommittedSchedule
from contract_amortization.domain.models import AmortizationEntry, EntryStatus, Scenario
from contract_amortization.domain.results import RowViolation, ValidationReport
from contract_amortization.presentation.schedule_report import (
    build_archive_request,
    entries_to_dataframe,
    render_csv,
    render_html,
    render_xlsx,
    violations_to_rows,
)

ENTRIES = (
    AmortizationEntry("2024-01", "2024-01", Decimal("33.33"), EntryStatus.COMPLETED, 11),
    AmortizationEntry("2024-02", "2024-02", Decimal("33.33")),
    AmortizationEntry("2024-03", "2024-03", Decimal("33.34")),
)


def test_render_csv():
    rows = list(csv.DictReader(io.StringIO(render_csv(ENTRIES).decode("utf-8"))))

    assert rows[0] == {
        "amortization_period": "2024-01",
        "accounting_period": "2024-01",
        "amount": "33.33",
        "status": "COMPLETED",
        "id": "11",
    }
    assert rows[2]["amount"] == "33.34"
    assert rows[2]["id"] == ""


def test_render_csv_empty_has_header():
    text = render_csv([]).decode("utf-8")

    assert text.strip() == "amortization_period,accounting_period,amount,status,id"


def test_render_html():
    html = render_html(ENTRIES)

    assert html.startswith("<table>")
    assert html.count("<tr>") == 4
    assert "<td>33.34</td>" in html
    assert render_html([]) == "<p>No amortization entries.</p>"


def test_dataframe_amount_is_numeric():
    frame = entries_to_dataframe(ENTRIES + (AmortizationEntry("2024-04", "2024-04", None),))

    assert frame["amount"].iloc[:3].sum() == pytest.approx(100.0)
    assert pd.isna(frame["amount"].iloc[3])


def test_render_xlsx_reads_back():
    frame = pd.read_excel(io.BytesIO(render_xlsx(ENTRIES)), sheet_name="Schedule", engine="openpyxl")

    assert list(frame.columns) == ["amortization_period", "accounting_period", "amount", "status", "id"]
    assert list(frame["amortization_period"]) == ["2024-01", "2024-02", "2024-03"]
    assert round(frame["amount"].sum(), 2) == 100.0


def test_violations_to_rows_are_one_based():
    report = ValidationReport(
        row_count=2,
        entries_total=Decimal("10"),
        generated_at=FIXED_NOW,
        violations=(RowViolation(1, "amount", "non_positive_amount", "amount must be greater than 0, got 0"),),
    )

    assert violations_to_rows(report) == [
        {
            "row": "2",
            "field": "amount",
            "issue_type": "non_positive_amount",
            "message": "amount must be greater than 0, got 0",
        }
    ]


def test_build_archive_request():
    committed = CommittedSchedule(
        contract_id=5,
        entries=ENTRIES,
        entries_total=Decimal("100.00"),
        expected_total=Decimal("100.00"),
        scenario=Scenario.IN_PROGRESS,
        committed_at=FIXED_NOW,
    )

    request = build_archive_request(committed)

    assert request.run_id == "20240315_093000"
    assert request.contract_id == 5
    assert [f.name for f in request.files] == ["schedule.json", "schedule.csv", "schedule.xlsx"]
    document = json.loads(request.files[0].content)
    assert document["contractId"] == 5
    assert len(document["entries"]) == 3
    assert request.metadata["scenario"] == "IN_PROGRESS"
    assert request.metadata["entries_total"] == "100.00"


def test_export_keeps_sub_cent_remainder():
    entries = [AmortizationEntry("2024-01", "2024-01", Decimal("33.333"))]

    rows = list(csv.DictReader(io.StringIO(render_csv(entries).decode("utf-8"))))

    assert rows[0]["amount"] == "33.333"


def test_render_html_escapes_typed_periods():
    html = render_html([AmortizationEntry("<b>2024-01</b>", "2024-01 & co", Decimal("1.00"))])

    assert "<b>" not in html
    assert "<td>&lt;b&gt;2024-01&lt;/b&gt;</td>" in html
    assert "<td>2024-01 &amp; co</td>" in html

"""Report generators for amortization schedules."""
from __future__ import annotations

import csv
import html
import io
import json
from typing import Sequence

import pandas as pd

from contract_amortization.application.dto import CommittedSchedule
from contract_amortization.domain.archive.entities import ArchiveFile, ArchiveScheduleRequest
from contract_amortization.domain.models import AmortizationEntry
from contract_amortization.domain.results import ValidationReport
from contract_amortization.infrastructure.parsing.payloads import entries_to_payload

COLUMNS = ["amortization_period", "accounting_period", "amount", "status", "id"]


def entries_to_rows(entries: Sequence[AmortizationEntry]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for entry in entries:
        rows.append(
            {
                "amortization_period": str(entry.amortization_period or ""),
                "accounting_period": str(entry.accounting_period or ""),
                "amount": "" if entry.amount is None else str(entry.amount),
                "status": entry.status.value,
                "id": "" if entry.id is None else str(entry.id),
            }
        )
    return rows


def entries_to_dataframe(entries: Sequence[AmortizationEntry]) -> pd.DataFrame:
    frame = pd.DataFrame(entries_to_rows(entries), columns=COLUMNS)
    frame["amount"] = pd.to_numeric(frame["amount"], errors="coerce")
    return frame


def violations_to_rows(report: ValidationReport) -> list[dict[str, str]]:
    return [
        {
            "row": str(violation.row_index + 1),
            "field": violation.field,
            "issue_type": violation.issue_type,
            "message": violation.message,
        }
        for violation in report.violations
    ]


def render_csv(entries: Sequence[AmortizationEntry]) -> bytes:
    rows = entries_to_rows(entries)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=COLUMNS)
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_html(entries: Sequence[AmortizationEntry]) -> str:
    rows = entries_to_rows(entries)
    if not rows:
        return "<p>No amortization entries.</p>"
    header = "".join(f"<th>{col}</th>" for col in COLUMNS)
    body_html = "".join(
        "<tr>" + "".join(f"<td>{html.escape(row[col])}</td>" for col in COLUMNS) + "</tr>" for row in rows
    )
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"


def render_xlsx(entries: Sequence[AmortizationEntry], sheet_name: str = "Schedule") -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        entries_to_dataframe(entries).to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


def build_archive_request(committed: CommittedSchedule, run_id: str | None = None) -> ArchiveScheduleRequest:
    stamp = committed.committed_at
    document = {
        "contractId": committed.contract_id,
        "committedAt": stamp.isoformat(),
        "entries": entries_to_payload(committed.entries),
    }
    metadata = {
        "entries_total": str(committed.entries_total),
        "expected_total": "" if committed.expected_total is None else str(committed.expected_total),
        "scenario": committed.scenario.value if committed.scenario else "",
        "committed_at": stamp.isoformat(),
    }
    return ArchiveScheduleRequest(
        run_id=run_id or stamp.strftime("%Y%m%d_%H%M%S"),
        contract_id=committed.contract_id,
        files=[
            ArchiveFile(name="schedule.json", content=json.dumps(document, indent=2).encode("utf-8")),
            ArchiveFile(name="schedule.csv", content=render_csv(committed.entries)),
            ArchiveFile(name="schedule.xlsx", content=render_xlsx(committed.entries)),
        ],
        metadata=metadata,
    )

"""Conversion between camelCase JSON payloads and domain records."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Sequence

from contract_amortization.domain.models import (
    AmortizationEntry,
    AmortizationSchedule,
    Contract,
    ContractPage,
    ContractStatus,
    ContractUpdate,
    EntryStatus,
    Scenario,
)
from contract_amortization.domain.normalization import to_amount
from contract_amortization.infrastructure.parsing.utils import parse_date, parse_decimal, parse_timestamp

# Codes used by the schedule service for the three scenarios.
SCENARIO_ALIASES = {
    "SCENARIO_1": Scenario.BEFORE_START,
    "SCENARIO_2": Scenario.IN_PROGRESS,
    "SCENARIO_3": Scenario.AFTER_END,
}


def _amount_to_json(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


def parse_scenario(value: Any) -> Scenario:
    text = str(value or "").strip().upper()
    if text in SCENARIO_ALIASES:
        return SCENARIO_ALIASES[text]
    return Scenario(text)


def parse_contract_status(value: Any) -> ContractStatus:
    if value is None or value == "":
        return ContractStatus.ACTIVE
    return ContractStatus(str(value).strip().upper())


def contract_from_payload(payload: Mapping[str, Any]) -> Contract:
    raw_id = payload.get("contractId")
    return Contract(
        contract_id=None if raw_id is None else int(raw_id),
        total_amount=parse_decimal(payload.get("totalAmount"), "totalAmount"),
        start_date=parse_date(payload.get("startDate"), "startDate"),
        end_date=parse_date(payload.get("endDate"), "endDate"),
        tax_rate=to_amount(payload.get("taxRate")) or Decimal("0"),
        vendor_name=str(payload.get("vendorName") or ""),
        attachment_name=str(payload.get("attachmentName") or ""),
        created_at=parse_timestamp(payload.get("createdAt")),
        status=parse_contract_status(payload.get("status")),
    )


def contract_to_payload(contract: Contract) -> dict[str, Any]:
    return {
        "contractId": contract.contract_id,
        "totalAmount": _amount_to_json(contract.total_amount),
        "startDate": contract.start_date.isoformat(),
        "endDate": contract.end_date.isoformat(),
        "taxRate": _amount_to_json(contract.tax_rate),
        "vendorName": contract.vendor_name,
        "attachmentName": contract.attachment_name,
        "createdAt": contract.created_at.isoformat() if contract.created_at else None,
        "status": contract.status.value,
    }


def contract_update_to_payload(patch: ContractUpdate) -> dict[str, Any]:
    return {
        "totalAmount": _amount_to_json(patch.total_amount),
        "startDate": patch.start_date.isoformat(),
        "endDate": patch.end_date.isoformat(),
        "taxRate": _amount_to_json(patch.tax_rate),
        "vendorName": patch.vendor_name,
    }


def page_from_payload(payload: Mapping[str, Any]) -> ContractPage:
    records = [contract_from_payload(item) for item in payload.get("contracts") or []]
    return ContractPage(
        records=records,
        total_count=int(payload.get("totalCount", len(records))),
        message=str(payload.get("message") or ""),
    )


def entry_from_payload(payload: Mapping[str, Any]) -> AmortizationEntry:
    raw_id = payload.get("id")
    status = payload.get("status") or EntryStatus.PENDING.value
    return AmortizationEntry(
        id=None if raw_id is None else int(raw_id),
        amortization_period=str(payload.get("amortizationPeriod") or ""),
        accounting_period=str(payload.get("accountingPeriod") or ""),
        amount=to_amount(payload.get("amount")),
        status=EntryStatus(str(status).upper()),
    )


def entry_to_payload(entry: AmortizationEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "amortizationPeriod": entry.amortization_period,
        "accountingPeriod": entry.accounting_period,
        "amount": _amount_to_json(entry.amount),
        "status": entry.status.value,
    }


def entries_to_payload(entries: Sequence[AmortizationEntry]) -> list[dict[str, Any]]:
    return [entry_to_payload(entry) for entry in entries]


def schedule_from_payload(payload: Mapping[str, Any]) -> AmortizationSchedule:
    generated_at = parse_timestamp(payload.get("generatedAt"))
    if generated_at is None:
        raise ValueError(f"generatedAt is not a valid timestamp: {payload.get('generatedAt')!r}")
    return AmortizationSchedule(
        total_amount=parse_decimal(payload.get("totalAmount"), "totalAmount"),
        start_period=str(payload.get("startDate") or ""),
        end_period=str(payload.get("endDate") or ""),
        scenario=parse_scenario(payload.get("scenario")),
        generated_at=generated_at,
        entries=tuple(entry_from_payload(item) for item in payload.get("entries") or []),
    )


def schedule_to_payload(schedule: AmortizationSchedule) -> dict[str, Any]:
    return {
        "totalAmount": _amount_to_json(schedule.total_amount),
        "startDate": schedule.start_period,
        "endDate": schedule.end_period,
        "scenario": schedule.scenario.value,
        "generatedAt": schedule.generated_at.isoformat(),
        "entries": entries_to_payload(schedule.entries),
    }

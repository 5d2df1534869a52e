"""Command-line entrypoint for contract amortization schedules."""
from __future__ import annotations

import argparse
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

from contract_amortization.application.use_cases import (
    ListContractsUseCase,
    LoadScheduleUseCase,
    ScheduleContext,
)
from contract_amortization.config import SETTINGS
from contract_amortization.domain.errors import AmortizationError
from contract_amortization.domain.models import AmortizationSchedule, Contract
from contract_amortization.domain.services import ScheduleGenerator
from contract_amortization.infrastructure.factory import build_data_source
from contract_amortization.logging_config import configure_logging
from contract_amortization.presentation.schedule_report import render_csv, render_xlsx


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"not a decimal amount: {value!r}") from exc


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Derive and inspect contract amortization schedules")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a schedule from contract terms")
    gen.add_argument("--amount", type=_decimal, required=True, help="Contract total amount")
    gen.add_argument("--start", type=date.fromisoformat, required=True, help="Start date (YYYY-MM-DD)")
    gen.add_argument("--end", type=date.fromisoformat, required=True, help="End date (YYYY-MM-DD)")
    gen.add_argument("--as-of", type=date.fromisoformat, help="Reference date for the scenario (YYYY-MM-DD)")
    gen.add_argument("--csv", type=Path, help="Write the schedule as CSV")
    gen.add_argument("--xlsx", type=Path, help="Write the schedule as an Excel workbook")

    contracts = sub.add_parser("contracts", help="List contracts from the configured data source")
    contracts.add_argument("--page", type=int, default=0)
    contracts.add_argument("--size", type=int, default=SETTINGS.page_size)

    schedule = sub.add_parser("schedule", help="Load a contract's schedule from the configured data source")
    schedule.add_argument("contract_id", type=int)

    return parser.parse_args(argv)


def print_schedule(schedule: AmortizationSchedule) -> None:
    print("Amortization Schedule")
    print("=====================")
    print(f"Total amount: {schedule.total_amount}")
    print(f"Periods: {schedule.start_period} .. {schedule.end_period}")
    print(f"Scenario: {schedule.scenario.value}")
    print()
    for entry in schedule.entries:
        print(f"{entry.amortization_period}  {entry.accounting_period}  {entry.amount:>14.2f}  {entry.status.value}")
    print(f"{'':>16}{schedule.entries_total():>14.2f}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=SETTINGS.log_level)

    try:
        if args.command == "generate":
            contract = Contract(
                total_amount=args.amount,
                start_date=args.start,
                end_date=args.end,
                vendor_name="cli",
            )
            schedule = ScheduleGenerator().generate(contract, args.as_of)
            print_schedule(schedule)
            if args.csv:
                args.csv.write_bytes(render_csv(schedule.entries))
            if args.xlsx:
                args.xlsx.write_bytes(render_xlsx(schedule.entries))
            return 0

        source = build_data_source(SETTINGS)
        if args.command == "contracts":
            page = ListContractsUseCase(source.directory).execute(args.page, args.size)
            print(f"Contracts (page {args.page}, {len(page.records)} of {page.total_count})")
            for c in page.records:
                print(f"- #{c.contract_id} {c.vendor_name}: {c.total_amount} {c.start_date} .. {c.end_date} [{c.status.value}]")
            return 0

        context = ScheduleContext(
            directory=source.directory,
            persistence=source.persistence,
            generator=ScheduleGenerator(),
        )
        print_schedule(LoadScheduleUseCase(context).execute(args.contract_id))
        return 0
    except (AmortizationError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

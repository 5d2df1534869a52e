"""Streamlit front-end for contract amortization reconciliation."""
from __future__ import annotations

from typing import Sequence

import pandas as pd
import streamlit as st

from contract_amortization import (
    LoadScheduleUseCase,
    ReconciliationWorkflow,
    ScheduleContext,
    ScheduleGenerator,
    WorkflowState,
    build_data_source,
)
from contract_amortization.application.archive.use_cases import ArchiveScheduleUseCase
from contract_amortization.application.use_cases import (
    ListContractsUseCase,
    SaveScheduleUseCase,
    UploadContractUseCase,
)
from contract_amortization.config import SETTINGS
from contract_amortization.domain.errors import AmortizationError, DataSourceError, ValidationError
from contract_amortization.domain.models import Contract
from contract_amortization.infrastructure.archive.file_repository import FileSystemScheduleArchive
from contract_amortization.logging_config import configure_logging
from contract_amortization.presentation.editor_sync import apply_editor_changes, rows_to_dataframe
from contract_amortization.presentation.schedule_report import (
    build_archive_request,
    render_csv,
    render_xlsx,
    violations_to_rows,
)

configure_logging(level=SETTINGS.log_level)

st.set_page_config(page_title="Contract Amortization", layout="wide")
st.title("Contract Amortization")


def contracts_to_dataframe(records: Sequence[Contract]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "contract_id": c.contract_id,
                "vendor": c.vendor_name,
                "total_amount": float(c.total_amount),
                "start_date": c.start_date,
                "end_date": c.end_date,
                "tax_rate": float(c.tax_rate),
                "attachment": c.attachment_name,
                "created_at": c.created_at,
                "status": c.status.value,
            }
            for c in records
        ]
    )


if "source" not in st.session_state:
    st.session_state["source"] = build_data_source(SETTINGS)
if "view" not in st.session_state:
    st.session_state["view"] = "contracts"
if "page" not in st.session_state:
    st.session_state["page"] = 0
if "editor_version" not in st.session_state:
    st.session_state["editor_version"] = 0

source = st.session_state["source"]


def on_commit(entries) -> None:
    current: ReconciliationWorkflow = st.session_state["workflow"]
    SaveScheduleUseCase(source.persistence).execute(current.contract_id, entries)


def on_cancel() -> None:
    st.session_state["view"] = "contracts"


if "workflow" not in st.session_state:
    st.session_state["workflow"] = ReconciliationWorkflow(on_commit=on_commit, on_cancel=on_cancel)
workflow: ReconciliationWorkflow = st.session_state["workflow"]


if st.session_state["view"] == "contracts":
    st.subheader("Upload contract")
    uploaded = st.file_uploader("Contract document", type=["pdf", "doc", "docx"])
    if uploaded is not None and st.button("Upload", key="upload_btn"):
        try:
            contract = UploadContractUseCase(source.directory).execute(uploaded.name, uploaded.read())
        except (AmortizationError, ValueError) as exc:
            st.error(f"Upload failed: {exc}")
        else:
            st.success(f"Contract #{contract.contract_id} created for {contract.vendor_name}")

    st.subheader("Contracts")
    page_size = SETTINGS.page_size
    try:
        page = ListContractsUseCase(source.directory, page_size).execute(st.session_state["page"])
    except DataSourceError as exc:
        st.error(f"Could not load contracts: {exc}")
        page = None

    if page is not None:
        st.caption(f"Total {page.total_count} contracts; page {st.session_state['page'] + 1}")
        st.dataframe(contracts_to_dataframe(page.records), hide_index=True, use_container_width=True)

        col_prev, col_next = st.columns(2)
        with col_prev:
            if st.button("Previous page", disabled=st.session_state["page"] == 0):
                st.session_state["page"] -= 1
                st.rerun()
        with col_next:
            has_next = (st.session_state["page"] + 1) * page_size < page.total_count
            if st.button("Next page", disabled=not has_next):
                st.session_state["page"] += 1
                st.rerun()

        ids = [c.contract_id for c in page.records]
        selected = st.selectbox("Contract", ids, format_func=lambda cid: f"#{cid}") if ids else None
        if selected is not None and st.button("Review amortization schedule", key="load_btn"):
            context = ScheduleContext(
                directory=source.directory,
                persistence=source.persistence,
                generator=ScheduleGenerator(),
            )
            try:
                with st.spinner("Calculating schedule..."):
                    LoadScheduleUseCase(context).load_into(workflow, selected)
            except DataSourceError as exc:
                st.error(f"Load failed: {exc}")
            else:
                st.session_state["editor_version"] += 1
                st.session_state["view"] = "schedule"
                st.rerun()
else:
    if st.button("← Back", key="back_to_contracts"):
        if workflow.state is WorkflowState.EDITING:
            workflow.cancel()
        st.session_state["view"] = "contracts"
        st.rerun()

    schedule = workflow.base_schedule
    st.subheader(f"Contract #{workflow.contract_id}")
    if schedule is not None:
        col1, col2, col3 = st.columns(3)
        col1.metric("Total amount", f"{schedule.total_amount:,.2f}")
        col2.metric("Periods", f"{schedule.start_period} .. {schedule.end_period}")
        col3.metric("Scenario", schedule.scenario.value)

    if workflow.state is WorkflowState.COMMITTED:
        committed = workflow.committed
        st.success(f"Schedule committed ({len(committed.entries)} rows).")
        st.download_button("Download CSV", data=render_csv(committed.entries), file_name="schedule.csv", mime="text/csv")
        st.download_button(
            "Download Excel",
            data=render_xlsx(committed.entries),
            file_name="schedule.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    else:
        editor_key = f"schedule_editor_{st.session_state['editor_version']}"
        edited_df = st.data_editor(
            rows_to_dataframe(workflow.store.rows()),
            num_rows="dynamic",
            hide_index=True,
            key=editor_key,
            use_container_width=True,
            disabled=["row_key"],
            column_config={
                "row_key": None,
                "amortization_period": st.column_config.TextColumn("Amortization period", help="YYYY-MM"),
                "accounting_period": st.column_config.TextColumn("Accounting period", help="YYYY-MM"),
                "amount": st.column_config.NumberColumn("Amount", min_value=0.0, format="%.2f"),
                "status": st.column_config.SelectboxColumn("Status", options=["PENDING", "COMPLETED"]),
            },
        )

        col_confirm, col_cancel = st.columns(2)
        with col_confirm:
            confirm_clicked = st.button("Confirm", type="primary", key="confirm_btn")
        with col_cancel:
            cancel_clicked = st.button("Cancel", key="cancel_btn")

        if confirm_clicked:
            apply_editor_changes(workflow, edited_df)
            st.session_state["editor_version"] += 1
            try:
                committed = workflow.confirm()
            except ValidationError:
                report = workflow.validate()
                st.error("Please fix these rows before confirming:\n\n" + "\n".join(f"- {m}" for m in report.iter_messages()))
                st.dataframe(pd.DataFrame(violations_to_rows(report)), hide_index=True)
            except DataSourceError as exc:
                st.error(f"Saving the schedule failed, edits are kept: {exc}")
            else:
                if SETTINGS.archive_dir is not None:
                    ArchiveScheduleUseCase(FileSystemScheduleArchive(SETTINGS.archive_dir)).execute(
                        build_archive_request(committed)
                    )
                st.rerun()

        if cancel_clicked:
            workflow.cancel()
            st.session_state["editor_version"] += 1
            st.rerun()

        report = workflow.validate()
        if report.has_total_mismatch():
            st.warning(
                f"Edited rows total {report.entries_total:,.2f}; contract total differs by {report.total_difference:,.2f}."
            )

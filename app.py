"""Streamlit front-end for reviewing investment reconciliation runs."""
from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Sequence

import pandas as pd
import streamlit as st

from invest_reconciler import (
    BankStatementRepository,
    BaseLedgerRepository,
    InvestmentReconciler,
    ReconcileConfig,
    ReconcileInvestmentsUseCase,
    ReconciliationContext,
)
from invest_reconciler.config import SETTINGS
from invest_reconciler.domain.models import (
    DEFAULT_AMOUNT_THRESHOLD_CENTS,
    DEFAULT_DATE_THRESHOLD_DAYS,
    InvestmentRecord,
)
from invest_reconciler.domain.results import MergeResult
from invest_reconciler.logging_setup import configure_logging
from invest_reconciler.presentation.report import (
    CONFLICT_COLUMNS,
    RECORD_COLUMNS,
    build_workbook_bytes,
    conflicts_to_rows,
    records_to_rows,
    render_json,
)

configure_logging(SETTINGS.log_level)

st.set_page_config(page_title="Investment Reconciliation", layout="wide")
st.title("Investment Reconciliation")


def records_to_dataframe(records: Sequence[InvestmentRecord]) -> pd.DataFrame:
    return pd.DataFrame(records_to_rows(records), columns=RECORD_COLUMNS)


def run_reconciliation(
    bank_bytes: bytes, base_bytes: bytes, sheet_name: str, config: ReconcileConfig
) -> tuple[MergeResult, Sequence[InvestmentRecord], Sequence[InvestmentRecord]]:
    context = ReconciliationContext(
        base_repository=BaseLedgerRepository(BytesIO(base_bytes), sheet_name=sheet_name),
        bank_repository=BankStatementRepository(BytesIO(bank_bytes)),
        reconciler=InvestmentReconciler(config),
    )
    return ReconcileInvestmentsUseCase(context).execute()


if "view" not in st.session_state:
    st.session_state["view"] = "upload"
if "result" not in st.session_state:
    st.session_state["result"] = None


with st.sidebar:
    st.header("Tolerances")
    date_threshold = st.number_input("Date threshold (days)", min_value=0, value=DEFAULT_DATE_THRESHOLD_DAYS, step=1)
    amount_threshold = st.number_input(
        "Amount threshold (cents)", min_value=0, value=DEFAULT_AMOUNT_THRESHOLD_CENTS, step=1
    )
    fuzzy = st.checkbox("Accept asset-name prefixes", value=True)
    reference_date = st.date_input("Reference date for overdue checks", value=date.today())
    sheet_name = st.text_input("Ledger sheet", value=SETTINGS.base_sheet)


if st.session_state["view"] == "upload":
    col1, col2 = st.columns(2)
    with col1:
        bank_file = st.file_uploader("Upload bank statement", type=["json"])
    with col2:
        base_file = st.file_uploader("Upload base ledger", type=["xlsx"])

    run_btn = st.button("Run Reconciliation", disabled=not (bank_file and base_file))
    if run_btn and bank_file and base_file:
        config = ReconcileConfig(
            date_threshold_days=int(date_threshold),
            amount_threshold_cents=int(amount_threshold),
            enable_fuzzy_asset_name_match=fuzzy,
            reference_date=reference_date,
        )
        try:
            with st.spinner("Reconciling..."):
                result, base_records, bank_records = run_reconciliation(
                    bank_file.read(), base_file.read(), sheet_name, config
                )
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.session_state["result"] = {
                "result": result,
                "base": base_records,
                "bank": bank_records,
                "workbook": build_workbook_bytes(result, bank_records),
                "json": render_json(result),
            }
            st.session_state["view"] = "results"
            st.rerun()
else:
    if st.button("← Back", key="back_to_upload"):
        st.session_state["view"] = "upload"
        st.session_state["result"] = None
        st.rerun()

    payload = st.session_state.get("result")
    if not payload:
        st.info("No results available. Upload both files and run the reconciliation first.")
    else:
        result: MergeResult = payload["result"]
        summary = result.summary

        st.subheader("Summary")
        cols = st.columns(4)
        cols[0].metric("Matched", summary.matched)
        cols[1].metric("Within tolerance", summary.partial_matches)
        cols[2].metric("Unmatched base", summary.unmatched_base)
        cols[3].metric("Unmatched bank", summary.unmatched_bank)

        tabs = st.tabs(["Conflicts", "Base updated", "Bank", "Base"])
        with tabs[0]:
            st.dataframe(pd.DataFrame(conflicts_to_rows(result.conflicts), columns=CONFLICT_COLUMNS))
        with tabs[1]:
            st.dataframe(records_to_dataframe(result.matched))
        with tabs[2]:
            st.dataframe(records_to_dataframe(payload["bank"]))
        with tabs[3]:
            st.dataframe(records_to_dataframe(payload["base"]))

        st.download_button(
            "Download workbook",
            data=payload["workbook"],
            file_name="reconciliation.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        st.download_button(
            "Download conflict report",
            data=payload["json"].encode("utf-8"),
            file_name="conflicts-invest-updates.json",
            mime="application/json",
        )

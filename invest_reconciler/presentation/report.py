"""Report generators for reconciliation results."""
from __future__ import annotations

import json
from io import BytesIO
from typing import Any, Sequence

import pandas as pd

from invest_reconciler.domain.models import ConflictRecord, InvestmentRecord, ResultCode
from invest_reconciler.domain.results import MergeResult

DATE_FORMAT = "%d/%m/%Y"

RECORD_COLUMNS = [
    "ativo",
    "taxa",
    "numeroNota",
    "aplicado",
    "valorBruto",
    "dataCompra",
    "dataVencimento",
    "valorLiquido",
]
CONFLICT_COLUMNS = ["source", "causes", *RECORD_COLUMNS]

SHEET_BANK = "ativos"
SHEET_MATCHED = "base-updated"
SHEET_CONFLICTS = "conflicts"


def record_to_row(record: InvestmentRecord) -> dict[str, Any]:
    return {
        "ativo": record.asset_name,
        "taxa": record.rate_descriptor,
        "numeroNota": record.note_reference,
        "aplicado": float(record.applied_amount.to_decimal()),
        "valorBruto": float(record.gross_value.to_decimal()),
        "dataCompra": record.purchase_date.strftime(DATE_FORMAT),
        "dataVencimento": record.due_date.strftime(DATE_FORMAT),
        "valorLiquido": float(record.net_value.to_decimal()),
    }


def records_to_rows(records: Sequence[InvestmentRecord]) -> list[dict[str, Any]]:
    return [record_to_row(record) for record in records]


def conflicts_to_rows(conflicts: Sequence[ConflictRecord]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for conflict in conflicts:
        row = {
            "source": conflict.source.value,
            "causes": ", ".join(cause.label() for cause in conflict.causes),
        }
        row.update(record_to_row(conflict.record))
        rows.append(row)
    return rows


def _record_payload(record: InvestmentRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "source": record.source.value,
        "asset_name": record.asset_name,
        "rate_descriptor": record.rate_descriptor,
        "note_reference": record.note_reference,
        "applied_amount_cents": record.applied_amount.cents,
        "gross_value_cents": record.gross_value.cents,
        "net_value_cents": record.net_value.cents,
        "currency": record.applied_amount.currency,
        "purchase_date": record.purchase_date.isoformat(),
        "due_date": record.due_date.isoformat(),
        "lineage": record.lineage,
    }


def result_to_payload(result: MergeResult) -> dict[str, Any]:
    summary = result.summary
    return {
        "matched": [_record_payload(record) for record in result.matched],
        "conflicts": [
            {
                **_record_payload(conflict.record),
                "causes": [
                    {"validator_key": cause.validator_key.value, "result_code": cause.result_code.value}
                    for cause in conflict.causes
                ],
            }
            for conflict in result.conflicts
        ],
        "summary": {
            "total_base": summary.total_base,
            "total_bank": summary.total_bank,
            "matched": summary.matched,
            "partial_matches": summary.partial_matches,
            "unmatched_base": summary.unmatched_base,
            "unmatched_bank": summary.unmatched_bank,
            "overdue": summary.overdue,
        },
    }


def render_json(result: MergeResult) -> str:
    return json.dumps(result_to_payload(result), ensure_ascii=False, indent=2)


def _frame(rows: list[dict[str, Any]], columns: list[str]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=columns)


def build_workbook_bytes(result: MergeResult, bank_records: Sequence[InvestmentRecord]) -> bytes:
    """Write the bank, matched and conflict tabs; partial-only conflicts are highlighted."""
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        _frame(records_to_rows(bank_records), RECORD_COLUMNS).to_excel(writer, sheet_name=SHEET_BANK, index=False)
        _frame(records_to_rows(result.matched), RECORD_COLUMNS).to_excel(
            writer, sheet_name=SHEET_MATCHED, index=False
        )
        _frame(conflicts_to_rows(result.conflicts), CONFLICT_COLUMNS).to_excel(
            writer, sheet_name=SHEET_CONFLICTS, index=False
        )

        worksheet = writer.sheets[SHEET_CONFLICTS]
        yellow = writer.book.add_format({"bg_color": "#FFFF00"})
        for row_idx, conflict in enumerate(result.conflicts, start=1):
            if all(cause.result_code is ResultCode.PARTIAL_MATCH for cause in conflict.causes):
                worksheet.set_row(row_idx, None, yellow)
    buf.seek(0)
    return buf.getvalue()

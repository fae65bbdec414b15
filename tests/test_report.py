import json
from datetime import date
from io import BytesIO

import pandas as pd

from invest_reconciler.domain.models import InvestmentRecord, MonetaryAmount, ReconcileConfig, RecordSource
from invest_reconciler.domain.services import merge_investments
from invest_reconciler.presentation.report import (
    CONFLICT_COLUMNS,
    build_workbook_bytes,
    conflicts_to_rows,
    records_to_rows,
    render_json,
)

CONFIG = ReconcileConfig(reference_date=date(2024, 1, 15))


def make_record(record_id: str, asset: str, source: RecordSource, due: date = date(2024, 1, 15)) -> InvestmentRecord:
    return InvestmentRecord(
        id=record_id,
        asset_name=asset,
        rate_descriptor="Pos: 110% CDI",
        note_reference="001",
        applied_amount=MonetaryAmount(1_234_56),
        gross_value=MonetaryAmount(1_300_00),
        purchase_date=date(2023, 1, 5),
        due_date=due,
        net_value=MonetaryAmount(1_290_10),
        source=source,
    )


def build_result():
    base = [
        make_record("1", "CDB Banco ABC", RecordSource.BASE),
        make_record("2", "LCI", RecordSource.BASE, due=date(2023, 12, 31)),
    ]
    bank = [
        make_record("3", "CDB Banco ABC 2024", RecordSource.BANK),
        make_record("4", "Tesouro", RecordSource.BANK),
    ]
    return merge_investments(base, bank, CONFIG), bank


def test_records_to_rows_formats_values_for_sheets():
    row = records_to_rows([make_record("1", "CDB", RecordSource.BASE)])[0]

    assert row == {
        "ativo": "CDB",
        "taxa": "Pos: 110% CDI",
        "numeroNota": "001",
        "aplicado": 1234.56,
        "valorBruto": 1300.0,
        "dataCompra": "05/01/2023",
        "dataVencimento": "15/01/2024",
        "valorLiquido": 1290.1,
    }


def test_conflict_rows_render_causes():
    result, _ = build_result()

    rows = conflicts_to_rows(result.conflicts)

    assert list(rows[0].keys()) == CONFLICT_COLUMNS
    assert [row["source"] for row in rows] == ["base", "bank", "base", "bank"]
    assert rows[0]["causes"] == "ASSET_NAME: PARTIAL_MATCH"
    assert rows[2]["causes"].endswith("OVERDUE_DATE: --, FOUND_REFERENCE: --")
    assert rows[3]["causes"] == "ASSET_NAME: UNMATCHED"


def test_render_json_is_stable_and_complete():
    result, _ = build_result()

    first = render_json(result)
    second = render_json(build_result()[0])
    payload = json.loads(first)

    assert first == second
    assert payload["summary"]["matched"] == 1
    assert payload["summary"]["partial_matches"] == 1
    assert payload["summary"]["overdue"] == 1
    assert payload["matched"][0]["id"] == "1"
    assert payload["matched"][0]["note_reference"] == "001"
    assert payload["conflicts"][0]["causes"] == [{"validator_key": "ASSET_NAME", "result_code": "PARTIAL_MATCH"}]


def test_workbook_has_expected_tabs():
    result, bank = build_result()

    content = build_workbook_bytes(result, bank)
    sheets = pd.read_excel(BytesIO(content), sheet_name=None, engine="openpyxl")

    assert list(sheets) == ["ativos", "base-updated", "conflicts"]
    assert len(sheets["ativos"]) == 2
    assert len(sheets["base-updated"]) == 1
    assert len(sheets["conflicts"]) == 4
    assert list(sheets["conflicts"].columns) == CONFLICT_COLUMNS

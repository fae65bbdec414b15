"""Base ledger (Excel workbook) parser producing canonical investment records."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Sequence
import zipfile

import pandas as pd

from invest_reconciler.config import SETTINGS
from invest_reconciler.domain.models import InvestmentRecord, MonetaryAmount, RecordSource
from invest_reconciler.infrastructure.parsing.utils import (
    ensure_bytes,
    normalize_currency,
    normalize_date,
)
from invest_reconciler.logging_setup import get_logger

logger = get_logger(__name__)

TEXT_COLUMNS = ("Ativo", "Taxa", "numeroNota")
AMOUNT_COLUMNS = ("Aplicado", "Atual Bruto")
DATE_COLUMNS = ("Data compra", "Vencimento")
LEDGER_COLUMNS = TEXT_COLUMNS + AMOUNT_COLUMNS + DATE_COLUMNS


def _list_sheets(raw_bytes: bytes) -> list[str]:
    try:
        xls = pd.ExcelFile(BytesIO(raw_bytes), engine="openpyxl")
    except zipfile.BadZipFile as exc:
        raise ValueError(f"Ledger is not an Excel workbook: {exc}") from exc
    return xls.sheet_names


def _pick_sheet(raw_bytes: bytes, preferred: str) -> str:
    sheets = _list_sheets(raw_bytes)
    if not sheets:
        raise ValueError("Ledger workbook has no sheets")
    if preferred in sheets:
        return preferred
    lower_map = {name.lower(): name for name in sheets}
    if preferred.lower() in lower_map:
        return lower_map[preferred.lower()]
    logger.warning("Sheet %r not found; reading %r instead", preferred, sheets[0])
    return sheets[0]


def read_ledger_raw(raw_bytes: bytes, sheet_name: str) -> pd.DataFrame:
    picked = _pick_sheet(raw_bytes, sheet_name)
    return pd.read_excel(
        BytesIO(raw_bytes),
        sheet_name=picked,
        engine="openpyxl",
        dtype=object,
        keep_default_na=False,
    )


def normalize_ledger(df: pd.DataFrame) -> pd.DataFrame:
    work = df.copy()
    work.columns = [str(col).strip() for col in work.columns]
    for col in LEDGER_COLUMNS:
        if col not in work.columns:
            work[col] = ""
        work[col] = work[col].fillna("")
    # Numeric and date cells keep their Excel type; only text is stripped.
    for col in TEXT_COLUMNS:
        work[col] = work[col].astype(str).str.strip()
    for col in AMOUNT_COLUMNS + DATE_COLUMNS:
        work[col] = work[col].map(lambda v: v.strip() if isinstance(v, str) else v)
    return work


def ledger_to_records(df: pd.DataFrame) -> Sequence[InvestmentRecord]:
    records: list[InvestmentRecord] = []
    for idx, row in df.iterrows():
        asset_name = row["Ativo"]
        if not asset_name:
            continue
        records.append(
            InvestmentRecord(
                id=f"base-{idx}",
                asset_name=asset_name,
                rate_descriptor=row["Taxa"],
                note_reference=row["numeroNota"],
                applied_amount=normalize_currency(row["Aplicado"]),
                gross_value=normalize_currency(row["Atual Bruto"]),
                purchase_date=normalize_date(row["Data compra"]),
                due_date=normalize_date(row["Vencimento"]),
                net_value=MonetaryAmount.zero(SETTINGS.currency),
                source=RecordSource.BASE,
                lineage=f"row={idx}",
            )
        )
    return records


def parse_base_workbook(
    source: BytesIO | Path | bytes,
    sheet_name: str | None = None,
) -> Sequence[InvestmentRecord]:
    raw_bytes = ensure_bytes(source)
    dataframe = read_ledger_raw(raw_bytes, sheet_name or SETTINGS.base_sheet)
    records = ledger_to_records(normalize_ledger(dataframe))
    logger.info("Parsed %d base records", len(records))
    return records

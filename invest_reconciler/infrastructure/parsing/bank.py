"""Bank statement (JSON export) parser producing canonical investment records."""
from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path
from typing import Any, Sequence

from invest_reconciler.domain.models import InvestmentRecord, RecordSource
from invest_reconciler.infrastructure.parsing.utils import (
    ensure_bytes,
    normalize_currency,
    normalize_date,
)
from invest_reconciler.logging_setup import get_logger

logger = get_logger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def load_bank_document(source: BytesIO | Path | bytes) -> dict[str, Any]:
    raw_bytes = ensure_bytes(source)
    try:
        document = json.loads(raw_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Bank statement is not valid JSON: {exc}") from exc
    if not isinstance(document, dict) or not isinstance(document.get("data"), list):
        raise ValueError("Bank statement must be an object with a 'data' list")
    return document


def bank_document_to_records(document: dict[str, Any]) -> Sequence[InvestmentRecord]:
    """Flatten ``data[].notas[]`` into one BANK record per nota."""
    records: list[InvestmentRecord] = []
    for product_idx, product in enumerate(document.get("data", [])):
        if not isinstance(product, dict):
            continue
        asset_name = _text(product.get("produto"))
        for nota_idx, nota in enumerate(product.get("notas") or []):
            if not isinstance(nota, dict):
                continue
            records.append(
                InvestmentRecord(
                    id=f"bank-{product_idx}-{nota_idx}",
                    asset_name=asset_name,
                    rate_descriptor=f"{_text(nota.get('tipo'))}: {_text(nota.get('indexador'))}",
                    note_reference=_text(nota.get("numeroNota")),
                    applied_amount=normalize_currency(nota.get("valorOperacao")),
                    gross_value=normalize_currency(nota.get("valorBruto")),
                    purchase_date=normalize_date(nota.get("dataOperacao")),
                    due_date=normalize_date(nota.get("dataVencimento")),
                    net_value=normalize_currency(nota.get("valorLiquido")),
                    source=RecordSource.BANK,
                    lineage=f"produto={product_idx},nota={nota_idx}",
                )
            )
    logger.info("Parsed %d bank records", len(records))
    return records


def parse_bank_statement(source: BytesIO | Path | bytes) -> Sequence[InvestmentRecord]:
    return bank_document_to_records(load_bank_document(source))

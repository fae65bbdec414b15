"""File-backed repositories for ledger and bank investment records."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Sequence

from invest_reconciler.domain.models import InvestmentRecord
from invest_reconciler.domain.repositories import (
    BankInvestmentRepository,
    BaseInvestmentRepository,
)
from invest_reconciler.infrastructure.parsing.bank import parse_bank_statement
from invest_reconciler.infrastructure.parsing.ledger import parse_base_workbook
from invest_reconciler.infrastructure.parsing.utils import ensure_bytes


class BaseLedgerRepository(BaseInvestmentRepository):
    def __init__(self, source: BytesIO | Path | bytes, sheet_name: str | None = None) -> None:
        self._source = ensure_bytes(source)
        self._sheet_name = sheet_name

    def list_records(self) -> Sequence[InvestmentRecord]:
        return parse_base_workbook(BytesIO(self._source), sheet_name=self._sheet_name)


class BankStatementRepository(BankInvestmentRepository):
    def __init__(self, source: BytesIO | Path | bytes) -> None:
        self._source = ensure_bytes(source)

    def list_records(self) -> Sequence[InvestmentRecord]:
        return parse_bank_statement(BytesIO(self._source))

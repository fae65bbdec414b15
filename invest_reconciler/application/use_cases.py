"""Application services orchestrating the reconciliation workflow."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from invest_reconciler.domain.models import InvestmentRecord
from invest_reconciler.domain.repositories import (
    BankInvestmentRepository,
    BaseInvestmentRepository,
)
from invest_reconciler.domain.results import MergeResult
from invest_reconciler.domain.services import InvestmentReconciler


@dataclass(slots=True)
class ReconciliationContext:
    base_repository: BaseInvestmentRepository
    bank_repository: BankInvestmentRepository
    reconciler: InvestmentReconciler


class ReconcileInvestmentsUseCase:
    def __init__(self, context: ReconciliationContext) -> None:
        self._context = context

    def execute(self) -> tuple[MergeResult, Sequence[InvestmentRecord], Sequence[InvestmentRecord]]:
        base_records = self._context.base_repository.list_records()
        bank_records = self._context.bank_repository.list_records()
        result = self._context.reconciler.reconcile(base_records, bank_records)
        return result, base_records, bank_records

"""Tolerance-aware reconciliation of ledger investments against bank statements."""
from invest_reconciler.application.use_cases import ReconcileInvestmentsUseCase, ReconciliationContext
from invest_reconciler.domain.models import (
    Cause,
    ConflictRecord,
    InvestmentRecord,
    MonetaryAmount,
    ReconcileConfig,
    RecordSource,
    ResultCode,
    ValidationOutcome,
    ValidatorKey,
)
from invest_reconciler.domain.results import MergeResult, ReconciliationSummary
from invest_reconciler.domain.services import InvestmentReconciler, merge_investments
from invest_reconciler.domain.validators import ComparisonContext, validate_comparison
from invest_reconciler.infrastructure.parsing.utils import normalize_currency, normalize_date
from invest_reconciler.infrastructure.repositories.file_repositories import (
    BankStatementRepository,
    BaseLedgerRepository,
)

__all__ = [
    "BankStatementRepository",
    "BaseLedgerRepository",
    "Cause",
    "ComparisonContext",
    "ConflictRecord",
    "InvestmentReconciler",
    "InvestmentRecord",
    "MergeResult",
    "MonetaryAmount",
    "ReconcileConfig",
    "ReconcileInvestmentsUseCase",
    "ReconciliationContext",
    "ReconciliationSummary",
    "RecordSource",
    "ResultCode",
    "ValidationOutcome",
    "ValidatorKey",
    "merge_investments",
    "normalize_currency",
    "normalize_date",
    "validate_comparison",
]

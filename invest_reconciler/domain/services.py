"""Domain services implementing the base-versus-bank matching rules."""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Sequence

from invest_reconciler.logging_setup import get_logger

from .models import (
    Cause,
    ConflictRecord,
    InvestmentRecord,
    ReconcileConfig,
    RecordSource,
    ResultCode,
    ValidatorKey,
)
from .results import MergeResult, ReconciliationSummary
from .validators import ComparisonContext, ComparisonResult, validate_comparison

logger = get_logger(__name__)

_CONFIG_FIELDS = frozenset(f.name for f in fields(ReconcileConfig))


def resolve_config(config: ReconcileConfig | Mapping[str, Any] | None = None) -> ReconcileConfig:
    """Return a full config, filling unspecified fields with the defaults."""
    if config is None:
        return ReconcileConfig()
    if isinstance(config, ReconcileConfig):
        return config
    unknown = sorted(set(config) - _CONFIG_FIELDS)
    if unknown:
        raise ValueError(f"Unknown config option(s): {', '.join(unknown)}")
    return ReconcileConfig(**dict(config))


def build_merged_record(base_item: InvestmentRecord, bank_item: InvestmentRecord) -> InvestmentRecord:
    """Keep the ledger identity but take the reported values from the bank statement."""
    return replace(
        base_item,
        asset_name=bank_item.asset_name,
        purchase_date=bank_item.purchase_date,
        due_date=bank_item.due_date,
        applied_amount=bank_item.applied_amount,
        gross_value=bank_item.gross_value,
        note_reference=bank_item.note_reference,
        net_value=bank_item.net_value,
        source=RecordSource.BASE,
    )


@dataclass
class _MatchPass:
    """Working state of one reconciliation call; never shared between calls."""

    bank_records: Sequence[InvestmentRecord]
    available: set[int]
    matched: list[InvestmentRecord]
    conflicts: list[ConflictRecord]
    partial_matches: int = 0
    unmatched_base: int = 0


class InvestmentReconciler:
    """Greedy first-fit reconciliation of ledger records against a bank statement.

    Each base record, in input order, is paired with the first still-available
    bank record whose comparison has no UNMATCHED facet. A bank record can be
    consumed at most once. Ties are broken by bank input order only.
    """

    def __init__(self, config: ReconcileConfig | Mapping[str, Any] | None = None) -> None:
        self._config = resolve_config(config)

    @property
    def config(self) -> ReconcileConfig:
        return self._config

    def reconcile(
        self,
        base_records: Sequence[InvestmentRecord],
        bank_records: Sequence[InvestmentRecord],
    ) -> MergeResult:
        base_records = tuple(base_records)
        bank_records = tuple(bank_records)
        state = _MatchPass(
            bank_records=bank_records,
            available=set(range(len(bank_records))),
            matched=[],
            conflicts=[],
        )

        for base_item in base_records:
            self._process_base_record(base_item, state)

        unmatched_bank = 0
        for position, bank_item in enumerate(bank_records):
            if position not in state.available:
                continue
            unmatched_bank += 1
            state.conflicts.append(ConflictRecord(bank_item, self._leftover_bank_causes(bank_item)))

        summary = ReconciliationSummary(
            total_base=len(base_records),
            total_bank=len(bank_records),
            matched=len(state.matched),
            partial_matches=state.partial_matches,
            unmatched_base=state.unmatched_base,
            unmatched_bank=unmatched_bank,
            overdue=sum(
                1
                for conflict in state.conflicts
                if any(cause.validator_key is ValidatorKey.OVERDUE_DATE for cause in conflict.causes)
            ),
        )
        logger.info(
            "Reconciled %d base / %d bank records: %d matched (%d partial), %d base and %d bank unmatched",
            summary.total_base,
            summary.total_bank,
            summary.matched,
            summary.partial_matches,
            summary.unmatched_base,
            summary.unmatched_bank,
        )
        return MergeResult(matched=tuple(state.matched), conflicts=tuple(state.conflicts), summary=summary)

    def _process_base_record(self, base_item: InvestmentRecord, state: _MatchPass) -> None:
        last_result: ComparisonResult | None = None
        for position, bank_item in enumerate(state.bank_records):
            if position not in state.available:
                continue
            result = validate_comparison(ComparisonContext(base_item, bank_item, self._config))
            last_result = result
            if not result.is_valid:
                continue

            state.available.discard(position)
            state.matched.append(build_merged_record(base_item, bank_item))
            partial = tuple(Cause.from_outcome(outcome) for outcome in result.partial_matches())
            if partial:
                state.partial_matches += 1
                state.conflicts.append(ConflictRecord(base_item, partial))
                state.conflicts.append(ConflictRecord(bank_item, partial))
            logger.debug("Base %s matched bank %s (partial causes: %d)", base_item.id, bank_item.id, len(partial))
            return

        state.unmatched_base += 1
        logger.debug("Base %s has no matching bank record", base_item.id)
        state.conflicts.append(ConflictRecord(base_item, self._unmatched_base_causes(base_item, last_result)))

    def _unmatched_base_causes(
        self, base_item: InvestmentRecord, last_result: ComparisonResult | None
    ) -> tuple[Cause, ...]:
        causes: list[Cause] = []
        if last_result is not None:
            causes.extend(Cause.from_outcome(outcome) for outcome in last_result.unmatched())
        if self._config.is_overdue(base_item):
            causes.append(Cause(ValidatorKey.OVERDUE_DATE, ResultCode.EMPTY))
        causes.append(Cause(ValidatorKey.FOUND_REFERENCE, ResultCode.EMPTY))
        return tuple(causes)

    def _leftover_bank_causes(self, bank_item: InvestmentRecord) -> tuple[Cause, ...]:
        causes = [Cause(ValidatorKey.ASSET_NAME, ResultCode.UNMATCHED)]
        if self._config.is_overdue(bank_item):
            causes.append(Cause(ValidatorKey.OVERDUE_DATE, ResultCode.UNMATCHED))
        return tuple(causes)


def merge_investments(
    base_records: Sequence[InvestmentRecord],
    bank_records: Sequence[InvestmentRecord],
    config: ReconcileConfig | Mapping[str, Any] | None = None,
) -> MergeResult:
    """Reconcile ``base_records`` against ``bank_records``.

    ``config`` may be a full :class:`ReconcileConfig` or a mapping with only
    the options to override. The inputs are never mutated.
    """
    return InvestmentReconciler(config).reconcile(base_records, bank_records)

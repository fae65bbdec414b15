"""Domain-level results for investment reconciliation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import ConflictRecord, InvestmentRecord, RecordSource


@dataclass(frozen=True)
class ReconciliationSummary:
    total_base: int = 0
    total_bank: int = 0
    matched: int = 0
    partial_matches: int = 0
    unmatched_base: int = 0
    unmatched_bank: int = 0
    overdue: int = 0


@dataclass(frozen=True)
class MergeResult:
    matched: Sequence[InvestmentRecord] = field(default_factory=tuple)
    conflicts: Sequence[ConflictRecord] = field(default_factory=tuple)
    summary: ReconciliationSummary = field(default_factory=ReconciliationSummary)

    def has_issues(self) -> bool:
        return bool(self.conflicts)

    def iter_conflicts(self, source: RecordSource | None = None) -> Iterable[ConflictRecord]:
        for conflict in self.conflicts:
            if source is None or conflict.source is source:
                yield conflict

"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import InvestmentRecord


class BaseInvestmentRepository(Protocol):
    """Provides the ledger's investment records."""

    def list_records(self) -> Sequence[InvestmentRecord]:
        ...


class BankInvestmentRepository(Protocol):
    """Provides the investment records reported by the bank."""

    def list_records(self) -> Sequence[InvestmentRecord]:
        ...

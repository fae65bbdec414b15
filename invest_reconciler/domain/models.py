"""Domain models for investment reconciliation.

These dataclasses capture the canonical schema shared by the parsers, the
matching engine and the report layer. Every record is immutable once built.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum


DEFAULT_CURRENCY = "BRL"
DEFAULT_DATE_THRESHOLD_DAYS = 2
DEFAULT_AMOUNT_THRESHOLD_CENTS = 50


def today() -> date:
    """Current calendar date in UTC, the default reference for overdue checks."""
    return datetime.now(timezone.utc).date()


class RecordSource(str, Enum):
    BASE = "base"
    BANK = "bank"


class ResultCode(str, Enum):
    MATCHED = "MATCHED"
    PARTIAL_MATCH = "PARTIAL_MATCH"
    UNMATCHED = "UNMATCHED"
    EMPTY = "EMPTY"


class ValidatorKey(str, Enum):
    ASSET_NAME = "ASSET_NAME"
    # Ledger column label for the asset name; same member as ASSET_NAME.
    ATIVO_NAME = "ASSET_NAME"
    PURCHASE_DATE = "PURCHASE_DATE"
    DUE_DATE = "DUE_DATE"
    AMOUNT = "AMOUNT"
    OVERDUE_DATE = "OVERDUE_DATE"
    FOUND_REFERENCE = "FOUND_REFERENCE"


@dataclass(frozen=True, order=True)
class MonetaryAmount:
    """Amount in integer minor units (cents) of a single currency."""

    cents: int
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "MonetaryAmount":
        return cls(0, currency)

    def to_decimal(self) -> Decimal:
        return Decimal(self.cents).scaleb(-2)

    def __str__(self) -> str:
        return f"{self.currency} {self.to_decimal():.2f}"


@dataclass(frozen=True)
class InvestmentRecord:
    """One investment as reported by either the ledger or the bank."""

    id: str
    asset_name: str
    rate_descriptor: str
    note_reference: str
    applied_amount: MonetaryAmount
    gross_value: MonetaryAmount
    purchase_date: date
    due_date: date
    net_value: MonetaryAmount
    source: RecordSource
    lineage: str | None = None

    def __post_init__(self) -> None:
        for name in ("purchase_date", "due_date"):
            value = getattr(self, name)
            if isinstance(value, datetime):
                object.__setattr__(self, name, value.date())


@dataclass(frozen=True)
class ValidationOutcome:
    validator_key: ValidatorKey
    result_code: ResultCode


@dataclass(frozen=True)
class Cause:
    """Explains why a record ended up in the conflict list."""

    validator_key: ValidatorKey
    result_code: ResultCode

    @classmethod
    def from_outcome(cls, outcome: ValidationOutcome) -> "Cause":
        return cls(validator_key=outcome.validator_key, result_code=outcome.result_code)

    def label(self) -> str:
        code = "--" if self.result_code is ResultCode.EMPTY else self.result_code.value
        return f"{self.validator_key.value}: {code}"


@dataclass(frozen=True)
class ConflictRecord:
    record: InvestmentRecord
    causes: tuple[Cause, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def source(self) -> RecordSource:
        return self.record.source

    def has_cause(self, validator_key: ValidatorKey, result_code: ResultCode) -> bool:
        return Cause(validator_key, result_code) in self.causes


@dataclass(frozen=True)
class ReconcileConfig:
    """Tolerances applied by the field validators for one reconciliation call."""

    date_threshold_days: int = DEFAULT_DATE_THRESHOLD_DAYS
    amount_threshold_cents: int = DEFAULT_AMOUNT_THRESHOLD_CENTS
    enable_fuzzy_asset_name_match: bool = True
    reference_date: date | None = field(default_factory=today)

    def __post_init__(self) -> None:
        if self.date_threshold_days < 0:
            raise ValueError(f"date_threshold_days must be >= 0, got {self.date_threshold_days}")
        if self.amount_threshold_cents < 0:
            raise ValueError(f"amount_threshold_cents must be >= 0, got {self.amount_threshold_cents}")
        if isinstance(self.reference_date, datetime):
            object.__setattr__(self, "reference_date", self.reference_date.date())

    def is_overdue(self, record: InvestmentRecord) -> bool:
        if self.reference_date is None:
            return False
        return record.due_date < self.reference_date

"""Tolerance-aware field comparators for one base/bank pair."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Sequence

from .models import (
    InvestmentRecord,
    ReconcileConfig,
    ResultCode,
    ValidationOutcome,
    ValidatorKey,
)


@dataclass(frozen=True)
class ComparisonContext:
    base_item: InvestmentRecord
    bank_item: InvestmentRecord
    config: ReconcileConfig


@dataclass(frozen=True)
class ComparisonResult:
    is_valid: bool
    outcomes: Sequence[ValidationOutcome]

    def partial_matches(self) -> tuple[ValidationOutcome, ...]:
        return tuple(o for o in self.outcomes if o.result_code is ResultCode.PARTIAL_MATCH)

    def unmatched(self) -> tuple[ValidationOutcome, ...]:
        return tuple(o for o in self.outcomes if o.result_code is ResultCode.UNMATCHED)


def _graded(key: ValidatorKey, difference: int, threshold: int) -> ValidationOutcome:
    if difference == 0:
        return ValidationOutcome(key, ResultCode.MATCHED)
    if difference <= threshold:
        return ValidationOutcome(key, ResultCode.PARTIAL_MATCH)
    return ValidationOutcome(key, ResultCode.UNMATCHED)


def _day_difference(left: date, right: date) -> int:
    return abs((left - right).days)


def validate_asset_name(context: ComparisonContext) -> ValidationOutcome:
    base_name = context.base_item.asset_name.strip().upper()
    bank_name = context.bank_item.asset_name.strip().upper()
    if base_name == bank_name:
        return ValidationOutcome(ValidatorKey.ASSET_NAME, ResultCode.MATCHED)
    if context.config.enable_fuzzy_asset_name_match and (
        base_name.startswith(bank_name) or bank_name.startswith(base_name)
    ):
        return ValidationOutcome(ValidatorKey.ASSET_NAME, ResultCode.PARTIAL_MATCH)
    return ValidationOutcome(ValidatorKey.ASSET_NAME, ResultCode.UNMATCHED)


def validate_purchase_date(context: ComparisonContext) -> ValidationOutcome:
    difference = _day_difference(context.base_item.purchase_date, context.bank_item.purchase_date)
    return _graded(ValidatorKey.PURCHASE_DATE, difference, context.config.date_threshold_days)


def validate_due_date(context: ComparisonContext) -> ValidationOutcome:
    difference = _day_difference(context.base_item.due_date, context.bank_item.due_date)
    return _graded(ValidatorKey.DUE_DATE, difference, context.config.date_threshold_days)


def validate_amount(context: ComparisonContext) -> ValidationOutcome:
    difference = abs(context.base_item.applied_amount.cents - context.bank_item.applied_amount.cents)
    return _graded(ValidatorKey.AMOUNT, difference, context.config.amount_threshold_cents)


FIELD_VALIDATORS: tuple[Callable[[ComparisonContext], ValidationOutcome], ...] = (
    validate_asset_name,
    validate_purchase_date,
    validate_due_date,
    validate_amount,
)


def validate_comparison(context: ComparisonContext) -> ComparisonResult:
    """Run every field validator; the pair is valid when none is UNMATCHED."""
    outcomes = tuple(validator(context) for validator in FIELD_VALIDATORS)
    is_valid = all(outcome.result_code is not ResultCode.UNMATCHED for outcome in outcomes)
    return ComparisonResult(is_valid=is_valid, outcomes=outcomes)

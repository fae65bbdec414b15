from datetime import date, timedelta

from invest_reconciler.domain.models import (
    InvestmentRecord,
    MonetaryAmount,
    ReconcileConfig,
    RecordSource,
    ResultCode,
    ValidatorKey,
)
from invest_reconciler.domain.validators import (
    ComparisonContext,
    validate_amount,
    validate_asset_name,
    validate_comparison,
    validate_due_date,
    validate_purchase_date,
)


def make_record(
    asset: str = "CDB Banco ABC",
    applied: int = 1_000_000,
    purchase: date = date(2023, 1, 15),
    due: date = date(2024, 1, 15),
    source: RecordSource = RecordSource.BASE,
) -> InvestmentRecord:
    return InvestmentRecord(
        id=source.value,
        asset_name=asset,
        rate_descriptor="",
        note_reference="",
        applied_amount=MonetaryAmount(applied),
        gross_value=MonetaryAmount(applied),
        purchase_date=purchase,
        due_date=due,
        net_value=MonetaryAmount(0),
        source=source,
    )


def context(bank: InvestmentRecord, **config) -> ComparisonContext:
    config.setdefault("reference_date", date(2024, 1, 15))
    return ComparisonContext(make_record(), bank, ReconcileConfig(**config))


def test_asset_name_ignores_case_and_whitespace():
    outcome = validate_asset_name(context(make_record(asset="  cdb banco abc ")))
    assert outcome.validator_key is ValidatorKey.ASSET_NAME
    assert outcome.result_code is ResultCode.MATCHED


def test_asset_name_prefix_in_either_direction():
    longer = validate_asset_name(context(make_record(asset="CDB Banco ABC 2024")))
    shorter = validate_asset_name(context(make_record(asset="CDB Banco")))
    assert longer.result_code is ResultCode.PARTIAL_MATCH
    assert shorter.result_code is ResultCode.PARTIAL_MATCH


def test_asset_name_prefix_rejected_without_fuzzy():
    outcome = validate_asset_name(context(make_record(asset="CDB Banco"), enable_fuzzy_asset_name_match=False))
    assert outcome.result_code is ResultCode.UNMATCHED


def test_asset_name_unrelated():
    assert validate_asset_name(context(make_record(asset="Tesouro Direto"))).result_code is ResultCode.UNMATCHED


def test_date_validators_grade_by_whole_days():
    base_purchase = date(2023, 1, 15)
    grades = [
        validate_purchase_date(context(make_record(purchase=base_purchase + timedelta(days=delta)))).result_code
        for delta in (0, -2, 2, 3)
    ]
    assert grades == [ResultCode.MATCHED, ResultCode.PARTIAL_MATCH, ResultCode.PARTIAL_MATCH, ResultCode.UNMATCHED]


def test_due_date_uses_configured_threshold():
    bank = make_record(due=date(2024, 1, 20))
    assert validate_due_date(context(bank)).result_code is ResultCode.UNMATCHED
    assert validate_due_date(context(bank, date_threshold_days=5)).result_code is ResultCode.PARTIAL_MATCH


def test_zero_date_threshold_only_accepts_exact_dates():
    bank = make_record(due=date(2024, 1, 16))
    assert validate_due_date(context(bank, date_threshold_days=0)).result_code is ResultCode.UNMATCHED


def test_amount_threshold_boundary():
    assert validate_amount(context(make_record(applied=1_000_000))).result_code is ResultCode.MATCHED
    assert validate_amount(context(make_record(applied=999_950))).result_code is ResultCode.PARTIAL_MATCH
    assert validate_amount(context(make_record(applied=1_000_050))).result_code is ResultCode.PARTIAL_MATCH
    assert validate_amount(context(make_record(applied=1_000_051))).result_code is ResultCode.UNMATCHED


def test_comparison_runs_all_validators_in_order():
    result = validate_comparison(context(make_record(asset="Tesouro Direto", applied=5)))

    assert [o.validator_key for o in result.outcomes] == [
        ValidatorKey.ASSET_NAME,
        ValidatorKey.PURCHASE_DATE,
        ValidatorKey.DUE_DATE,
        ValidatorKey.AMOUNT,
    ]
    assert not result.is_valid
    assert [o.validator_key for o in result.unmatched()] == [ValidatorKey.ASSET_NAME, ValidatorKey.AMOUNT]


def test_partial_outcomes_keep_the_pair_valid():
    result = validate_comparison(context(make_record(asset="CDB Banco ABC 2024", applied=1_000_010)))

    assert result.is_valid
    assert [o.validator_key for o in result.partial_matches()] == [ValidatorKey.ASSET_NAME, ValidatorKey.AMOUNT]

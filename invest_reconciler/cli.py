"""Command-line entrypoint for investment reconciliation."""
from __future__ import annotations

import argparse
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Sequence

from invest_reconciler.application.archive.use_cases import ArchiveRunUseCase
from invest_reconciler.application.use_cases import (
    ReconcileInvestmentsUseCase,
    ReconciliationContext,
)
from invest_reconciler.config import SETTINGS
from invest_reconciler.domain.archive.entities import RunArtifact
from invest_reconciler.domain.models import (
    DEFAULT_AMOUNT_THRESHOLD_CENTS,
    DEFAULT_DATE_THRESHOLD_DAYS,
    InvestmentRecord,
    ReconcileConfig,
)
from invest_reconciler.domain.results import MergeResult
from invest_reconciler.domain.services import InvestmentReconciler
from invest_reconciler.infrastructure.archive.file_repository import FileSystemArchiveRepository
from invest_reconciler.infrastructure.parsing.utils import ensure_bytes
from invest_reconciler.infrastructure.repositories.file_repositories import (
    BankStatementRepository,
    BaseLedgerRepository,
)
from invest_reconciler.logging_setup import configure_logging, get_logger
from invest_reconciler.presentation.report import (
    build_workbook_bytes,
    conflicts_to_rows,
    render_json,
)

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_CONFLICTS = 1
EXIT_INPUT_ERROR = 2

JSON_REPORT_NAME = "conflicts-invest-updates.json"
WORKBOOK_NAME = "reconciliation.xlsx"


def _non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a value >= 0, got {value}")
    return value


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile a bank investment statement against the base ledger")
    parser.add_argument("bank", type=str, help="Path to the bank statement JSON export")
    parser.add_argument("base", type=str, help="Path to the base ledger Excel workbook")
    parser.add_argument("--sheet", type=str, default=None, help=f"Ledger sheet name (default: {SETTINGS.base_sheet})")
    parser.add_argument(
        "--date-threshold-days",
        type=_non_negative_int,
        default=DEFAULT_DATE_THRESHOLD_DAYS,
        help="Days of tolerated drift on purchase/due dates",
    )
    parser.add_argument(
        "--amount-threshold-cents",
        type=_non_negative_int,
        default=DEFAULT_AMOUNT_THRESHOLD_CENTS,
        help="Cents of tolerated drift on the applied amount",
    )
    parser.add_argument("--no-fuzzy", action="store_true", help="Disable prefix matching on asset names")
    parser.add_argument("--reference-date", type=str, help="Date used for overdue checks (YYYY-MM-DD)")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=SETTINGS.output_dir,
        help="Archive inputs, JSON report and workbook under this directory",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: INFO)")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ReconcileConfig:
    overrides: dict[str, object] = {
        "date_threshold_days": args.date_threshold_days,
        "amount_threshold_cents": args.amount_threshold_cents,
        "enable_fuzzy_asset_name_match": not args.no_fuzzy,
    }
    if args.reference_date:
        overrides["reference_date"] = date.fromisoformat(args.reference_date)
    return ReconcileConfig(**overrides)


def print_report(result: MergeResult) -> None:
    summary = result.summary
    print("Reconciliation Summary")
    print("======================")
    print(f"Base records: {summary.total_base}")
    print(f"Bank records: {summary.total_bank}")
    print(f"Matched: {summary.matched}")
    print(f"Matched within tolerance: {summary.partial_matches}")
    print(f"Unmatched base: {summary.unmatched_base}")
    print(f"Unmatched bank: {summary.unmatched_bank}")
    print(f"Overdue: {summary.overdue}")

    if result.has_issues():
        print("\nConflicts:")
        for row in conflicts_to_rows(result.conflicts):
            print(f"- [{row['source']}] {row['ativo']} ({row['dataVencimento']}): {row['causes']}")
    else:
        print("\nNo conflicts detected.")


def archive_run(
    output_dir: Path,
    bank_path: Path,
    base_path: Path,
    result: MergeResult,
    bank_records: Sequence[InvestmentRecord],
) -> Path:
    use_case = ArchiveRunUseCase(repository=FileSystemArchiveRepository(output_dir))
    receipt = use_case.archive_reconciliation(
        inputs=[
            RunArtifact(name=bank_path.name, content=ensure_bytes(bank_path)),
            RunArtifact(name=base_path.name, content=ensure_bytes(base_path)),
        ],
        outputs=[
            RunArtifact(name=JSON_REPORT_NAME, content=render_json(result).encode("utf-8")),
            RunArtifact(name=WORKBOOK_NAME, content=build_workbook_bytes(result, bank_records)),
        ],
        summary=result.summary,
        now=datetime.now(SETTINGS.timezone),
    )
    return receipt.location


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level or SETTINGS.log_level)

    bank_path = Path(args.bank)
    base_path = Path(args.base)
    try:
        context = ReconciliationContext(
            base_repository=BaseLedgerRepository(base_path, sheet_name=args.sheet),
            bank_repository=BankStatementRepository(bank_path),
            reconciler=InvestmentReconciler(build_config(args)),
        )
        result, _, bank_records = ReconcileInvestmentsUseCase(context).execute()
    except (OSError, ValueError, TypeError) as exc:
        logger.error("Could not reconcile %s against %s: %s", bank_path, base_path, exc)
        return EXIT_INPUT_ERROR

    print_report(result)

    if args.output_dir:
        location = archive_run(Path(args.output_dir), bank_path, base_path, result, bank_records)
        print(f"\nReports written to {location}")

    return EXIT_CONFLICTS if result.has_issues() else EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

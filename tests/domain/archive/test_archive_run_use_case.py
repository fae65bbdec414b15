import json
from datetime import datetime
from pathlib import Path

import pytest

from invest_reconciler.application.archive.use_cases import ArchiveRunUseCase
from invest_reconciler.domain.archive.entities import ArchiveRunRequest, RunArtifact
from invest_reconciler.domain.results import ReconciliationSummary
from invest_reconciler.infrastructure.archive.file_repository import FileSystemArchiveRepository


@pytest.fixture
def repo(tmp_path: Path) -> FileSystemArchiveRepository:
    return FileSystemArchiveRepository(tmp_path / "runs")


def test_archive_use_case_writes_artifacts_and_manifest(repo: FileSystemArchiveRepository, tmp_path: Path) -> None:
    use_case = ArchiveRunUseCase(repository=repo)
    request = ArchiveRunRequest(
        run_id="20241005_101500",
        inputs=[RunArtifact(name="bank.json", content=b"{}")],
        outputs=[RunArtifact(name="conflicts-invest-updates.json", content=b"report")],
        summary={"matched": 3, "conflicts": 1},
    )

    receipt = use_case.execute(request)

    run_dir = tmp_path / "runs" / "20241005_101500"
    assert receipt.location == run_dir
    assert (run_dir / "bank.json").read_bytes() == b"{}"
    assert (run_dir / "conflicts-invest-updates.json").read_bytes() == b"report"

    manifest = json.loads((run_dir / "manifest.json").read_text())
    assert manifest["run_id"] == "20241005_101500"
    assert manifest["inputs"] == [{"name": "bank.json", "bytes": 2}]
    assert manifest["outputs"] == [{"name": "conflicts-invest-updates.json", "bytes": 6}]
    assert manifest["summary"] == {"matched": 3, "conflicts": 1}


def test_archive_normalizes_timestamp_run_ids(repo: FileSystemArchiveRepository, tmp_path: Path) -> None:
    receipt = ArchiveRunUseCase(repository=repo).execute(
        ArchiveRunRequest(run_id=" 2024/10/05 10:15:00 ", inputs=[], outputs=[])
    )

    assert receipt.run_id == "20241005_101500"
    assert (tmp_path / "runs" / "20241005_101500" / "manifest.json").is_file()


def test_archive_keeps_artifacts_inside_the_run_directory(repo: FileSystemArchiveRepository, tmp_path: Path) -> None:
    receipt = ArchiveRunUseCase(repository=repo).execute(
        ArchiveRunRequest(run_id="nightly", inputs=[RunArtifact(name="../escape.txt", content=b"x")], outputs=[])
    )

    assert receipt.run_id == "nightly"
    assert (receipt.location / "escape.txt").read_bytes() == b"x"
    assert not (tmp_path / "runs" / "escape.txt").exists()


def test_archive_reconciliation_stamps_run_id_and_records_summary(
    repo: FileSystemArchiveRepository, tmp_path: Path
) -> None:
    summary = ReconciliationSummary(total_base=2, total_bank=3, matched=2, partial_matches=1, unmatched_bank=1)

    receipt = ArchiveRunUseCase(repository=repo).archive_reconciliation(
        inputs=[RunArtifact(name="bank.json", content=b"{}")],
        outputs=[],
        summary=summary,
        now=datetime(2024, 10, 5, 10, 15, 0),
    )

    assert receipt.run_id == "20241005_101500"
    manifest = json.loads((tmp_path / "runs" / "20241005_101500" / "manifest.json").read_text())
    assert manifest["summary"] == {
        "total_base": 2,
        "total_bank": 3,
        "matched": 2,
        "partial_matches": 1,
        "unmatched_base": 0,
        "unmatched_bank": 1,
        "overdue": 0,
    }


def test_archive_reconciliation_requires_inputs(repo: FileSystemArchiveRepository) -> None:
    with pytest.raises(ValueError):
        ArchiveRunUseCase(repository=repo).archive_reconciliation(
            inputs=[], outputs=[], summary=ReconciliationSummary()
        )

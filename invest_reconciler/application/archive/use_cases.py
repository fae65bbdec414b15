"""Use case archiving one reconciliation run."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Sequence

from invest_reconciler.domain.archive.entities import (
    ArchiveReceipt,
    ArchiveRunRequest,
    RunArtifact,
)
from invest_reconciler.domain.results import ReconciliationSummary
from invest_reconciler.infrastructure.archive.file_repository import FileSystemArchiveRepository
from invest_reconciler.logging_setup import get_logger

logger = get_logger(__name__)

RUN_ID_FORMAT = "%Y%m%d_%H%M%S"


@dataclass(slots=True)
class ArchiveRunUseCase:
    repository: FileSystemArchiveRepository

    def execute(self, request: ArchiveRunRequest) -> ArchiveReceipt:
        receipt = self.repository.save_run(request)
        logger.info("Archived run %s to %s", receipt.run_id, receipt.location)
        return receipt

    def archive_reconciliation(
        self,
        inputs: Sequence[RunArtifact],
        outputs: Sequence[RunArtifact],
        summary: ReconciliationSummary,
        run_id: str | None = None,
        now: datetime | None = None,
    ) -> ArchiveReceipt:
        """Archive a finished reconciliation, stamping the run id from ``now`` when none is given."""

        if not inputs:
            raise ValueError("A reconciliation run needs at least one input artifact")
        stamp = now or datetime.now(timezone.utc)
        request = ArchiveRunRequest(
            run_id=run_id or stamp.strftime(RUN_ID_FORMAT),
            inputs=list(inputs),
            outputs=list(outputs),
            summary=asdict(summary),
        )
        return self.execute(request)

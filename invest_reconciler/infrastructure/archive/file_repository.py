"""Filesystem repository storing the inputs and outputs of reconciliation runs."""
from __future__ import annotations

import json
import re
from pathlib import Path

from invest_reconciler.domain.archive.entities import (
    ArchiveReceipt,
    ArchiveRunRequest,
    RunArtifact,
)
from invest_reconciler.logging_setup import get_logger

logger = get_logger(__name__)

MANIFEST_NAME = "manifest.json"


def normalize_run_id(run_id: str) -> str:
    """Turn timestamps like ``2024-10-05 10:15:00`` into ``20241005_101500``."""
    if not run_id:
        return "run"
    digits = re.findall(r"\d", run_id)
    if len(digits) >= 14:
        normalized = f"{''.join(digits[:8])}_{''.join(digits[8:14])}"
        return normalized + "".join(digits[14:])
    sanitized = re.sub(r"[^0-9A-Za-z_-]+", "", run_id.strip())
    return sanitized or "run"


class FileSystemArchiveRepository:
    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def save_run(self, request: ArchiveRunRequest) -> ArchiveReceipt:
        run_id = normalize_run_id(request.run_id)
        run_dir = self._root / run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        for artifact in request.iter_artifacts():
            (run_dir / Path(artifact.name).name).write_bytes(artifact.content)

        manifest = {
            "run_id": run_id,
            "inputs": [self._manifest_entry(a) for a in request.inputs],
            "outputs": [self._manifest_entry(a) for a in request.outputs],
            "summary": dict(request.summary),
        }
        (run_dir / MANIFEST_NAME).write_text(json.dumps(manifest, indent=2), encoding="utf-8")
        logger.info("Archived run %s to %s", run_id, run_dir)
        return ArchiveReceipt(run_id=run_id, location=run_dir)

    @staticmethod
    def _manifest_entry(artifact: RunArtifact) -> dict[str, object]:
        return {"name": Path(artifact.name).name, "bytes": len(artifact.content)}

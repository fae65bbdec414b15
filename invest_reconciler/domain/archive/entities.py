"""Entities describing one archived reconciliation run."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence


@dataclass(frozen=True)
class RunArtifact:
    name: str
    content: bytes


@dataclass(frozen=True)
class ArchiveRunRequest:
    run_id: str
    inputs: Sequence[RunArtifact]
    outputs: Sequence[RunArtifact]
    summary: Mapping[str, Any] = field(default_factory=dict)

    def iter_artifacts(self) -> Iterable[RunArtifact]:
        yield from self.inputs
        yield from self.outputs


@dataclass(frozen=True)
class ArchiveReceipt:
    run_id: str
    location: Path

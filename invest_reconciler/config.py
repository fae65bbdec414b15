"""Central configuration for the investment reconciler entrypoints."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Mapping

from invest_reconciler.domain.models import DEFAULT_CURRENCY

DEFAULT_BASE_SHEET = "base"


@dataclass(slots=True, frozen=True)
class Settings:
    currency: str
    timezone: tzinfo
    output_dir: Path | None
    base_sheet: str
    log_level: str


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        currency=env.get("INVEST_RECON_CURRENCY", DEFAULT_CURRENCY).strip().upper() or DEFAULT_CURRENCY,
        timezone=timezone.utc,
        output_dir=Path(env["INVEST_RECON_OUTPUT_DIR"]) if env.get("INVEST_RECON_OUTPUT_DIR") else None,
        base_sheet=env.get("INVEST_RECON_BASE_SHEET") or DEFAULT_BASE_SHEET,
        log_level=env.get("INVEST_RECON_LOG_LEVEL") or "INFO",
    )


SETTINGS = load_settings()

"""Logging setup and JSON Lines records of synthesis runs."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping


def configure_logging(level: str) -> None:
    """Configure logging format and level for CLI commands."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(message)s",
    )


class JsonlLogger:
    """Append JSON-serializable records to a JSON Lines file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, record: Mapping[str, Any]) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(dict(record), ensure_ascii=False) + "\n")


def synthesis_record(
    *,
    config: Mapping[str, Any],
    signal_length: int,
    n_channels: int,
    elapsed_sec: float,
    output: str | Path,
) -> dict[str, Any]:
    """Build the record written for one CLI synthesis run."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "config": dict(config),
        "L": int(signal_length),
        "W": int(n_channels),
        "elapsed_sec": float(elapsed_sec),
        "output": str(output),
    }

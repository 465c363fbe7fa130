"""CSV export of extracted snapshot rows."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import pandas as pd

from .extractor import Extraction
from .logging import get_logger
from .models import SnapshotRow

HEADERS = ("pid", "path", "hash_id")

_logger = get_logger("exporter")


class ExportError(RuntimeError):
    """Raised when the CSV output cannot be written."""


def flatten(extractions: Iterable[Extraction]) -> List[SnapshotRow]:
    """Concatenate the rows of successful extractions, preserving order."""
    rows: List[SnapshotRow] = []
    for extraction in extractions:
        if extraction.ok:
            rows.extend(extraction.rows)
    return rows


def export_rows(rows: Iterable[SnapshotRow], output_dir: Path, filename: str) -> Path:
    """Write ``rows`` to ``output_dir/filename`` with the fixed header, overwriting."""
    target = Path(output_dir) / filename
    frame = pd.DataFrame([row.as_tuple() for row in rows], columns=list(HEADERS))
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(target, index=False, encoding="utf-8", lineterminator="\n")
    except OSError as exc:
        raise ExportError(f"Failed to write {target}: {exc}") from exc
    _logger.info("Wrote %d rows to %s", len(frame), target)
    return target


__all__ = ["ExportError", "HEADERS", "export_rows", "flatten"]

"""Exceptions raised by codebook ingestion.

Only structural faults raise. Row-level and cross-reference problems are
reported through the diagnostic sink and never interrupt ingestion.
"""

from __future__ import annotations

from pathlib import Path


class CodebookError(Exception):
    """Base class for codebook ingestion errors."""


class CodebookIngestionError(CodebookError):
    """A workbook cannot be ingested at all (unreadable or missing a required sheet)."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"{message} ({self.path.name})"
        super().__init__(message)

"""Diagnostic record emitted while ingesting a codebook workbook."""

from __future__ import annotations

from pydantic import Field

from codebook_ingest.models.common import (
    CodebookBase,
    DiagnosticSeverity,
    UTCTimestamp,
    utc_now,
)


class Diagnostic(CodebookBase):
    """One rendered ingestion message.

    ``version_label`` is the raw version text of the codebook being read,
    or an empty string for messages emitted outside a codebook.
    """

    severity: DiagnosticSeverity
    version_label: str = ""
    message: str
    recorded_at: UTCTimestamp = Field(default_factory=utc_now)

    @property
    def is_error(self) -> bool:
        return self.severity == DiagnosticSeverity.ERROR

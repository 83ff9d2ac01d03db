"""Diagnostic sinks: the only error channel of the ingestion core.

Every component receives a sink and calls
``sink.record(severity, version_label, message, *args)``. Messages use
``%``-style placeholders, rendered lazily the way ``logging`` does.
"""

from __future__ import annotations

import logging
from typing import Protocol

from codebook_ingest.models.common import DiagnosticSeverity
from codebook_ingest.models.diagnostics import Diagnostic

logger = logging.getLogger(__name__)

_LOG_LEVELS: dict[DiagnosticSeverity, int] = {
    DiagnosticSeverity.INFO: logging.INFO,
    DiagnosticSeverity.WARNING: logging.WARNING,
    DiagnosticSeverity.ERROR: logging.ERROR,
}


class DiagnosticSink(Protocol):
    """Receives ingestion diagnostics."""

    def record(
        self,
        severity: DiagnosticSeverity,
        version_label: str,
        message: str,
        *args: object,
    ) -> None:
        ...


class LoggingSink:
    """Forwards diagnostics to a stdlib logger, prefixed with the codebook version."""

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger

    def record(
        self,
        severity: DiagnosticSeverity,
        version_label: str,
        message: str,
        *args: object,
    ) -> None:
        self._logger.log(
            _LOG_LEVELS[severity],
            "codebook version: %s; " + message,
            version_label,
            *args,
        )


class RecordingSink(LoggingSink):
    """Keeps every diagnostic in memory and still forwards it to logging.

    Used by the batch driver to print a summary after a run, and by tests
    to assert on emitted diagnostics.
    """

    def __init__(self, target: logging.Logger | None = None) -> None:
        super().__init__(target)
        self.diagnostics: list[Diagnostic] = []

    def record(
        self,
        severity: DiagnosticSeverity,
        version_label: str,
        message: str,
        *args: object,
    ) -> None:
        super().record(severity, version_label, message, *args)
        rendered = message % args if args else message
        self.diagnostics.append(
            Diagnostic(
                severity=severity,
                version_label=version_label,
                message=rendered,
            )
        )

    def by_severity(self, severity: DiagnosticSeverity) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == severity]

    @property
    def errors(self) -> list[Diagnostic]:
        return self.by_severity(DiagnosticSeverity.ERROR)

    @property
    def warnings(self) -> list[Diagnostic]:
        return self.by_severity(DiagnosticSeverity.WARNING)

    def clear(self) -> None:
        self.diagnostics.clear()


def default_sink() -> DiagnosticSink:
    """Sink used when a caller does not inject one."""
    return LoggingSink()

"""Codebook manager — ingests a directory of workbooks, indexed by version.

Files are selected by name: ``*.xlsx`` that do not start with ``~`` (the
lock files spreadsheet editors leave next to an open workbook). Codebooks
are kept in ascending numeric version order. Two workbooks coercing to the
same version share one slot; the one read last wins.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from codebook_ingest.config.settings import RunParameters
from codebook_ingest.ingestion.codebook import Codebook
from codebook_ingest.ingestion.diagnostics import DiagnosticSink, default_sink
from codebook_ingest.ingestion.errors import CodebookIngestionError
from codebook_ingest.models.common import DiagnosticSeverity, StatusCode

logger = logging.getLogger(__name__)

WORKBOOK_EXTENSIONS: tuple[str, ...] = (".xlsx",)
LOCK_FILE_PREFIX = "~"


def is_codebook_file(file_name: str) -> bool:
    """True for names with a workbook extension that are not lock files."""
    return file_name.endswith(WORKBOOK_EXTENSIONS) and not file_name.startswith(
        LOCK_FILE_PREFIX
    )


def discover_codebook_files(directory: str | Path) -> list[Path]:
    """Workbook files directly inside ``directory``, sorted by name."""
    directory = Path(directory)
    files = []
    for name in sorted(os.listdir(directory)):
        path = directory / name
        if path.is_file() and is_codebook_file(name):
            files.append(path)
    return files


class CodebookManager:
    """Ordered index of numeric version -> Codebook for one run."""

    def __init__(self) -> None:
        self._codebooks: dict[float, Codebook] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def ingest_directory(
        cls,
        directory: str | Path,
        languages: Iterable[str],
        status_code: StatusCode | str = StatusCode.DRAFT,
        sink: DiagnosticSink | None = None,
        continue_on_error: bool = False,
    ) -> CodebookManager:
        """Read every codebook workbook in ``directory``.

        By default the first workbook that raises aborts the whole call.
        With ``continue_on_error`` the failure is logged and the remaining
        files are still read.
        """
        sink = sink or default_sink()
        languages = list(languages)
        manager = cls()

        for path in discover_codebook_files(directory):
            logger.info("Reading codebook: %s", path.name)
            try:
                codebook = Codebook.read_from(path, languages, status_code, sink=sink)
            except CodebookIngestionError as exc:
                if not continue_on_error:
                    raise
                sink.record(
                    DiagnosticSeverity.ERROR,
                    "",
                    "Skipping workbook %s: %s",
                    path.name,
                    exc,
                )
                continue
            manager.add_codebook(codebook)

        logger.info(
            "Ingested %d codebook version(s) from %s", len(manager), directory
        )
        return manager

    @classmethod
    def from_run_parameters(
        cls,
        params: RunParameters,
        sink: DiagnosticSink | None = None,
        continue_on_error: bool = False,
    ) -> CodebookManager:
        return cls.ingest_directory(
            params.codebook_directory,
            params.languages,
            params.status_code,
            sink=sink,
            continue_on_error=continue_on_error,
        )

    def add_codebook(self, codebook: Codebook) -> None:
        """Index a codebook by its numeric version, replacing any previous holder."""
        previous = self._codebooks.get(codebook.version)
        if previous is not None:
            logger.warning(
                "Version %s from %s replaces the codebook read from %s",
                codebook.version,
                codebook.source_path,
                previous.source_path,
            )
        self._codebooks[codebook.version] = codebook

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def versions(self) -> tuple[float, ...]:
        """All known versions, smallest first."""
        return tuple(sorted(self._codebooks))

    def get_codebook(self, version: float) -> Codebook | None:
        """Codebook for ``version``, or None when unknown."""
        return self._codebooks.get(version)

    def latest(self) -> Codebook | None:
        if not self._codebooks:
            return None
        return self._codebooks[max(self._codebooks)]

    def __iter__(self) -> Iterator[Codebook]:
        """Codebooks in ascending version order."""
        return (self._codebooks[v] for v in sorted(self._codebooks))

    def __len__(self) -> int:
        return len(self._codebooks)

    def __contains__(self, version: object) -> bool:
        return version in self._codebooks

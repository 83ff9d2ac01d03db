"""Codebook aggregate — one workbook's parsed metadata and concepts.

``Codebook.read_from`` is the ingestion entry point for a single workbook:

    1. open the workbook (closed on every exit path)
    2. require the ``Info`` sheet and parse it
    3. require the ``Codebook`` sheet; row 0 is the header
    4. feed every non-empty data row to the ConceptBuilder

Only a missing ``Info`` or ``Codebook`` sheet (or an unreadable file)
raises; everything else is reported through the diagnostic sink.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from uuid import UUID

from codebook_ingest.ingestion.concepts import ConceptBuilder
from codebook_ingest.ingestion.diagnostics import DiagnosticSink, default_sink
from codebook_ingest.ingestion.errors import CodebookIngestionError
from codebook_ingest.ingestion.info_sheet import InfoSheetResult, parse_info_sheet
from codebook_ingest.ingestion.workbook import open_workbook
from codebook_ingest.models.codebook import Concept, LanguageSettings
from codebook_ingest.models.common import DiagnosticSeverity, StatusCode, new_uuid7

logger = logging.getLogger(__name__)

INFO_SHEET = "Info"
MAIN_SHEET = "Codebook"


def coerce_version_label(version_label: str, sink: DiagnosticSink) -> float:
    """Numeric sort key for a free-text version label.

    "33" -> 33.0, "1.5" -> 1.5. Anything else, including NaN/inf, is
    logged and becomes 0.0, so malformed labels share the same key.
    """
    try:
        version = float(version_label)
    except (TypeError, ValueError):
        version = math.nan
    if not math.isfinite(version):
        sink.record(
            DiagnosticSeverity.ERROR,
            version_label or "",
            "Only numbers are supported as version labels, got %r",
            version_label,
        )
        return 0.0
    return version


class Codebook:
    """Parsed content of one codebook workbook. Read-only once built."""

    def __init__(
        self,
        *,
        info: InfoSheetResult,
        version: float,
        header_list: Iterable[str],
        concepts: dict[str, Concept],
        source_path: Path | None = None,
        ingestion_id: UUID | None = None,
    ) -> None:
        self.version_label = info.version_label
        self.version = version
        self.effective_date = info.effective_date
        self.effective_date_text = info.effective_date_text
        self.language_settings: Mapping[str, LanguageSettings] = MappingProxyType(
            dict(info.language_settings)
        )
        self.header_list: tuple[str, ...] = tuple(header_list)
        self.concepts: Mapping[str, Concept] = MappingProxyType(concepts)
        self.source_path = source_path
        self.ingestion_id = ingestion_id or new_uuid7()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    @classmethod
    def read_from(
        cls,
        path: str | Path,
        languages: Iterable[str],
        status_code: StatusCode | str = StatusCode.DRAFT,
        sink: DiagnosticSink | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> Codebook:
        """Read one workbook into a Codebook.

        Raises:
            CodebookIngestionError: the file cannot be opened, a sheet
                cannot be parsed, or the ``Info`` / ``Codebook`` sheet is
                missing.
        """
        path = Path(path)
        sink = sink or default_sink()
        languages = list(languages)
        status_code = StatusCode(status_code)

        with open_workbook(path) as source:
            info_lookup = source.get_sheet(INFO_SHEET)
            if not info_lookup.found:
                raise CodebookIngestionError("Info sheet missing", path)
            info = parse_info_sheet(info_lookup.sheet, languages, sink, now=now)

            main_lookup = source.get_sheet(MAIN_SHEET)
            if not main_lookup.found:
                raise CodebookIngestionError("Codebook sheet missing", path)
            sheet = main_lookup.sheet
            header = sheet.header()

            concepts: dict[str, Concept] = {}
            builder = ConceptBuilder(
                source,
                concepts,
                languages=languages,
                status_code=status_code,
                version_label=info.version_label,
                effective_date_text=info.effective_date_text,
                sink=sink,
            )
            for row in sheet.data_rows():
                builder.add_row(row, header)

        codebook = cls(
            info=info,
            version=coerce_version_label(info.version_label, sink),
            header_list=header,
            concepts=concepts,
            source_path=path,
        )
        logger.info(
            "Read codebook %s: version=%s, concepts=%d, ingestion_id=%s",
            path.name, info.version_label, len(concepts), codebook.ingestion_id,
        )
        return codebook

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def all_concepts(self) -> list[Concept]:
        """Concepts in sheet order."""
        return list(self.concepts.values())

    def get_concept(self, concept_id: str) -> Concept | None:
        return self.concepts.get(concept_id)

    def root_concepts(self) -> list[Concept]:
        """Concepts without a parent reference."""
        return [c for c in self.concepts.values() if not c.parent_id]

    def children_of(self, concept_id: str) -> list[Concept]:
        """Concepts whose ``parent_id`` is ``concept_id``, in sheet order."""
        return [c for c in self.concepts.values() if c.parent_id == concept_id]

    @property
    def code_list_entry_count(self) -> int:
        return sum(len(c.code_list_entries) for c in self.concepts.values())

    def __len__(self) -> int:
        return len(self.concepts)

    def __repr__(self) -> str:
        return (
            f"Codebook(version={self.version!r}, "
            f"effective_date={self.effective_date_text!r}, "
            f"concepts={len(self.concepts)})"
        )

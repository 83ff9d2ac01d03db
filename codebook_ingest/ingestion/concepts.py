"""Build and validate concepts from rows of the main ``Codebook`` sheet.

Every check runs so that one pass reports all defects of a row. A row that
fails a mandatory check is skipped entirely, including its code list: any
defects in that code list only surface once the concept row is fixed.
"""

from __future__ import annotations

import logging
from collections.abc import Container, Iterable
from dataclasses import dataclass

from codebook_ingest.ingestion.codelists import attach_code_list
from codebook_ingest.ingestion.diagnostics import DiagnosticSink
from codebook_ingest.ingestion.typos import is_probable_typo, suggested_value
from codebook_ingest.ingestion.workbook import Row, WorkbookSource
from codebook_ingest.models.codebook import Concept
from codebook_ingest.models.common import DiagnosticSeverity, StatusCode

logger = logging.getLogger(__name__)

CONCEPT_COLUMNS = (
    "id",
    "codesystem",
    "code",
    "description_code",
    "codelist_ref",
    "properties",
    "parent",
    "data_type",
)


@dataclass(frozen=True)
class ConceptRow:
    """Raw text of the concept columns of one main-sheet row."""

    id: str
    codesystem: str
    code: str
    description_code: str
    codelist_ref: str
    properties: str
    parent: str
    data_type: str
    descriptions: dict[str, str]

    @classmethod
    def from_row(
        cls, row: Row, header: list[str], languages: Iterable[str]
    ) -> ConceptRow:
        values = {name: row.value(name, header) for name in CONCEPT_COLUMNS}
        descriptions = {
            language: row.value(f"description_{language}", header)
            for language in languages
        }
        return cls(descriptions=descriptions, **values)


def validate_concept_row(
    entry: ConceptRow,
    existing_ids: Container[str],
    version_label: str,
    sink: DiagnosticSink,
) -> bool:
    """Run all concept checks; False if any mandatory check failed.

    A probable codesystem typo is reported as a warning and never fails
    the row.
    """
    is_valid = True
    if entry.id in existing_ids:
        sink.record(
            DiagnosticSeverity.ERROR,
            version_label,
            "Concept: duplicate identifier, the identifier in the codebook must be unique %s",
            entry.id,
        )
        is_valid = False
    if not entry.code:
        sink.record(
            DiagnosticSeverity.ERROR,
            version_label,
            "Concept: mandatory code missing for concept %s",
            entry.id,
        )
        is_valid = False
    if not entry.codesystem:
        sink.record(
            DiagnosticSeverity.ERROR,
            version_label,
            "Concept: mandatory codesystem missing for concept %s",
            entry.id,
        )
        is_valid = False
    if not entry.description_code:
        sink.record(
            DiagnosticSeverity.ERROR,
            version_label,
            "Concept: mandatory code description missing for concept %s",
            entry.id,
        )
        is_valid = False
    if is_probable_typo(entry.codesystem):
        sink.record(
            DiagnosticSeverity.WARNING,
            version_label,
            "Concept: Codesystem found: %s for %s. Did you mean %s?",
            entry.codesystem,
            entry.id,
            suggested_value(entry.codesystem),
        )
    return is_valid


class ConceptBuilder:
    """Turns main-sheet rows into concepts inside one codebook's concept map."""

    def __init__(
        self,
        source: WorkbookSource,
        concepts: dict[str, Concept],
        *,
        languages: Iterable[str],
        status_code: StatusCode,
        version_label: str,
        effective_date_text: str,
        sink: DiagnosticSink,
    ) -> None:
        self._source = source
        self._concepts = concepts
        self._languages = list(languages)
        self._status_code = status_code
        self._version_label = version_label
        self._effective_date_text = effective_date_text
        self._sink = sink

    def add_row(self, row: Row, header: list[str]) -> Concept | None:
        """Validate one row and insert its concept; None when the row is rejected."""
        entry = ConceptRow.from_row(row, header, self._languages)
        if not validate_concept_row(
            entry, self._concepts, self._version_label, self._sink
        ):
            logger.debug("Rejected row %d (id=%r)", row.index, entry.id)
            return None

        concept = Concept(
            id=entry.id,
            codesystem=entry.codesystem,
            code=entry.code,
            code_description=entry.description_code,
            properties=entry.properties,
            parent_id=entry.parent or None,
            data_type=entry.data_type,
            codelist_ref=entry.codelist_ref or None,
            effective_date=self._effective_date_text,
            version_label=self._version_label,
            status_code=self._status_code,
        )
        for language in self._languages:
            concept.add_language_description(language, entry.descriptions[language])

        self._concepts[concept.id] = concept

        if entry.codelist_ref:
            attach_code_list(
                self._source,
                concept,
                entry.codelist_ref,
                self._languages,
                self._version_label,
                self._sink,
            )
        return concept

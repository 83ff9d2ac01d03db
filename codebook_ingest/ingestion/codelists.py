"""Attach auxiliary code-list sheets to concepts.

A concept's ``codelist_ref`` names a sheet in the same workbook. Row 0 of
that sheet is its own header; every further non-empty row becomes one
CodeListEntry. Entries keep row order and duplicates are kept.
"""

from __future__ import annotations

from collections.abc import Iterable

from codebook_ingest.ingestion.diagnostics import DiagnosticSink
from codebook_ingest.ingestion.workbook import Row, Sheet, WorkbookSource
from codebook_ingest.models.codebook import CodeListEntry, Concept
from codebook_ingest.models.common import DiagnosticSeverity


def build_code_list_entry(
    row: Row,
    header: list[str],
    languages: Iterable[str],
    concept_id: str,
    codelist_ref: str,
) -> CodeListEntry:
    """One entry from a code-list row: cells keyed by header, plus per-language text."""
    values: dict[str, str] = {}
    for column_index, name in enumerate(header):
        if name:
            values[name] = row.cell_text(column_index)
    language_texts = {
        language: row.value(f"description_{language}", header)
        for language in languages
    }
    return CodeListEntry(
        concept_id=concept_id,
        codelist_ref=codelist_ref,
        values=values,
        language_texts=language_texts,
    )


def read_code_list(
    sheet: Sheet,
    languages: Iterable[str],
    concept_id: str,
) -> list[CodeListEntry]:
    """Parse every data row of a code-list sheet."""
    languages = list(languages)
    header = sheet.header()
    return [
        build_code_list_entry(row, header, languages, concept_id, sheet.name)
        for row in sheet.data_rows()
    ]


def attach_code_list(
    source: WorkbookSource,
    concept: Concept,
    codelist_ref: str,
    languages: Iterable[str],
    version_label: str,
    sink: DiagnosticSink,
) -> int:
    """Append the referenced sheet's entries to ``concept``.

    Returns the number of entries added. A reference to a sheet that does
    not exist is logged once and leaves the concept without entries.
    """
    lookup = source.get_sheet(codelist_ref)
    if not lookup.found:
        sink.record(
            DiagnosticSeverity.ERROR,
            version_label,
            "Severe Error: Issue adding codelist, ref = %s (no such sheet)",
            codelist_ref,
        )
        return 0

    entries = read_code_list(lookup.sheet, languages, concept.id)
    for entry in entries:
        concept.add_code_list_entry(entry)
    return len(entries)

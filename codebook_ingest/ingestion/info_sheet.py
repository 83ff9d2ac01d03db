"""Parse the two-column ``Info`` sheet of a codebook workbook.

The sheet holds key/value pairs, e.g.:

    Version                 33
    effectiveDate           2021-03-15
    DatasetName_nl          PALGA colonbiopt protocol versie 33
    DatasetDescription_nl   Versie 33 van het PALGA colonbiopt protocol

Keys are matched case-insensitively; a repeated key keeps the last value.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime

from codebook_ingest.ingestion.diagnostics import DiagnosticSink
from codebook_ingest.ingestion.workbook import Sheet
from codebook_ingest.models.codebook import LanguageSettings
from codebook_ingest.models.common import DiagnosticSeverity

DATE_INPUT_FORMAT = "%Y-%m-%d"
DATE_OUTPUT_FORMAT = "%Y-%m-%dT%H:%M:%S"
FALLBACK_EFFECTIVE_DATE = datetime(1900, 1, 1)

VERSION_KEY = "version"
EFFECTIVE_DATE_KEY = "effectiveDate"
DATASET_DESCRIPTION_KEY = "DatasetDescription_{language}"


@dataclass(frozen=True)
class InfoBlock:
    """Case-insensitive key/value lookup built from the Info sheet."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.values.get(key.lower(), default)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self.values

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class InfoSheetResult:
    """Codebook metadata derived from the Info sheet."""

    version_label: str
    effective_date: datetime
    effective_date_text: str
    language_settings: dict[str, LanguageSettings]


def read_info_block(sheet: Sheet) -> InfoBlock:
    """Collect columns 0 and 1 of every non-empty row (row 0 included)."""
    values: dict[str, str] = {}
    for index in range(sheet.last_row_index + 1):
        row = sheet.get_row(index)
        if row is None or row.is_empty():
            continue
        values[row.cell_text(0).lower()] = row.cell_text(1)
    return InfoBlock(values=values)


def resolve_effective_date(
    info: InfoBlock,
    version_label: str,
    sink: DiagnosticSink,
    now: Callable[[], datetime] = datetime.now,
) -> datetime:
    """Parse ``effectiveDate``; fall back to 1900-01-01 (bad text) or now (absent)."""
    if EFFECTIVE_DATE_KEY not in info:
        sink.record(
            DiagnosticSeverity.WARNING,
            version_label,
            "Warning: The effective date is not available in the Info sheet "
            "(yyyy-mm-dd). Setting it to today...",
        )
        return now()

    text = info.get(EFFECTIVE_DATE_KEY, "") or ""
    try:
        return datetime.strptime(text, DATE_INPUT_FORMAT)
    except ValueError:
        sink.record(
            DiagnosticSeverity.ERROR,
            version_label,
            "Severe Error: The effective date is not in the correct format %s",
            text,
        )
        return FALLBACK_EFFECTIVE_DATE


def resolve_language_settings(
    info: InfoBlock, languages: Iterable[str]
) -> dict[str, LanguageSettings]:
    """One LanguageSettings per active language, empty text when the key is missing.

    The dataset name is read from ``DatasetDescription_<lang>`` as well;
    ``DatasetName_<lang>`` is not consulted.
    """
    settings: dict[str, LanguageSettings] = {}
    for language in languages:
        description = info.get(DATASET_DESCRIPTION_KEY.format(language=language), "") or ""
        settings[language] = LanguageSettings(
            dataset_name=description,
            dataset_description=description,
        )
    return settings


def parse_info_sheet(
    sheet: Sheet,
    languages: Iterable[str],
    sink: DiagnosticSink,
    now: Callable[[], datetime] = datetime.now,
) -> InfoSheetResult:
    """Derive version label, effective date and per-language dataset texts."""
    info = read_info_block(sheet)
    version_label = info.get(VERSION_KEY, "") or ""
    effective_date = resolve_effective_date(info, version_label, sink, now=now)
    return InfoSheetResult(
        version_label=version_label,
        effective_date=effective_date,
        effective_date_text=effective_date.strftime(DATE_OUTPUT_FORMAT),
        language_settings=resolve_language_settings(info, languages),
    )

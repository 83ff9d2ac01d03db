"""Tabular source adapter over openpyxl workbooks.

Sheets are addressed by exact name and return an explicit ``SheetLookup``
instead of ``None``. Rows are 0-indexed; row 0 is the header of every sheet.
Cell values are rendered to stripped text:

    None          -> ""
    12.0          -> "12"
    12.5          -> "12.5"
    datetime(...) -> "2021-03-15" (or full ISO text when a time is set)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from codebook_ingest.ingestion.errors import CodebookIngestionError

logger = logging.getLogger(__name__)


def cell_to_text(value: Any) -> str:
    """Render a raw openpyxl cell value as stripped text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def column_index_of(header: list[str], name: str) -> int:
    """Return the position of ``name`` in ``header``, or -1 if absent."""
    try:
        return header.index(name)
    except ValueError:
        return -1


class Row:
    """A single sheet row with text accessors."""

    def __init__(self, index: int, values: tuple[Any, ...]) -> None:
        self.index = index
        self._values = values

    def raw(self, column_index: int) -> Any:
        if 0 <= column_index < len(self._values):
            return self._values[column_index]
        return None

    def cell_text(self, column_index: int) -> str:
        return cell_to_text(self.raw(column_index))

    def value(self, name: str, header: list[str]) -> str:
        """Text of the cell under header column ``name`` ("" when the column is absent)."""
        return self.cell_text(column_index_of(header, name))

    def as_list(self) -> list[str]:
        return [cell_to_text(v) for v in self._values]

    def is_empty(self) -> bool:
        return all(cell_to_text(v) == "" for v in self._values)

    def __len__(self) -> int:
        return len(self._values)


class Sheet:
    """Materialized rows of one worksheet."""

    def __init__(self, name: str, rows: list[tuple[Any, ...]]) -> None:
        self.name = name
        self._rows = rows

    @property
    def last_row_index(self) -> int:
        """Index of the last row, -1 for an empty sheet."""
        return len(self._rows) - 1

    def get_row(self, index: int) -> Row | None:
        if 0 <= index < len(self._rows):
            return Row(index, self._rows[index])
        return None

    def header(self) -> list[str]:
        row = self.get_row(0)
        return row.as_list() if row is not None else []

    def data_rows(self) -> Iterator[Row]:
        """Yield every non-empty row after the header."""
        for index in range(1, len(self._rows)):
            row = Row(index, self._rows[index])
            if not row.is_empty():
                yield row


@dataclass(frozen=True)
class SheetLookup:
    """Outcome of looking a sheet up by name."""

    name: str
    sheet: Sheet | None = None

    @property
    def found(self) -> bool:
        return self.sheet is not None


class WorkbookSource:
    """Read-only view over an open openpyxl workbook."""

    def __init__(self, path: Path, workbook: Any) -> None:
        self.path = path
        self._wb = workbook
        self._cache: dict[str, Sheet] = {}

    @property
    def sheet_names(self) -> list[str]:
        return list(self._wb.sheetnames)

    def get_sheet(self, name: str) -> SheetLookup:
        if name in self._cache:
            return SheetLookup(name=name, sheet=self._cache[name])
        if name not in self._wb.sheetnames:
            return SheetLookup(name=name)
        # Read-only workbooks parse sheet XML lazily, on first iteration.
        try:
            ws = self._wb[name]
            rows = [tuple(r) for r in ws.iter_rows(values_only=True)]
        except (SyntaxError, ValueError, KeyError, BadZipFile) as exc:
            raise CodebookIngestionError(
                f"Cannot read sheet '{name}': {exc}", self.path
            ) from exc
        sheet = Sheet(name, rows)
        self._cache[name] = sheet
        return SheetLookup(name=name, sheet=sheet)

    def close(self) -> None:
        self._wb.close()


@contextmanager
def open_workbook(path: str | Path) -> Iterator[WorkbookSource]:
    """Open a workbook for reading; it is closed on every exit path."""
    path = Path(path)
    try:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (OSError, BadZipFile, InvalidFileException, KeyError, SyntaxError) as exc:
        raise CodebookIngestionError(f"Cannot open workbook: {exc}", path) from exc

    source = WorkbookSource(path, wb)
    logger.debug("Opened workbook %s (sheets: %s)", path.name, source.sheet_names)
    try:
        yield source
    finally:
        source.close()

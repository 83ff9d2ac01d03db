"""Shared pytest fixtures for the codebook ingestion test suite.

Provides:
- write_codebook: build a codebook .xlsx with openpyxl in a temp directory
- sink: a RecordingSink to assert on emitted diagnostics
- truncate_sheet_xml: corrupt one sheet part of a saved workbook
"""

from __future__ import annotations

import zipfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import openpyxl
import pytest

from codebook_ingest.ingestion.diagnostics import RecordingSink

MAIN_HEADER: list[str] = [
    "id",
    "codesystem",
    "code",
    "description_code",
    "codelist_ref",
    "properties",
    "parent",
    "data_type",
    "description_nl",
    "description_en",
]

CODELIST_HEADER: list[str] = [
    "codesystem",
    "code",
    "description_code",
    "description_nl",
    "description_en",
]


def concept_row(
    id: str,
    codesystem: str = "SNOMED CT",
    code: str = "123",
    description_code: str = "Some finding",
    codelist_ref: str = "",
    properties: str = "",
    parent: str = "",
    data_type: str = "code",
    description_nl: str = "",
    description_en: str = "",
) -> list[Any]:
    """One main-sheet row in MAIN_HEADER column order."""
    return [
        id,
        codesystem,
        code,
        description_code,
        codelist_ref,
        properties,
        parent,
        data_type,
        description_nl,
        description_en,
    ]


def build_codebook_xlsx(
    path: Path,
    *,
    version: Any = "1",
    effective_date: Any = "2021-03-15",
    info_rows: Sequence[Sequence[Any]] | None = None,
    header: Sequence[str] | None = None,
    rows: Sequence[Sequence[Any]] = (),
    codelists: dict[str, Sequence[Sequence[Any]]] | None = None,
    with_info: bool = True,
    with_main: bool = True,
) -> Path:
    """Write a minimal codebook workbook.

    ``effective_date=None`` omits the key. ``info_rows`` replaces the
    generated Info rows entirely. Each ``codelists`` value is a list of rows
    written below CODELIST_HEADER.
    """
    wb = openpyxl.Workbook()
    wb.remove(wb.active)

    if with_info:
        ws = wb.create_sheet("Info")
        if info_rows is None:
            info_rows = [["Version", version]]
            if effective_date is not None:
                info_rows.append(["effectiveDate", effective_date])
            info_rows += [
                ["DatasetName_nl", "Protocol versie"],
                ["DatasetDescription_nl", "Beschrijving protocol"],
                ["DatasetName_en", "Protocol version"],
                ["DatasetDescription_en", "Protocol description"],
            ]
        for info_row in info_rows:
            ws.append(list(info_row))

    if with_main:
        ws = wb.create_sheet("Codebook")
        ws.append(list(header if header is not None else MAIN_HEADER))
        for row in rows:
            ws.append(list(row))

    for name, list_rows in (codelists or {}).items():
        ws = wb.create_sheet(name)
        ws.append(list(CODELIST_HEADER))
        for row in list_rows:
            ws.append(list(row))

    wb.save(str(path))
    return path


def truncate_sheet_xml(path: Path, member: str = "xl/worksheets/sheet2.xml") -> Path:
    """Rewrite ``path`` with ``member`` cut in half, leaving the zip itself valid."""
    with zipfile.ZipFile(path) as src:
        contents = {info.filename: src.read(info) for info in src.infolist()}
    data = contents[member]
    contents[member] = data[: len(data) // 2]
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as dst:
        for name, payload in contents.items():
            dst.writestr(name, payload)
    return path


@pytest.fixture
def write_codebook(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing ``tmp_path / name`` via build_codebook_xlsx."""

    def _write(name: str = "codebook.xlsx", **kwargs: Any) -> Path:
        return build_codebook_xlsx(tmp_path / name, **kwargs)

    return _write


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(name="concept_row")
def concept_row_fixture() -> Callable[..., list[Any]]:
    return concept_row


@pytest.fixture(name="truncate_sheet_xml")
def truncate_sheet_xml_fixture() -> Callable[..., Path]:
    return truncate_sheet_xml

"""Codebook domain models: concepts, code-list entries, language settings.

Concepts are stored flat, keyed by their external id. Parent/child links are
plain id references and are resolved lazily by the owning Codebook.
"""

from __future__ import annotations

from pydantic import Field

from codebook_ingest.models.common import CodebookBase, StatusCode


class LanguageSettings(CodebookBase):
    """Dataset-level name and description for one language."""

    dataset_name: str = ""
    dataset_description: str = ""


class CodeListEntry(CodebookBase):
    """One row of an auxiliary code-list sheet.

    ``values`` is keyed by the code-list sheet's own header, in header order.
    ``language_texts`` holds the ``description_<lang>`` cell per active language.
    """

    concept_id: str
    codelist_ref: str
    values: dict[str, str] = Field(default_factory=dict)
    language_texts: dict[str, str] = Field(default_factory=dict)

    @property
    def code(self) -> str:
        return self.values.get("code", "")

    @property
    def codesystem(self) -> str:
        return self.values.get("codesystem", "")

    @property
    def description_code(self) -> str:
        return self.values.get("description_code", "")


class Concept(CodebookBase):
    """A single coded item from the main ``Codebook`` sheet."""

    id: str
    codesystem: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    code_description: str = Field(..., min_length=1)
    properties: str = ""
    parent_id: str | None = None
    data_type: str = ""
    codelist_ref: str | None = None
    effective_date: str = ""  # canonical YYYY-MM-DDTHH:MM:SS
    version_label: str = ""
    status_code: StatusCode = StatusCode.DRAFT
    language_descriptions: dict[str, str] = Field(default_factory=dict)
    code_list_entries: list[CodeListEntry] = Field(default_factory=list)

    def add_language_description(self, language: str, text: str) -> None:
        self.language_descriptions[language] = text

    def add_code_list_entry(self, entry: CodeListEntry) -> None:
        self.code_list_entries.append(entry)

    @property
    def has_code_list(self) -> bool:
        return bool(self.codelist_ref)

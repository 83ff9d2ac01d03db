"""End-to-end tests for Codebook.read_from and version label coercion.

Fixtures are programmatically-generated .xlsx files (see conftest.py).
"""

from __future__ import annotations

from datetime import datetime

import pytest

from codebook_ingest.ingestion.codebook import Codebook, coerce_version_label
from codebook_ingest.ingestion.diagnostics import RecordingSink
from codebook_ingest.ingestion.errors import CodebookIngestionError
from codebook_ingest.models.common import StatusCode

LANGUAGES = ["nl", "en"]


# ===================================================================
# Version coercion
# ===================================================================


class TestCoerceVersionLabel:
    def test_integer_text(self, sink: RecordingSink) -> None:
        assert coerce_version_label("33", sink) == 33.0
        assert sink.diagnostics == []

    def test_decimal_text(self, sink: RecordingSink) -> None:
        assert coerce_version_label("1.5", sink) == 1.5

    def test_non_numeric_is_zero_with_error(self, sink: RecordingSink) -> None:
        assert coerce_version_label("33b", sink) == 0.0
        assert len(sink.errors) == 1
        assert "Only numbers are supported as version labels" in sink.errors[0].message

    def test_empty_is_zero(self, sink: RecordingSink) -> None:
        assert coerce_version_label("", sink) == 0.0
        assert len(sink.errors) == 1

    @pytest.mark.parametrize("label", ["nan", "inf", "-Infinity"])
    def test_non_finite_is_zero(self, sink: RecordingSink, label: str) -> None:
        assert coerce_version_label(label, sink) == 0.0


# ===================================================================
# read_from: happy path
# ===================================================================


class TestReadFrom:
    def test_reads_metadata_and_concepts(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(
            version="33",
            rows=[
                concept_row("C1", description_nl="Adenoom", description_en="Adenoma"),
                concept_row("C2", code="456", parent="C1"),
            ],
        )

        codebook = Codebook.read_from(path, LANGUAGES, StatusCode.FINAL, sink=sink)

        assert codebook.version == 33.0
        assert codebook.version_label == "33"
        assert codebook.effective_date == datetime(2021, 3, 15)
        assert codebook.effective_date_text == "2021-03-15T00:00:00"
        assert codebook.header_list[:3] == ("id", "codesystem", "code")
        assert [c.id for c in codebook.all_concepts()] == ["C1", "C2"]
        assert codebook.get_concept("C1").language_descriptions == {
            "nl": "Adenoom",
            "en": "Adenoma",
        }
        assert all(c.status_code == StatusCode.FINAL for c in codebook.all_concepts())
        assert codebook.source_path == path
        assert sink.diagnostics == []

    def test_numeric_version_cell(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(version=2, rows=[concept_row("C1")])
        codebook = Codebook.read_from(path, ["nl"], sink=sink)
        assert codebook.version_label == "2"
        assert codebook.version == 2.0

    def test_date_typed_effective_date_cell(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(effective_date=datetime(2020, 5, 1), rows=[concept_row("C1")])
        codebook = Codebook.read_from(path, ["nl"], sink=sink)
        assert codebook.effective_date == datetime(2020, 5, 1)
        assert sink.diagnostics == []

    def test_language_settings_per_language(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(rows=[concept_row("C1")])
        codebook = Codebook.read_from(path, ["nl", "en", "de"], sink=sink)

        assert set(codebook.language_settings) == {"nl", "en", "de"}
        assert codebook.language_settings["nl"].dataset_name == "Beschrijving protocol"
        assert codebook.language_settings["en"].dataset_name == "Protocol description"
        assert codebook.language_settings["de"].dataset_description == ""

    def test_concepts_copy_codebook_metadata(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(version="4", rows=[concept_row("C1")])
        concept = Codebook.read_from(path, ["nl"], sink=sink).get_concept("C1")
        assert concept.version_label == "4"
        assert concept.effective_date == "2021-03-15T00:00:00"

    def test_blank_rows_are_skipped_silently(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(
            rows=[concept_row("C1"), [None] * 10, ["", "", ""], concept_row("C2")]
        )
        codebook = Codebook.read_from(path, ["nl"], sink=sink)
        assert len(codebook) == 2
        assert sink.diagnostics == []

    def test_concepts_view_is_read_only(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(rows=[concept_row("C1")])
        codebook = Codebook.read_from(path, ["nl"], sink=sink)
        with pytest.raises(TypeError):
            codebook.concepts["C9"] = codebook.get_concept("C1")  # type: ignore[index]

    def test_string_status_code_is_accepted(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(rows=[concept_row("C1")])
        codebook = Codebook.read_from(path, ["nl"], "final", sink=sink)
        assert codebook.get_concept("C1").status_code == StatusCode.FINAL

    def test_each_read_gets_its_own_ingestion_id(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(rows=[concept_row("C1")])
        first = Codebook.read_from(path, ["nl"], sink=sink)
        second = Codebook.read_from(path, ["nl"], sink=sink)
        assert first.ingestion_id.version == 7
        assert first.ingestion_id != second.ingestion_id


# ===================================================================
# read_from: validation and diagnostics
# ===================================================================


class TestReadFromDiagnostics:
    def test_one_error_per_failing_check(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(
            rows=[
                concept_row("C1"),
                concept_row("C2", code="", codesystem=""),
                concept_row("C3", description_code=""),
            ]
        )
        codebook = Codebook.read_from(path, ["nl"], sink=sink)

        assert [c.id for c in codebook.all_concepts()] == ["C1"]
        assert len(sink.errors) == 3

    def test_duplicate_ids(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(
            rows=[
                concept_row("C1", code="1"),
                concept_row("C1", code="2"),
                concept_row("C1", code="3"),
            ]
        )
        codebook = Codebook.read_from(path, ["nl"], sink=sink)

        assert len(codebook) == 1
        assert codebook.get_concept("C1").code == "1"
        assert len(sink.errors) == 2
        assert all("duplicate identifier" in d.message for d in sink.errors)

    def test_missing_code_list_sheet_does_not_stop_ingestion(
        self, write_codebook, concept_row, sink
    ) -> None:
        path = write_codebook(
            rows=[
                concept_row("C1", codelist_ref="no_such_sheet"),
                concept_row("C2"),
            ]
        )
        codebook = Codebook.read_from(path, ["nl"], sink=sink)

        assert len(codebook) == 2
        assert codebook.get_concept("C1").code_list_entries == []
        assert codebook.get_concept("C2").code_list_entries == []
        assert len(sink.errors) == 1
        assert "no_such_sheet" in sink.errors[0].message

    def test_code_list_attached(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(
            rows=[concept_row("C1", codelist_ref="sizes")],
            codelists={
                "sizes": [
                    ["SNOMED CT", "10", "Small", "Klein", "Small"],
                    [None, None, None, None, None],
                    ["SNOMED CT", "20", "Large", "Groot", "Large"],
                ]
            },
        )
        codebook = Codebook.read_from(path, ["nl", "en"], sink=sink)
        entries = codebook.get_concept("C1").code_list_entries

        assert [e.code for e in entries] == ["10", "20"]
        assert entries[0].language_texts == {"nl": "Klein", "en": "Small"}
        assert codebook.code_list_entry_count == 2

    def test_rejected_concept_code_list_is_never_read(
        self, write_codebook, concept_row, sink
    ) -> None:
        path = write_codebook(
            rows=[
                concept_row("C1", code="", codelist_ref="missing_list"),
                concept_row("C2", description_code="", codelist_ref="sizes"),
            ],
            codelists={"sizes": [["", "", "", "", ""], ["bad", "", "", "", ""]]},
        )
        codebook = Codebook.read_from(path, ["nl"], sink=sink)

        assert len(codebook) == 0
        assert len(sink.errors) == 2
        assert not any("missing_list" in d.message for d in sink.diagnostics)

    def test_malformed_version_label(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(version="33b", rows=[concept_row("C1")])
        codebook = Codebook.read_from(path, ["nl"], sink=sink)
        assert codebook.version == 0.0
        assert codebook.version_label == "33b"
        assert len(sink.errors) == 1

    def test_missing_effective_date_warns(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(effective_date=None, rows=[concept_row("C1")])
        fixed = datetime(2024, 1, 2, 3, 4, 5)
        codebook = Codebook.read_from(path, ["nl"], sink=sink, now=lambda: fixed)
        assert codebook.effective_date == fixed
        assert codebook.get_concept("C1").effective_date == "2024-01-02T03:04:05"
        assert len(sink.warnings) == 1

    def test_typo_warning_keeps_concept(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(rows=[concept_row("C1", codesystem="snowmed")])
        codebook = Codebook.read_from(path, ["nl"], sink=sink)
        assert codebook.get_concept("C1").codesystem == "snowmed"
        assert len(sink.warnings) == 1
        assert sink.errors == []


# ===================================================================
# read_from: structural failures
# ===================================================================


class TestReadFromStructuralErrors:
    def test_missing_info_sheet(self, write_codebook, concept_row) -> None:
        path = write_codebook(with_info=False, rows=[concept_row("C1")])
        with pytest.raises(CodebookIngestionError, match="Info sheet missing"):
            Codebook.read_from(path, ["nl"])

    def test_missing_codebook_sheet(self, write_codebook) -> None:
        path = write_codebook(with_main=False)
        with pytest.raises(CodebookIngestionError, match="Codebook sheet missing") as exc_info:
            Codebook.read_from(path, ["nl"])
        assert exc_info.value.path == path

    def test_unreadable_file(self, tmp_path) -> None:
        path = tmp_path / "corrupt.xlsx"
        path.write_text("garbage")
        with pytest.raises(CodebookIngestionError):
            Codebook.read_from(path, ["nl"])


# ===================================================================
# Concept tree helpers
# ===================================================================


class TestConceptTree:
    def test_roots_and_children(self, write_codebook, concept_row, sink) -> None:
        path = write_codebook(
            rows=[
                concept_row("root"),
                concept_row("a", parent="root"),
                concept_row("b", parent="root"),
                concept_row("a1", parent="a"),
                concept_row("orphan", parent="does_not_exist"),
            ]
        )
        codebook = Codebook.read_from(path, ["nl"], sink=sink)

        assert [c.id for c in codebook.root_concepts()] == ["root"]
        assert [c.id for c in codebook.children_of("root")] == ["a", "b"]
        assert [c.id for c in codebook.children_of("a")] == ["a1"]
        assert codebook.get_concept("orphan").parent_id == "does_not_exist"
        assert codebook.get_concept("missing") is None

"""
Unit Tests for participant CSV import / export
"""
import csv
import io
import pytest

from blastdesk.core.exceptions import ValidationError
from blastdesk.models import Department, Participant
from blastdesk.services.participant_csv import (
    DEFAULT_ROLE,
    export_participants_csv,
    parse_participants_csv,
)


DEPARTMENTS = [
    Department(id="d1", name="Engineering"),
    Department(id="d2", name="Human Resources"),
]


class TestParseParticipantsCsv:

    def test_imports_valid_rows(self):
        content = (
            "name,email,role,departmentName,paEmail\n"
            "Ada Lovelace,ada@example.com,Engineer,Engineering,pa@example.com\n"
            "Grace Hopper,grace@example.com,,human resources,\n"
        ).encode()

        result = parse_participants_csv(content, DEPARTMENTS)

        assert result.imported == 2
        assert result.skipped == 0
        ada, grace = result.rows
        assert ada.department_id == "d1"
        assert ada.pa_email == "pa@example.com"
        assert ada.line == 2
        assert grace.department_id == "d2"
        assert grace.role == DEFAULT_ROLE
        assert grace.pa_email is None
        assert result.message == "Successfully imported 2 participants."

    def test_header_is_case_insensitive_and_any_order(self):
        content = b'"DepartmentName","EMAIL","Name"\nEngineering,ada@example.com,Ada\n'

        result = parse_participants_csv(content, DEPARTMENTS)

        assert result.imported == 1
        assert result.rows[0].name == "Ada"

    def test_skips_incomplete_rows_and_unknown_departments(self):
        content = (
            "name,email,departmentName\n"
            "Ada,ada@example.com,Engineering\n"
            ",missing@example.com,Engineering\n"
            "No Email,,Engineering\n"
            "Wrong Dept,wrong@example.com,Marketing\n"
        ).encode()

        result = parse_participants_csv(content, DEPARTMENTS)

        assert result.imported == 1
        assert result.skipped == 3
        assert "3 rows were skipped" in result.message

    def test_handles_quoted_commas_and_bom(self):
        content = '\ufeffname,email,departmentName\n"Lovelace, Ada",ada@example.com,Engineering\n'.encode("utf-8")

        result = parse_participants_csv(content, DEPARTMENTS)

        assert result.rows[0].name == "Lovelace, Ada"

    def test_blank_lines_are_ignored(self):
        content = b"name,email,departmentName\n\nAda,ada@example.com,Engineering\n\n"

        result = parse_participants_csv(content, DEPARTMENTS)

        assert result.imported == 1
        assert result.skipped == 0

    @pytest.mark.parametrize("content", [b"", b"name,email,departmentName\n", b"\n\n"])
    def test_requires_header_and_data(self, content):
        with pytest.raises(ValidationError) as exc_info:
            parse_participants_csv(content, DEPARTMENTS)

        assert exc_info.value.message == "CSV must contain a header and at least one data row."

    def test_rejects_missing_columns(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_participants_csv(b"name,email\nAda,ada@example.com\n", DEPARTMENTS)

        assert "departmentName" in exc_info.value.message


class TestExportParticipantsCsv:

    def test_writes_department_names(self):
        participants = [
            Participant(id="p1", name="Ada", email="ada@example.com", role="Engineer",
                        department_id="d1", pa_email=None),
            Participant(id="p2", name="Orphan", email=None, role=None,
                        department_id="gone", pa_email="pa@example.com"),
        ]

        rows = list(csv.reader(io.StringIO(export_participants_csv(participants, DEPARTMENTS))))

        assert rows[0] == ["name", "email", "role", "departmentName", "paEmail"]
        assert rows[1] == ["Ada", "ada@example.com", "Engineer", "Engineering", ""]
        assert rows[2] == ["Orphan", "", "", "", "pa@example.com"]

    def test_export_then_import_keeps_people(self):
        participants = [
            Participant(id="p1", name="Ada", email="ada@example.com", role="Engineer", department_id="d1"),
        ]

        exported = export_participants_csv(participants, DEPARTMENTS).encode()
        result = parse_participants_csv(exported, DEPARTMENTS)

        assert [(r.name, r.email, r.role, r.department_id) for r in result.rows] == [
            ("Ada", "ada@example.com", "Engineer", "d1")
        ]

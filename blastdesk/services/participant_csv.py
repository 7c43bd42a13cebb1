"""
Participant CSV import / export

Import format: a header row naming at least name, email and departmentName
(any order, case-insensitive, quotes ignored), optionally role and paEmail.
Departments are matched by name, case-insensitively.
"""

import csv
import io
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from blastdesk.core.exceptions import ValidationError
from blastdesk.models import Department, Participant


REQUIRED_COLUMNS = ("name", "email", "departmentname")
EXPORT_COLUMNS = ["name", "email", "role", "departmentName", "paEmail"]
DEFAULT_ROLE = "N/A"


@dataclass
class ParsedRow:
    line: int
    name: str
    email: str
    role: str
    department_id: str
    pa_email: Optional[str] = None


@dataclass
class ImportResult:
    rows: List[ParsedRow] = field(default_factory=list)
    skipped: int = 0

    @property
    def imported(self) -> int:
        return len(self.rows)

    @property
    def message(self) -> str:
        message = f"Successfully imported {self.imported} participants."
        if self.skipped > 0:
            message += f" {self.skipped} rows were skipped due to missing data or invalid department."
        return message


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _cell(row: List[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index].strip()


def parse_participants_csv(content: bytes, departments: Iterable[Department]) -> ImportResult:
    """
    Parse an uploaded CSV into participant rows.

    Raises ValidationError when the file has no data rows or the header lacks
    a required column. Individual bad rows are counted as skipped.
    """
    lines = [line for line in _decode(content).splitlines() if line.strip()]
    if len(lines) < 2:
        raise ValidationError("CSV must contain a header and at least one data row.", field="file")

    rows = list(csv.reader(lines))
    header = [h.strip().lower().replace('"', "") for h in rows[0]]
    index: Dict[str, int] = {}
    for position, column in enumerate(header):
        index.setdefault(column, position)

    if any(column not in index for column in REQUIRED_COLUMNS):
        raise ValidationError(
            "CSV header is invalid. It must contain columns named: name, email, departmentName.",
            field="file"
        )

    departments_by_name = {d.name.strip().lower(): d for d in departments if d.name}
    result = ImportResult()

    for line_number, row in enumerate(rows[1:], start=2):
        name = _cell(row, index["name"])
        email = _cell(row, index["email"])
        department_name = _cell(row, index["departmentname"])

        if not name or not email or not department_name:
            result.skipped += 1
            continue

        department = departments_by_name.get(department_name.lower())
        if not department:
            result.skipped += 1
            continue

        result.rows.append(ParsedRow(
            line=line_number,
            name=name,
            email=email,
            role=_cell(row, index.get("role")) or DEFAULT_ROLE,
            department_id=department.id,
            pa_email=_cell(row, index.get("paemail")) or None,
        ))

    return result


def export_participants_csv(participants: Iterable[Participant], departments: Iterable[Department]) -> str:
    """CSV text with one row per participant"""
    department_names = {d.id: d.name for d in departments}

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)
    for participant in participants:
        writer.writerow([
            participant.name,
            participant.email or "",
            participant.role or "",
            department_names.get(participant.department_id, ""),
            participant.pa_email or "",
        ])
    return output.getvalue()

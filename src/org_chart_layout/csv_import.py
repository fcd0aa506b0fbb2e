"""
CSV import of employee lists.

Employees are imported by name: the CSV names each employee's level and
manager, and resolve_import() turns those names into level and employee ids.

Expected header (case-insensitive, aliases in parentheses):
    name (employee_name), position (title), level (level_name),
    manager (manager_name), picture_url (picture, photo), email, department
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .types import Employee, LevelLike, as_level

logger = logging.getLogger(__name__)

EMPLOYEE_CSV_TEMPLATE = (
    "name,position,level,manager,picture_url,email,department\n"
    "John Doe,CEO,Executive,,https://example.com/photo.jpg,john@company.com,Executive\n"
    "Jane Smith,VP Engineering,Manager,John Doe,https://example.com/jane.jpg,"
    "jane@company.com,Engineering\n"
)

_HEADER_ALIASES = {
    "name": "name",
    "employee_name": "name",
    "position": "position",
    "title": "position",
    "level": "level_name",
    "level_name": "level_name",
    "manager": "manager_name",
    "manager_name": "manager_name",
    "picture": "picture_url",
    "picture_url": "picture_url",
    "photo": "picture_url",
    "email": "email",
    "department": "department",
}


class CsvImportError(ValueError):
    """Raised when a CSV file cannot be used as an employee list."""

    pass


@dataclass
class EmployeeRow:
    """An employee as named in the CSV, before ids are resolved."""

    name: str
    position: str
    level_name: str
    manager_name: Optional[str] = None
    picture_url: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None


def parse_employee_csv(text: str) -> list[EmployeeRow]:
    """
    Parse CSV text into employee rows.

    Unknown columns are ignored. Rows without a name, position or level are
    skipped.

    Args:
        text: CSV document with a header row

    Returns:
        Parsed rows in file order

    Raises:
        CsvImportError: If there is no header or no data row
    """
    table = [
        values for values in csv.reader(io.StringIO(text)) if any(v.strip() for v in values)
    ]
    if len(table) < 2:
        raise CsvImportError("CSV file must contain headers and at least one employee")

    headers = [_HEADER_ALIASES.get(h.strip().lower()) for h in table[0]]

    rows: list[EmployeeRow] = []
    skipped = 0
    for values in table[1:]:
        record: dict[str, str] = {}
        for header, value in zip(headers, values):
            if header is not None:
                record[header] = value.strip()

        if not (record.get("name") and record.get("position") and record.get("level_name")):
            skipped += 1
            continue

        rows.append(
            EmployeeRow(
                name=record["name"],
                position=record["position"],
                level_name=record["level_name"],
                manager_name=record.get("manager_name") or None,
                picture_url=record.get("picture_url") or None,
                email=record.get("email") or None,
                department=record.get("department") or None,
            )
        )

    if skipped:
        logger.debug("Skipped %d CSV row(s) without name, position or level", skipped)
    return rows


def resolve_import(
    rows: Sequence[EmployeeRow],
    levels: Sequence[LevelLike],
    id_factory: Optional[Callable[[int], str]] = None,
) -> list[Employee]:
    """
    Turn named CSV rows into employee records.

    Level names are matched case-insensitively; an unknown level falls back to
    the first level. Manager names are matched case-insensitively against the
    imported employees; an unknown manager leaves the employee as a root.
    When two employees share a name, the later one wins.

    Args:
        rows: Rows from parse_employee_csv()
        levels: Level definitions
        id_factory: Callable(row_index) -> id. Defaults to "emp-<n>" with n
            starting at 1.

    Returns:
        Employee records in row order
    """
    if id_factory is None:
        id_factory = _default_id

    level_list = [as_level(level) for level in levels]
    level_by_name = {level.name.strip().lower(): level.id for level in level_list}
    fallback_level = level_list[0].id if level_list else None

    ids = [id_factory(i) for i in range(len(rows))]
    id_by_name = {row.name.strip().lower(): ids[i] for i, row in enumerate(rows)}

    employees: list[Employee] = []
    for i, row in enumerate(rows):
        level_id = level_by_name.get(row.level_name.strip().lower(), fallback_level)
        manager_id = None
        if row.manager_name:
            manager_id = id_by_name.get(row.manager_name.strip().lower())
            if manager_id is None:
                logger.debug("Manager %r of %r not found", row.manager_name, row.name)
        employees.append(
            Employee(
                id=ids[i],
                name=row.name,
                position=row.position,
                level_id=level_id,
                manager_id=manager_id,
                picture_url=row.picture_url,
                email=row.email,
                department=row.department,
            )
        )
    return employees


def _default_id(index: int) -> str:
    return f"emp-{index + 1}"


__all__ = [
    "EMPLOYEE_CSV_TEMPLATE",
    "CsvImportError",
    "EmployeeRow",
    "parse_employee_csv",
    "resolve_import",
]

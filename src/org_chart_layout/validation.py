"""
Input validation utilities for org chart data.

Provides opt-in validation for employees, levels, canvas size and margins.
The hierarchy builder and the scaler never raise on malformed references;
these functions let callers fail fast (strict=True) or collect issues for
display (strict=False).
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Sequence

from .types import EmployeeLike, LevelLike, as_employee, as_level


class ValidationError(ValueError):
    """Base exception for org chart validation errors."""

    pass


class InvalidCanvasSizeError(ValidationError):
    """Raised when canvas dimensions are invalid."""

    pass


class InvalidMarginError(ValidationError):
    """Raised when a canvas margin is invalid."""

    pass


class InvalidEmployeeError(ValidationError):
    """Raised when employee records are malformed or inconsistent."""

    pass


class InvalidLevelError(ValidationError):
    """Raised when level definitions are malformed or inconsistent."""

    pass


def validate_canvas_size(size: Sequence[float]) -> tuple[float, float]:
    """
    Validate canvas size dimensions.

    Args:
        size: [width, height] sequence

    Returns:
        Validated (width, height) tuple

    Raises:
        InvalidCanvasSizeError: If dimensions are invalid
    """
    try:
        count = len(size)
    except TypeError as exc:
        raise InvalidCanvasSizeError(
            f"Canvas size must be a [width, height] sequence, got {size!r}"
        ) from exc
    if count < 2:
        raise InvalidCanvasSizeError(
            f"Canvas size must have 2 elements [width, height], got {count}"
        )

    try:
        width, height = float(size[0]), float(size[1])
    except (TypeError, ValueError, LookupError) as exc:
        raise InvalidCanvasSizeError(f"Canvas size must be numeric, got {size!r}") from exc

    if not width > 0 or math.isinf(width):
        raise InvalidCanvasSizeError(f"Canvas width must be positive, got {width}")
    if not height > 0 or math.isinf(height):
        raise InvalidCanvasSizeError(f"Canvas height must be positive, got {height}")

    return width, height


def validate_margin(margin: float) -> float:
    """
    Validate a canvas margin.

    Args:
        margin: Margin in pixels applied on every side

    Returns:
        Validated margin as float

    Raises:
        InvalidMarginError: If margin is negative or not finite
    """
    try:
        value = float(margin)
    except (TypeError, ValueError) as exc:
        raise InvalidMarginError(f"margin must be numeric, got {margin!r}") from exc
    if not math.isfinite(value) or value < 0:
        raise InvalidMarginError(f"margin must be a non-negative number, got {margin}")
    return value


def validate_employees(
    employees: Sequence[EmployeeLike],
    strict: bool = True,
) -> list[tuple[int, str]]:
    """
    Validate employee records.

    Reports duplicate ids, missing names, self-references and manager ids
    that do not resolve to another employee.

    Args:
        employees: Sequence of employee-like records
        strict: If True, raises on invalid. If False, returns list of issues.

    Returns:
        List of (employee_index, issue_description) tuples

    Raises:
        InvalidEmployeeError: If strict=True and invalid records found
    """
    issues: list[tuple[int, str]] = []
    records = []

    for i, data in enumerate(employees):
        try:
            records.append((i, as_employee(data)))
        except ValueError as exc:
            issues.append((i, f"Employee {i}: {exc}"))

    id_counts = Counter(emp.id for _, emp in records)
    known_ids = set(id_counts)

    for i, emp in records:
        if id_counts[emp.id] > 1:
            issues.append((i, f"Employee {i}: duplicate id {emp.id!r}"))
        if not emp.name:
            issues.append((i, f"Employee {i}: name is empty"))
        if emp.manager_id is None:
            continue
        if emp.manager_id == emp.id:
            issues.append((i, f"Employee {i}: manager_id {emp.manager_id!r} references itself"))
        elif emp.manager_id not in known_ids:
            issues.append((i, f"Employee {i}: manager_id {emp.manager_id!r} not found"))

    if strict and issues:
        msg = "Invalid employees:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidEmployeeError(msg)

    return issues


def validate_levels(
    levels: Sequence[LevelLike],
    strict: bool = True,
) -> list[tuple[int, str]]:
    """
    Validate level definitions.

    Args:
        levels: Sequence of level-like records
        strict: If True, raises on invalid

    Returns:
        List of (level_index, issue_description) tuples

    Raises:
        InvalidLevelError: If strict=True and invalid levels found
    """
    issues: list[tuple[int, str]] = []
    seen: set[str] = set()

    for i, data in enumerate(levels):
        try:
            level = as_level(data)
        except (TypeError, ValueError) as exc:
            issues.append((i, f"Level {i}: {exc}"))
            continue
        if level.id in seen:
            issues.append((i, f"Level {i}: duplicate id {level.id!r}"))
        seen.add(level.id)
        if not level.name.strip():
            issues.append((i, f"Level {i}: name is empty"))

    if strict and issues:
        msg = "Invalid levels:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidLevelError(msg)

    return issues


def validate_level_references(
    employees: Sequence[EmployeeLike],
    levels: Sequence[LevelLike],
    strict: bool = True,
) -> list[tuple[int, str]]:
    """
    Validate that every employee references a defined level.

    Args:
        employees: Sequence of employee-like records
        levels: Sequence of level-like records
        strict: If True, raises on invalid

    Returns:
        List of (employee_index, issue_description) tuples

    Raises:
        InvalidEmployeeError: If strict=True and unknown levels are referenced
    """
    level_ids = {as_level(level).id for level in levels}
    issues: list[tuple[int, str]] = []

    for i, data in enumerate(employees):
        emp = as_employee(data)
        if emp.level_id is None:
            issues.append((i, f"Employee {i}: level_id is not set"))
        elif emp.level_id not in level_ids:
            issues.append((i, f"Employee {i}: level_id {emp.level_id!r} not found"))

    if strict and issues:
        msg = "Invalid level references:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidEmployeeError(msg)

    return issues


__all__ = [
    "ValidationError",
    "InvalidCanvasSizeError",
    "InvalidMarginError",
    "InvalidEmployeeError",
    "InvalidLevelError",
    "validate_canvas_size",
    "validate_margin",
    "validate_employees",
    "validate_levels",
    "validate_level_references",
]

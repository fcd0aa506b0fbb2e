"""
Common types for org chart construction and layout.

This module provides the fundamental types used across the package:
- Level: Named rank used for color-coding and sibling ordering
- Employee: Flat employee record linked to its manager by id
- TreeNode: Employee wrapped with its ordered direct reports
- OrgSettings: Company-wide chart configuration
- CanvasSize: Named export canvas presets
- EventType / Event: Layout lifecycle events
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Optional, Sequence, TypedDict, Union

DEFAULT_LEVEL_COLOR = "#3b82f6"
DEFAULT_COMPANY_NAME = "Organization Chart"


class EventType(IntEnum):
    """
    Layout lifecycle events.

    - start: Layout computation has begun
    - end: Layout has been computed
    """

    start = 0
    end = 1


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    node_count: int
    listener: Optional[Callable[[], None]]


class CanvasSize(Enum):
    """
    Export canvas presets.

    AUTO means unconstrained: content is rendered at its natural size.
    The other presets match common slide and page sizes at 96 dpi.
    """

    AUTO = "auto"
    PPT_STANDARD = "ppt-standard"
    PPT_WIDESCREEN = "ppt-widescreen"
    WORD_PORTRAIT = "word-portrait"
    WORD_LANDSCAPE = "word-landscape"

    @property
    def dimensions(self) -> Optional[tuple[float, float]]:
        """(width, height) in pixels, or None when unconstrained."""
        return _CANVAS_DIMENSIONS[self]

    @property
    def label(self) -> str:
        """Human readable preset name."""
        return _CANVAS_LABELS[self]


_CANVAS_DIMENSIONS: dict[CanvasSize, Optional[tuple[float, float]]] = {
    CanvasSize.AUTO: None,
    CanvasSize.PPT_STANDARD: (960.0, 720.0),
    CanvasSize.PPT_WIDESCREEN: (1280.0, 720.0),
    CanvasSize.WORD_PORTRAIT: (816.0, 1056.0),
    CanvasSize.WORD_LANDSCAPE: (1056.0, 816.0),
}

_CANVAS_LABELS: dict[CanvasSize, str] = {
    CanvasSize.AUTO: "Auto (Full Size)",
    CanvasSize.PPT_STANDARD: "PowerPoint 4:3",
    CanvasSize.PPT_WIDESCREEN: "PowerPoint 16:9",
    CanvasSize.WORD_PORTRAIT: "Word Portrait",
    CanvasSize.WORD_LANDSCAPE: "Word Landscape",
}


def _optional_str(value: Any) -> Optional[str]:
    """Normalize an optional reference: None and blank strings become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class Level:
    """
    A named rank in the company hierarchy.

    Attributes:
        id: Unique level identifier
        name: Display name (e.g. "Executive")
        order: Sort precedence among siblings, ascending
        color: Color token used for the card accent
    """

    id: str
    name: str = ""
    order: int = 0
    color: str = DEFAULT_LEVEL_COLOR

    def __post_init__(self) -> None:
        self.id = str(self.id)
        self.name = "" if self.name is None else str(self.name)
        self.order = int(self.order)


@dataclass
class Employee:
    """
    A flat employee record.

    Ids are normalized to strings so that ``1`` and ``"1"`` refer to the same
    employee. A blank ``manager_id`` is treated as no manager.

    Attributes:
        id: Unique employee identifier
        name: Full name
        position: Job title
        level_id: Reference to a Level id
        manager_id: Reference to another Employee id, or None for a root
        picture_url: Optional avatar URL
        email: Optional email address
        department: Optional department name
    """

    id: str
    name: str = ""
    position: str = ""
    level_id: Optional[str] = None
    manager_id: Optional[str] = None
    picture_url: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None

    def __post_init__(self) -> None:
        self.id = str(self.id)
        self.name = "" if self.name is None else str(self.name).strip()
        self.position = "" if self.position is None else str(self.position).strip()
        self.level_id = _optional_str(self.level_id)
        self.manager_id = _optional_str(self.manager_id)
        self.picture_url = _optional_str(self.picture_url)
        self.email = _optional_str(self.email)
        self.department = _optional_str(self.department)

    @property
    def initials(self) -> str:
        """Up to two uppercase initials taken from the name."""
        return "".join(part[0] for part in self.name.split() if part).upper()[:2]


@dataclass(eq=False)
class TreeNode:
    """
    Employee with its ordered direct reports.

    Equality is identity: a node that is part of a manager cycle can
    contain itself through its children.
    """

    employee: Employee
    children: list[TreeNode] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.employee.id

    def __repr__(self) -> str:
        return f"TreeNode(id={self.employee.id!r}, children={len(self.children)})"


@dataclass
class OrgSettings:
    """
    Company-wide chart configuration.

    Attributes:
        company_name: Title shown in the chart header
        company_logo_url: Optional logo shown next to the title
        canvas_size: Export canvas preset name (see CanvasSize)
        show_logo: Whether the header band is rendered
    """

    company_name: str = ""
    company_logo_url: Optional[str] = None
    canvas_size: str = CanvasSize.AUTO.value
    show_logo: bool = True

    @property
    def title(self) -> str:
        return self.company_name or DEFAULT_COMPANY_NAME


# Storage column names and camelCase spellings accepted on input
_EMPLOYEE_ALIASES = {
    "employee_name": "name",
    "levelId": "level_id",
    "managerId": "manager_id",
    "pictureUrl": "picture_url",
}

_LEVEL_ALIASES = {
    "level_name": "name",
    "level_order": "order",
}

_SETTINGS_ALIASES = {
    "companyName": "company_name",
    "companyLogoUrl": "company_logo_url",
    "canvasSize": "canvas_size",
    "showLogo": "show_logo",
}


def _record_fields(
    data: Any, fields: Sequence[str], aliases: dict[str, str]
) -> dict[str, Any]:
    """Collect known fields from a dict or attribute object."""
    values: dict[str, Any] = {}
    if isinstance(data, dict):
        for key, value in data.items():
            key = aliases.get(key, key)
            if key in fields:
                values[key] = value
    else:
        for attr in fields:
            if hasattr(data, attr):
                values[attr] = getattr(data, attr)
        for alias, attr in aliases.items():
            if attr not in values and hasattr(data, alias):
                values[attr] = getattr(data, alias)
    return values


_EMPLOYEE_FIELDS = (
    "id",
    "name",
    "position",
    "level_id",
    "manager_id",
    "picture_url",
    "email",
    "department",
)
_LEVEL_FIELDS = ("id", "name", "order", "color")
_SETTINGS_FIELDS = ("company_name", "company_logo_url", "canvas_size", "show_logo")


def as_employee(data: EmployeeLike) -> Employee:
    """
    Coerce an employee-like value to an Employee.

    Accepts Employee objects, dicts (Python field names, storage column names
    or camelCase keys) and arbitrary objects with matching attributes.

    Raises:
        ValueError: If no id can be found
    """
    if isinstance(data, Employee):
        return data
    values = _record_fields(data, _EMPLOYEE_FIELDS, _EMPLOYEE_ALIASES)
    if values.get("id") is None:
        raise ValueError(f"Employee record has no id: {data!r}")
    return Employee(**values)


def as_level(data: LevelLike) -> Level:
    """
    Coerce a level-like value to a Level.

    Raises:
        ValueError: If no id can be found
    """
    if isinstance(data, Level):
        return data
    values = _record_fields(data, _LEVEL_FIELDS, _LEVEL_ALIASES)
    if values.get("id") is None:
        raise ValueError(f"Level record has no id: {data!r}")
    if values.get("color") is None:
        values.pop("color", None)
    if values.get("order") is None:
        values.pop("order", None)
    return Level(**values)


def as_settings(data: Optional[SettingsLike]) -> OrgSettings:
    """Coerce a settings-like value (or None) to OrgSettings."""
    if data is None:
        return OrgSettings()
    if isinstance(data, OrgSettings):
        return data
    values = _record_fields(data, _SETTINGS_FIELDS, _SETTINGS_ALIASES)
    values = {key: value for key, value in values.items() if value is not None}
    if "show_logo" in values:
        values["show_logo"] = values["show_logo"] is not False
    return OrgSettings(**values)


# Type aliases for Pythonic API
EmployeeLike = Union[Employee, dict[str, Any], Any]
"""Input type for employees: Employee objects, dicts, or objects with attributes."""

LevelLike = Union[Level, dict[str, Any], Any]
"""Input type for levels: Level objects, dicts, or objects with attributes."""

SettingsLike = Union[OrgSettings, dict[str, Any], Any]
"""Input type for settings: OrgSettings objects or dicts."""

SizeType = Union[tuple[float, float], list[float], Sequence[float]]
"""Canvas size: (width, height) tuple, list, or sequence."""

CanvasLike = Union[CanvasSize, str, SizeType, dict[str, float], Any, None]
"""Canvas selection: preset, preset name, custom (width, height) or {width, height},
or None for auto."""


__all__ = [
    "DEFAULT_LEVEL_COLOR",
    "DEFAULT_COMPANY_NAME",
    "EventType",
    "Event",
    "CanvasSize",
    "Level",
    "Employee",
    "TreeNode",
    "OrgSettings",
    "as_employee",
    "as_level",
    "as_settings",
    # Pythonic API type aliases
    "EmployeeLike",
    "LevelLike",
    "SettingsLike",
    "SizeType",
    "CanvasLike",
]

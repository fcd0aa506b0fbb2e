"""
Storage for org chart state.

Settings, levels and employees are loaded and saved through an explicit
Repository instead of ambient global storage. The hierarchy builder and the
scaler never touch a repository; callers load state and pass plain records in.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Union

from .types import Employee, Level, OrgSettings, as_employee, as_level, as_settings

logger = logging.getLogger(__name__)


class RepositoryError(RuntimeError):
    """Raised when stored state cannot be read or written."""

    pass


@dataclass
class OrgState:
    """Everything needed to draw one company's chart."""

    settings: OrgSettings = field(default_factory=OrgSettings)
    levels: list[Level] = field(default_factory=list)
    employees: list[Employee] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "settings": asdict(self.settings),
            "levels": [asdict(level) for level in self.levels],
            "employees": [asdict(emp) for emp in self.employees],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrgState:
        """
        Build state from a plain dict.

        Raises:
            RepositoryError: If a record is malformed
        """
        try:
            return cls(
                settings=as_settings(data.get("settings")),
                levels=[as_level(level) for level in data.get("levels") or []],
                employees=[as_employee(emp) for emp in data.get("employees") or []],
            )
        except (TypeError, ValueError) as exc:
            raise RepositoryError(f"Malformed org chart state: {exc}") from exc


class Repository(ABC):
    """Abstract load/save interface for org chart state."""

    @abstractmethod
    def load(self) -> OrgState:
        """Load the stored state, or an empty state if nothing is stored."""
        pass

    @abstractmethod
    def save(self, state: OrgState) -> None:
        """Replace the stored state."""
        pass


class InMemoryRepository(Repository):
    """Repository that keeps state in memory. Useful for tests and previews."""

    def __init__(self, state: OrgState | None = None) -> None:
        self._data = state.to_dict() if state is not None else OrgState().to_dict()

    def load(self) -> OrgState:
        # Round-trip through dicts so callers never share mutable records
        return OrgState.from_dict(self._data)

    def save(self, state: OrgState) -> None:
        self._data = state.to_dict()


class JsonFileRepository(Repository):
    """
    Repository backed by a single JSON document.

    The document holds ``settings``, ``levels`` and ``employees`` keys.
    A missing file loads as an empty state.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> OrgState:
        if not self._path.exists():
            logger.debug("No state file at %s, starting empty", self._path)
            return OrgState()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise RepositoryError(f"Cannot read {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise RepositoryError(f"{self._path} does not contain a JSON object")
        state = OrgState.from_dict(data)
        logger.debug(
            "Loaded %d level(s) and %d employee(s) from %s",
            len(state.levels),
            len(state.employees),
            self._path,
        )
        return state

    def save(self, state: OrgState) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(state.to_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            raise RepositoryError(f"Cannot write {self._path}: {exc}") from exc


__all__ = [
    "RepositoryError",
    "OrgState",
    "Repository",
    "InMemoryRepository",
    "JsonFileRepository",
]

"""Tests for org chart state storage."""

import json

import pytest

from org_chart_layout import (
    Employee,
    InMemoryRepository,
    JsonFileRepository,
    Level,
    OrgSettings,
    OrgState,
    RepositoryError,
    build_forest,
    level_order_map,
)


def create_state():
    """A small company with two levels and two employees."""
    return OrgState(
        settings=OrgSettings(company_name="Acme", canvas_size="ppt-widescreen"),
        levels=[
            Level(id="exec", name="Executive", order=0, color="#ef4444"),
            Level(id="mgr", name="Manager", order=1),
        ],
        employees=[
            Employee(id="1", name="Ada", position="CEO", level_id="exec"),
            Employee(id="2", name="Bob", position="CTO", level_id="mgr", manager_id="1"),
        ],
    )


class TestOrgState:
    """Tests for OrgState conversion."""

    def test_to_dict(self):
        """State converts to plain JSON-compatible data."""
        data = create_state().to_dict()

        assert data["settings"]["company_name"] == "Acme"
        assert data["levels"][0] == {
            "id": "exec",
            "name": "Executive",
            "order": 0,
            "color": "#ef4444",
        }
        assert data["employees"][1]["manager_id"] == "1"
        json.dumps(data)

    def test_from_dict_storage_columns(self):
        """Storage column names and camelCase keys are accepted."""
        state = OrgState.from_dict(
            {
                "settings": {"companyName": "Acme", "showLogo": False},
                "levels": [{"id": 1, "level_name": "Executive", "level_order": 2}],
                "employees": [{"id": 7, "employee_name": "Ada", "levelId": 1}],
            }
        )

        assert state.settings.company_name == "Acme"
        assert state.settings.show_logo is False
        assert state.levels[0] == Level(id="1", name="Executive", order=2)
        assert state.employees[0].name == "Ada"
        assert state.employees[0].level_id == "1"

    def test_from_dict_empty(self):
        """Missing sections load as empty."""
        state = OrgState.from_dict({})

        assert state.settings == OrgSettings()
        assert state.levels == []
        assert state.employees == []

    def test_from_dict_malformed(self):
        """Malformed records raise RepositoryError."""
        with pytest.raises(RepositoryError, match="Malformed"):
            OrgState.from_dict({"employees": [{"name": "No id"}]})


class TestInMemoryRepository:
    """Tests for InMemoryRepository."""

    def test_empty(self):
        """A new repository loads an empty state."""
        assert InMemoryRepository().load() == OrgState()

    def test_save_and_load(self):
        """Saved state is loaded back."""
        repo = InMemoryRepository()
        repo.save(create_state())

        assert repo.load() == create_state()

    def test_loaded_state_is_independent(self):
        """Mutating a loaded state does not change the stored one."""
        repo = InMemoryRepository(create_state())
        state = repo.load()
        state.employees[0].name = "Changed"

        assert repo.load().employees[0].name == "Ada"

    def test_loaded_state_builds_chart(self):
        """Loaded records feed straight into the hierarchy builder."""
        state = InMemoryRepository(create_state()).load()
        roots = build_forest(state.employees, level_order_map(state.levels))

        assert [root.id for root in roots] == ["1"]
        assert [child.id for child in roots[0].children] == ["2"]


class TestJsonFileRepository:
    """Tests for JsonFileRepository."""

    def test_missing_file(self, tmp_path):
        """A missing file loads as an empty state."""
        repo = JsonFileRepository(tmp_path / "missing.json")

        assert repo.load() == OrgState()

    def test_save_and_load(self, tmp_path):
        """State survives a save/load cycle."""
        repo = JsonFileRepository(tmp_path / "nested" / "org.json")
        repo.save(create_state())

        assert repo.path.exists()
        assert JsonFileRepository(repo.path).load() == create_state()

    def test_file_format(self, tmp_path):
        """The file holds settings, levels and employees keys."""
        path = tmp_path / "org.json"
        JsonFileRepository(path).save(create_state())
        data = json.loads(path.read_text(encoding="utf-8"))

        assert set(data) == {"settings", "levels", "employees"}

    def test_invalid_json(self, tmp_path):
        """Unreadable JSON raises RepositoryError."""
        path = tmp_path / "org.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(RepositoryError, match="Cannot read"):
            JsonFileRepository(path).load()

    def test_not_an_object(self, tmp_path):
        """A JSON document that is not an object raises RepositoryError."""
        path = tmp_path / "org.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        with pytest.raises(RepositoryError, match="JSON object"):
            JsonFileRepository(str(path)).load()

    def test_malformed_record(self, tmp_path):
        """A record without an id raises RepositoryError."""
        path = tmp_path / "org.json"
        path.write_text(json.dumps({"levels": [{"name": "Executive"}]}), encoding="utf-8")

        with pytest.raises(RepositoryError):
            JsonFileRepository(path).load()

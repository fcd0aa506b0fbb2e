"""
Tests for the box-per-node org chart layout.
"""

import warnings

import pytest

from org_chart_layout import (
    Employee,
    EventType,
    HiddenEmployeeWarning,
    OrgChartLayout,
    build_forest,
)

# =============================================================================
# Test Fixtures
# =============================================================================


def create_small_team():
    """A manager with two reports."""
    return build_forest(
        [
            {"id": "m", "name": "Manager", "position": "Lead"},
            {"id": "a", "name": "Alice", "position": "Dev", "manager_id": "m"},
            {"id": "b", "name": "Bob", "position": "Dev", "manager_id": "m"},
        ]
    )


def create_uneven_tree():
    """An uneven tree that needs subtree separation."""
    #        r
    #      / | \
    #     a  b  c
    #    /|\     \
    #   d e f     g
    employees = [
        {"id": "r", "name": "R"},
        {"id": "a", "name": "A", "manager_id": "r"},
        {"id": "b", "name": "B", "manager_id": "r"},
        {"id": "c", "name": "C", "manager_id": "r"},
        {"id": "d", "name": "D", "manager_id": "a"},
        {"id": "e", "name": "E", "manager_id": "a"},
        {"id": "f", "name": "F", "manager_id": "a"},
        {"id": "g", "name": "G", "manager_id": "c"},
    ]
    return build_forest(employees)


def boxes_by_id(layout):
    return {box.employee.id: box for box in layout.boxes}


# =============================================================================
# Positions
# =============================================================================


class TestOrgChartLayout:
    """Tests for OrgChartLayout."""

    def test_basic_positions(self):
        """Reports sit side by side, the manager is centered above them."""
        layout = OrgChartLayout(roots=create_small_team()).run()
        boxes = boxes_by_id(layout)

        assert boxes["a"].x == pytest.approx(48)
        assert boxes["b"].x == pytest.approx(48 + 300 + 48)
        assert boxes["m"].center_x == pytest.approx(
            (boxes["a"].center_x + boxes["b"].center_x) / 2
        )
        assert boxes["m"].y == pytest.approx(48)
        assert boxes["a"].y == pytest.approx(48 + 112 + 48)

    def test_measure(self):
        """Measurement covers all cards plus padding."""
        layout = OrgChartLayout(roots=create_small_team())
        measurement = layout.measure()

        assert measurement.width == pytest.approx(48 + 300 + 48 + 300 + 48)
        assert measurement.height == pytest.approx(48 + 112 + 48 + 112 + 48)
        assert measurement.revision

    def test_measure_runs_layout(self):
        """measure() runs the layout when needed."""
        layout = OrgChartLayout(roots=create_small_team())
        assert layout.boxes == []
        layout.measure()
        assert len(layout.boxes) == 3

    def test_boxes_in_preorder(self):
        """Boxes follow the pre-order of the forest."""
        layout = OrgChartLayout(roots=create_uneven_tree()).run()
        order = [box.employee.id for box in layout.boxes]
        assert order == ["r", "a", "d", "e", "f", "b", "c", "g"]
        assert [box.index for box in layout.boxes] == list(range(8))

    def test_parent_indices(self):
        """Each box records its manager's box."""
        layout = OrgChartLayout(roots=create_uneven_tree()).run()
        boxes = boxes_by_id(layout)

        assert boxes["r"].parent is None
        assert layout.boxes[boxes["d"].parent].employee.id == "a"
        assert layout.boxes[boxes["g"].parent].employee.id == "c"

    def test_no_overlap_on_any_row(self):
        """Cards on the same row keep at least sibling_gap between them."""
        layout = OrgChartLayout(roots=create_uneven_tree(), sibling_gap=20).run()

        rows = {}
        for box in layout.boxes:
            rows.setdefault(box.depth, []).append(box)
        for row in rows.values():
            row.sort(key=lambda b: b.x)
            for left, right in zip(row, row[1:]):
                assert right.x - left.right >= 20 - 1e-6

    def test_sibling_order_left_to_right(self):
        """Siblings are placed left to right in display order."""
        layout = OrgChartLayout(roots=create_uneven_tree()).run()
        boxes = boxes_by_id(layout)
        assert boxes["a"].x < boxes["b"].x < boxes["c"].x
        assert boxes["d"].x < boxes["e"].x < boxes["f"].x

    def test_parents_centered(self):
        """Every manager is centered over its first and last report."""
        layout = OrgChartLayout(roots=create_uneven_tree()).run()
        children = {}
        for box in layout.boxes:
            if box.parent is not None:
                children.setdefault(box.parent, []).append(box)
        for parent_index, reports in children.items():
            parent = layout.boxes[parent_index]
            expected = (reports[0].center_x + reports[-1].center_x) / 2
            assert parent.center_x == pytest.approx(expected)

    def test_leftmost_card_at_padding(self):
        """The chart starts at the padding."""
        layout = OrgChartLayout(roots=create_uneven_tree(), padding=10).run()
        assert min(box.x for box in layout.boxes) == pytest.approx(10)
        assert min(box.y for box in layout.boxes) == pytest.approx(10)

    def test_multiple_roots_side_by_side(self):
        """Separate trees are laid out next to each other."""
        roots = build_forest(
            [
                {"id": "a", "name": "A"},
                {"id": "b", "name": "B"},
                {"id": "c", "name": "C", "manager_id": "b"},
            ]
        )
        layout = OrgChartLayout(roots=roots, card_width=100, sibling_gap=10).run()
        boxes = boxes_by_id(layout)

        assert boxes["a"].y == boxes["b"].y
        assert boxes["b"].x - boxes["a"].right == pytest.approx(10)
        assert boxes["c"].center_x == pytest.approx(boxes["b"].center_x)

    def test_single_employee(self):
        """A lone employee is placed at the padding."""
        layout = OrgChartLayout(roots=build_forest([{"id": 1, "name": "Solo"}])).run()
        assert len(layout.boxes) == 1
        assert (layout.boxes[0].x, layout.boxes[0].y) == (48, 48)
        assert layout.connectors == []

    def test_empty_forest(self):
        """Empty forest has no boxes and measures 0 x 0."""
        layout = OrgChartLayout(roots=[]).run()
        measurement = layout.measure()

        assert layout.boxes == []
        assert (measurement.width, measurement.height) == (0.0, 0.0)

    def test_hidden_cycle_not_laid_out(self):
        """Employees in a manager cycle are not positioned."""
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", HiddenEmployeeWarning)
            roots = build_forest(
                [
                    {"id": "r", "name": "R"},
                    {"id": "x", "name": "X", "manager_id": "y"},
                    {"id": "y", "name": "Y", "manager_id": "x"},
                ]
            )
        layout = OrgChartLayout(roots=roots).run()
        assert [box.employee.id for box in layout.boxes] == ["r"]

    def test_deep_chain(self):
        """Long reporting chains lay out without hitting the recursion limit."""
        employees = [{"id": 0, "name": "E0"}]
        employees += [{"id": i, "name": f"E{i}", "manager_id": i - 1} for i in range(1, 3000)]
        layout = OrgChartLayout(roots=build_forest(employees), level_gap=10, card_height=20)
        measurement = layout.measure()

        assert len(layout.boxes) == 3000
        assert all(box.x == pytest.approx(48) for box in layout.boxes)
        assert measurement.width == pytest.approx(48 + 300 + 48)
        assert measurement.height == pytest.approx(48 + 3000 * 20 + 2999 * 10 + 48)

    def test_deep_chain_with_siblings(self):
        """Deep subtrees next to each other are still separated."""
        employees = [{"id": "r", "name": "R"}]
        for branch in ("a", "b"):
            employees.append({"id": f"{branch}0", "name": branch, "manager_id": "r"})
            employees += [
                {"id": f"{branch}{i}", "name": branch, "manager_id": f"{branch}{i - 1}"}
                for i in range(1, 1500)
            ]
        layout = OrgChartLayout(roots=build_forest(employees), sibling_gap=10).run()
        boxes = boxes_by_id(layout)

        assert boxes["b1499"].x - boxes["a1499"].right == pytest.approx(10)
        assert boxes["r"].center_x == pytest.approx(
            (boxes["a0"].center_x + boxes["b0"].center_x) / 2
        )

    def test_wide_and_deep(self):
        """Larger charts lay out without overlaps."""
        employees = [Employee(id="0", name="Root")]
        for i in range(1, 60):
            employees.append(Employee(id=str(i), name=f"E{i}", manager_id=str((i - 1) // 3)))
        layout = OrgChartLayout(roots=build_forest(employees)).run()

        assert len(layout.boxes) == 60
        rows = {}
        for box in layout.boxes:
            rows.setdefault(box.depth, []).append(box)
        for row in rows.values():
            row.sort(key=lambda b: b.x)
            for left, right in zip(row, row[1:]):
                assert right.x >= left.right


# =============================================================================
# Card Sizes and Rows
# =============================================================================


class TestCardSizes:
    """Tests for card heights and row placement."""

    def test_card_grows_with_details(self):
        """Department and email lines make the card taller."""
        roots = build_forest(
            [
                {"id": "a", "name": "A"},
                {"id": "b", "name": "B", "department": "Eng"},
                {"id": "c", "name": "C", "department": "Eng", "email": "c@example.com"},
            ]
        )
        layout = OrgChartLayout(roots=roots, card_height=100).run()
        heights = {box.employee.id: box.height for box in layout.boxes}
        assert heights == {"a": 100, "b": 116, "c": 140}

    def test_row_height_is_tallest_card(self):
        """The next row starts below the tallest card of the row above."""
        roots = build_forest(
            [
                {"id": "r", "name": "R"},
                {"id": "a", "name": "A", "manager_id": "r", "email": "a@example.com"},
                {"id": "b", "name": "B", "manager_id": "r"},
                {"id": "c", "name": "C", "manager_id": "b"},
            ]
        )
        layout = OrgChartLayout(roots=roots, card_height=100, level_gap=40, padding=0).run()
        boxes = boxes_by_id(layout)

        assert boxes["a"].y == pytest.approx(140)
        assert boxes["c"].y == pytest.approx(140 + 124 + 40)

    def test_header_height_shifts_rows(self):
        """Header space is reserved above the first row."""
        layout = OrgChartLayout(roots=create_small_team(), header_height=100).run()
        assert boxes_by_id(layout)["m"].y == pytest.approx(148)
        assert layout.measure().height == pytest.approx(100 + 48 + 112 + 48 + 112 + 48)


# =============================================================================
# Connectors
# =============================================================================


class TestConnectors:
    """Tests for manager-to-report connectors."""

    def test_one_connector_per_report(self):
        """Every non-root card has one incoming connector."""
        layout = OrgChartLayout(roots=create_uneven_tree()).run()
        assert len(layout.connectors) == len(layout.boxes) - 1
        assert sorted(c.child for c in layout.connectors) == list(range(1, 8))

    def test_connector_geometry(self):
        """Connectors run from the manager's bottom center to the report's top center."""
        layout = OrgChartLayout(roots=create_small_team()).run()
        for connector in layout.connectors:
            parent = layout.boxes[connector.parent]
            child = layout.boxes[connector.child]
            assert connector.points[0] == (parent.center_x, parent.bottom)
            assert connector.points[-1] == (child.center_x, child.y)
            # Elbow at mid gap
            assert connector.points[1][1] == pytest.approx(parent.bottom + 24)
            assert connector.points[2][1] == pytest.approx(parent.bottom + 24)


# =============================================================================
# Configuration and Events
# =============================================================================


class TestConfiguration:
    """Tests for properties, validation and events."""

    def test_configuration_properties(self):
        """Configuration via constructor and properties."""
        layout = OrgChartLayout(
            card_width=200,
            card_height=80,
            sibling_gap=10,
            level_gap=20,
            padding=5,
            header_height=30,
        )
        assert layout.card_width == 200
        assert layout.card_height == 80
        assert layout.sibling_gap == 10
        assert layout.level_gap == 20
        assert layout.padding == 5
        assert layout.header_height == 30

    def test_invalid_configuration(self):
        """Non-positive sizes and negative gaps raise ValueError."""
        with pytest.raises(ValueError, match="card_width"):
            OrgChartLayout(card_width=0)
        with pytest.raises(ValueError, match="sibling_gap"):
            OrgChartLayout(sibling_gap=-1)
        layout = OrgChartLayout()
        with pytest.raises(ValueError, match="padding"):
            layout.padding = -5

    def test_setter_invalidates_results(self):
        """Changing configuration discards previous results."""
        layout = OrgChartLayout(roots=create_small_team()).run()
        assert layout.boxes
        layout.card_width = 200
        assert layout.boxes == []
        assert layout.measure().width == pytest.approx(48 + 200 + 48 + 200 + 48)

    def test_replace_roots(self):
        """Assigning new roots lays out the new forest."""
        layout = OrgChartLayout(roots=create_small_team()).run()
        layout.roots = build_forest([{"id": "z", "name": "Z"}])
        assert [box.employee.id for box in layout.run().boxes] == ["z"]

    def test_events(self):
        """Start and end events fire around run()."""
        seen = []
        layout = OrgChartLayout(
            roots=create_small_team(),
            on_start=lambda e: seen.append(("start", e.get("node_count"))),
        )
        layout.on("end", lambda e: seen.append(("end", e["node_count"])))
        layout.run()

        assert seen == [("start", None), ("end", 3)]

    def test_on_accepts_event_type(self):
        """on() accepts EventType members and chains."""
        layout = OrgChartLayout()
        assert layout.on(EventType.end, lambda e: None) is layout

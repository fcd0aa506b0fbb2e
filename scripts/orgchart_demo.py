#!/usr/bin/env python3
"""
Render a sample org chart on every export canvas.

Builds the chart from a JSON state file or a CSV employee list (or a bundled
sample company), lays it out once and writes one SVG per canvas preset plus a
DOT file.

Usage:
    uv run python scripts/orgchart_demo.py [--state FILE | --csv FILE] [--margin N]

Examples:
    uv run python scripts/orgchart_demo.py
    uv run python scripts/orgchart_demo.py --csv employees.csv
    uv run python scripts/orgchart_demo.py --state org.json --output build/acme

Output:
    build/orgchart_<canvas>.svg
    build/orgchart.dot
"""

from __future__ import annotations

import argparse
import logging
import warnings
from pathlib import Path

from org_chart_layout import (
    DEFAULT_MARGIN,
    CanvasSize,
    Employee,
    HiddenEmployeeWarning,
    InMemoryRepository,
    JsonFileRepository,
    Level,
    OrgChartLayout,
    OrgSettings,
    OrgState,
    build_forest,
    compute_scale,
    forest_stats,
    level_order_map,
    parse_employee_csv,
    resolve_import,
    validate_employees,
)
from org_chart_layout.export import to_dot, to_svg

BUILD_DIR = Path(__file__).parent.parent / "build"

SAMPLE_LEVELS = [
    Level(id="exec", name="Executive", order=0, color="#ef4444"),
    Level(id="dir", name="Director", order=1, color="#f59e0b"),
    Level(id="mgr", name="Manager", order=2, color="#10b981"),
    Level(id="ic", name="Individual Contributor", order=3, color="#3b82f6"),
]


def sample_state() -> OrgState:
    """A small company with a few teams."""
    employees = [
        ("ceo", "Grace Hopper", "Chief Executive Officer", "exec", None, "Executive"),
        ("cto", "Alan Turing", "Chief Technology Officer", "exec", "ceo", "Engineering"),
        ("cfo", "Ada Lovelace", "Chief Financial Officer", "exec", "ceo", "Finance"),
        ("coo", "Edsger Dijkstra", "Chief Operating Officer", "exec", "ceo", "Operations"),
        ("eng1", "Barbara Liskov", "Director of Platform", "dir", "cto", "Engineering"),
        ("eng2", "Donald Knuth", "Director of Research", "dir", "cto", "Engineering"),
        ("fin1", "John Backus", "Controller", "mgr", "cfo", "Finance"),
        ("ops1", "Frances Allen", "Operations Manager", "mgr", "coo", "Operations"),
        ("plat1", "Ken Thompson", "Engineering Manager", "mgr", "eng1", "Engineering"),
        ("plat2", "Dennis Ritchie", "Staff Engineer", "ic", "plat1", "Engineering"),
        ("plat3", "Margaret Hamilton", "Senior Engineer", "ic", "plat1", "Engineering"),
        ("res1", "Leslie Lamport", "Research Scientist", "ic", "eng2", "Engineering"),
        ("ops2", "Radia Perlman", "Network Engineer", "ic", "ops1", "Operations"),
    ]
    return OrgState(
        settings=OrgSettings(company_name="Analytical Engines Inc."),
        levels=list(SAMPLE_LEVELS),
        employees=[
            Employee(
                id=emp_id,
                name=name,
                position=position,
                level_id=level_id,
                manager_id=manager_id,
                department=department,
                email=f"{emp_id}@example.com",
            )
            for emp_id, name, position, level_id, manager_id, department in employees
        ],
    )


def load_state(args: argparse.Namespace) -> OrgState:
    if args.state:
        return JsonFileRepository(args.state).load()
    if args.csv:
        rows = parse_employee_csv(Path(args.csv).read_text(encoding="utf-8"))
        state = OrgState(levels=list(SAMPLE_LEVELS))
        state.employees = resolve_import(rows, state.levels)
        return state
    return InMemoryRepository(sample_state()).load()


def render(state: OrgState, output_dir: Path, margin: float) -> None:
    for _, issue in validate_employees(state.employees, strict=False):
        print(f"Warning: {issue}")

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", HiddenEmployeeWarning)
        roots = build_forest(state.employees, level_order_map(state.levels))
    for warning in caught:
        print(f"Warning: {warning.message}")

    stats = forest_stats(roots)
    print(f"{state.settings.title}: {stats.count} employees, depth {stats.depth}")

    layout = OrgChartLayout(roots=roots, header_height=112)
    measurement = layout.measure()
    print(f"Measured {measurement.width:.0f}x{measurement.height:.0f}")
    print("-" * 60)

    output_dir.mkdir(parents=True, exist_ok=True)
    for canvas in CanvasSize:
        scale = compute_scale(measurement.width, measurement.height, canvas, margin)
        svg = to_svg(
            layout,
            canvas=canvas,
            margin=margin,
            levels=state.levels,
            settings=state.settings,
        )
        output_path = output_dir / f"orgchart_{canvas.value}.svg"
        output_path.write_text(svg, encoding="utf-8")
        print(f"  {canvas.label:18s} scale {scale:.3f}  -> {output_path}")

    dot_path = output_dir / "orgchart.dot"
    dot_path.write_text(to_dot(roots, levels=state.levels), encoding="utf-8")
    print(f"  {'Graphviz':18s}              -> {dot_path}")


def main():
    parser = argparse.ArgumentParser(description="Render an org chart on every export canvas")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--state", help="JSON state file with settings, levels and employees")
    source.add_argument("--csv", help="CSV employee list (see EMPLOYEE_CSV_TEMPLATE)")
    parser.add_argument(
        "--margin", type=float, default=DEFAULT_MARGIN, help="Canvas margin in pixels"
    )
    parser.add_argument("--output", default=str(BUILD_DIR), help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    render(load_state(args), Path(args.output), args.margin)


if __name__ == "__main__":
    main()

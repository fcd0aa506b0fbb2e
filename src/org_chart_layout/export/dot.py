"""
DOT (Graphviz) export for org chart forests.

Generates a directed graph with one box per visible employee and an edge from
every manager to each direct report. Sibling order is kept with
``ordering=out`` so that Graphviz draws reports in level order.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ..hierarchy import iter_forest
from ..types import DEFAULT_LEVEL_COLOR, LevelLike, TreeNode, as_level


def to_dot(
    roots: Sequence[TreeNode],
    *,
    name: str = "orgchart",
    rankdir: str = "TB",
    levels: Optional[Sequence[LevelLike]] = None,
    node_fillcolor: str = "#f9f9f9",
    edge_color: Optional[str] = None,
    graph_attrs: Optional[dict[str, str]] = None,
) -> str:
    """
    Export the visible forest to DOT (Graphviz) format.

    Args:
        roots: Root nodes as returned by build_forest()
        name: Name of the graph (default "orgchart")
        rankdir: Graphviz rank direction ("TB" top-bottom, "LR" left-right)
        levels: Level definitions, used for node border colors
        node_fillcolor: Node fill color
        edge_color: Default edge color
        graph_attrs: Additional graph-level attributes

    Returns:
        DOT format string representation of the chart
    """
    colors = {level.id: level.color for level in map(as_level, levels or [])}

    lines = [f"digraph {_quote_id(name)} {{"]

    all_graph_attrs: dict[str, str] = {"rankdir": rankdir, "ordering": "out"}
    if graph_attrs:
        all_graph_attrs.update(graph_attrs)
    lines.append(_format_attrs_block("graph", all_graph_attrs))

    lines.append(
        _format_attrs_block(
            "node",
            {"shape": "box", "style": "rounded,filled", "fillcolor": node_fillcolor},
        )
    )
    if edge_color:
        lines.append(_format_attrs_block("edge", {"color": edge_color}))

    lines.append("")

    edges: list[tuple[str, str]] = []
    for node, _ in iter_forest(roots):
        emp = node.employee
        label_lines = [emp.name, emp.position] if emp.position else [emp.name]
        node_data = {
            "label": _quote_label(label_lines),
            "color": colors.get(emp.level_id or "", DEFAULT_LEVEL_COLOR),
        }
        attrs = _format_attrs(node_data, quoted=("label",))
        lines.append(f"  {_quote_id(emp.id)}{attrs};")
        for child in node.children:
            edges.append((emp.id, child.employee.id))

    lines.append("")

    for src, tgt in edges:
        lines.append(f"  {_quote_id(src)} -> {_quote_id(tgt)};")

    lines.append("}")

    return "\n".join(lines)


def _quote_id(s: str) -> str:
    """Quote a DOT identifier if necessary."""
    if not s:
        return '""'

    # Simple identifiers don't need quoting
    if s.isidentifier() or s.isdigit():
        return s

    # Quote and escape
    escaped = s.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _quote_label(label_lines: list[str]) -> str:
    """Quote a multi-line label; each line is escaped, then joined with \\n."""
    escaped = [line.replace("\\", "\\\\").replace('"', '\\"') for line in label_lines]
    return '"' + "\\n".join(escaped) + '"'


def _format_attrs(attrs: dict[str, str], quoted: Sequence[str] = ()) -> str:
    """Format attributes as DOT attribute list. Keys in ``quoted`` hold ready values."""
    if not attrs:
        return ""

    parts = []
    for key, value in attrs.items():
        if key in quoted:
            parts.append(f"{key}={value}")
        else:
            parts.append(f"{key}={_quote_id(value)}")

    return " [" + ", ".join(parts) + "]"


def _format_attrs_block(element: str, attrs: dict[str, str]) -> str:
    """Format a default attributes block."""
    parts = [f"{key}={_quote_id(value)}" for key, value in attrs.items()]
    return f"  {element} [{', '.join(parts)}];"


__all__ = ["to_dot"]

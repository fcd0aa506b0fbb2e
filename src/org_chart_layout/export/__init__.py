"""
Export functionality for org charts.

This module provides functions to export charts to text formats:
- SVG: Cards and connectors, scaled to fit the selected export canvas
- DOT: Graphviz format of the visible forest

Raster (PNG/JPEG) and PDF output are left to external converters, which can
consume the SVG directly.

Example usage:
    from org_chart_layout import OrgChartLayout, build_forest, level_order_map
    from org_chart_layout.export import to_dot, to_svg

    roots = build_forest(employees, level_order_map(levels))
    layout = OrgChartLayout(roots=roots, header_height=112).run()

    with open("orgchart.svg", "w") as f:
        f.write(to_svg(layout, canvas="ppt-widescreen", levels=levels))

    with open("orgchart.dot", "w") as f:
        f.write(to_dot(roots, levels=levels))
"""

from .dot import to_dot
from .svg import to_svg

__all__ = [
    "to_svg",
    "to_dot",
]

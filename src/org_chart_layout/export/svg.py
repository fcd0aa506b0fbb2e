"""
SVG export for org chart layouts.

Renders the positioned cards and connectors of an OrgChartLayout, scaled to
fit the selected export canvas. The layout is measured first, then the
fit-to-canvas scale is applied as one uniform transform on the content group.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence
from xml.sax.saxutils import escape

from ..scaling import DEFAULT_MARGIN, fit_to_canvas
from ..types import (
    DEFAULT_LEVEL_COLOR,
    CanvasLike,
    LevelLike,
    OrgSettings,
    SettingsLike,
    as_level,
    as_settings,
)

if TYPE_CHECKING:
    from ..layout import Connector, NodeBox, OrgChartLayout

# Card metrics, matching the card heights used by OrgChartLayout
_CARD_PADDING = 24.0
_AVATAR_SIZE = 64.0
_ACCENT_HEIGHT = 5.0

_EMPTY_WIDTH = 640.0
_EMPTY_HEIGHT = 320.0


def to_svg(
    layout: OrgChartLayout,
    *,
    canvas: CanvasLike = None,
    margin: float = DEFAULT_MARGIN,
    levels: Optional[Sequence[LevelLike]] = None,
    settings: Optional[SettingsLike] = None,
    background: Optional[str] = "#ffffff",
    card_fill: str = "#ffffff",
    card_stroke: str = "#e5e7eb",
    connector_color: str = "#9ca3af",
    connector_width: float = 4.0,
    font_family: str = "sans-serif",
) -> str:
    """
    Export an org chart layout to SVG format.

    Args:
        layout: An OrgChartLayout (run() is called if needed)
        canvas: Canvas selection. Defaults to the canvas in ``settings``.
        margin: Space kept free on every side of a fixed canvas
        levels: Level definitions, used for card accent colors
        settings: Company settings (title band, default canvas)
        background: Background color (None for transparent)
        card_fill: Card fill color
        card_stroke: Card border color
        connector_color: Connector line color
        connector_width: Connector line width
        font_family: Font family for all text

    Returns:
        SVG string representation of the chart
    """
    org = as_settings(settings)
    if canvas is None:
        canvas = org.canvas_size

    measurement = layout.measure()
    if not layout.boxes:
        # Nothing to measure: the scaler is not involved
        return _empty_svg(background, font_family)

    fit = fit_to_canvas(measurement.width, measurement.height, canvas, margin)
    colors = {level.id: level.color for level in map(as_level, levels or [])}

    svg_parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{fit.canvas_width:.1f}" height="{fit.canvas_height:.1f}" '
        f'viewBox="0 0 {fit.canvas_width:.1f} {fit.canvas_height:.1f}">'
    ]

    if background:
        svg_parts.append(f'  <rect width="100%" height="100%" fill="{_attr(background)}"/>')

    svg_parts.append(
        f'  <g class="chart" '
        f'transform="translate({fit.offset_x:.2f},{fit.offset_y:.2f}) scale({fit.scale:.5f})">'
    )

    if org.show_logo and layout.header_height > 0:
        svg_parts.append(_render_header(org, measurement.width, layout, font_family))

    svg_parts.append('    <g class="connectors">')
    for connector in layout.connectors:
        svg_parts.append(_render_connector(connector, connector_color, connector_width))
    svg_parts.append("    </g>")

    svg_parts.append('    <g class="cards">')
    for box in layout.boxes:
        color = colors.get(box.employee.level_id or "", DEFAULT_LEVEL_COLOR)
        svg_parts.append(_render_card(box, color, card_fill, card_stroke, font_family))
    svg_parts.append("    </g>")

    svg_parts.append("  </g>")
    svg_parts.append("</svg>")

    return "\n".join(svg_parts)


def _attr(value: str) -> str:
    """Escape a value for use inside a double-quoted attribute."""
    return escape(value, {'"': "&quot;"})


def _empty_svg(background: Optional[str], font_family: str) -> str:
    """Empty-state chart shown when there are no employees."""
    bg = ""
    if background:
        bg = f'\n  <rect width="100%" height="100%" fill="{_attr(background)}"/>'
    cx = _EMPTY_WIDTH / 2
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{_EMPTY_WIDTH:.1f}" height="{_EMPTY_HEIGHT:.1f}" '
        f'viewBox="0 0 {_EMPTY_WIDTH:.1f} {_EMPTY_HEIGHT:.1f}">{bg}\n'
        f'  <g class="empty-state" font-family="{_attr(font_family)}" text-anchor="middle">\n'
        f'    <text x="{cx:.1f}" y="150.0" font-size="20" font-weight="600" '
        f'fill="#374151">No employees found</text>\n'
        f'    <text x="{cx:.1f}" y="180.0" font-size="14" '
        f'fill="#6b7280">Import employees to generate your org chart</text>\n'
        f"  </g>\n</svg>"
    )


def _render_header(
    settings: OrgSettings,
    content_width: float,
    layout: OrgChartLayout,
    font_family: str,
) -> str:
    """Render the company title band above the first row."""
    cx = content_width / 2
    top = layout.padding
    parts = [f'    <g class="header" font-family="{_attr(font_family)}" text-anchor="middle">']
    if settings.company_logo_url:
        parts.append(
            f'      <image href="{_attr(settings.company_logo_url)}" '
            f'x="{cx - 20:.1f}" y="{top:.1f}" width="40" height="40"/>'
        )
    parts.append(
        f'      <text x="{cx:.1f}" y="{top + 64:.1f}" font-size="24" font-weight="700" '
        f'fill="#111827">{escape(settings.title)}</text>'
    )
    parts.append(
        f'      <text x="{cx:.1f}" y="{top + 86:.1f}" font-size="14" '
        f'fill="#4b5563">Organizational Structure</text>'
    )
    parts.append("    </g>")
    return "\n".join(parts)


def _render_connector(connector: Connector, color: str, width: float) -> str:
    """Render an elbow connector."""
    path_data = " ".join(f"{x:.1f},{y:.1f}" for x, y in connector.points)
    return (
        f'      <polyline points="{path_data}" '
        f'fill="none" stroke="{_attr(color)}" stroke-width="{width}"/>'
    )


def _render_card(
    box: NodeBox,
    color: str,
    fill: str,
    stroke: str,
    font_family: str,
) -> str:
    """Render one employee card."""
    emp = box.employee
    avatar_x = box.x + _CARD_PADDING
    avatar_y = box.y + _CARD_PADDING
    text_x = avatar_x + _AVATAR_SIZE + 16
    parts = [
        f'      <g class="card" data-employee-id="{_attr(emp.id)}" '
        f'font-family="{_attr(font_family)}">',
        f'        <rect x="{box.x:.1f}" y="{box.y:.1f}" '
        f'width="{box.width:.1f}" height="{box.height:.1f}" '
        f'fill="{_attr(fill)}" stroke="{_attr(stroke)}" stroke-width="2" rx="8"/>',
        f'        <rect x="{box.x:.1f}" y="{box.y:.1f}" '
        f'width="{box.width:.1f}" height="{_ACCENT_HEIGHT:.1f}" fill="{_attr(color)}"/>',
    ]

    if emp.picture_url:
        parts.append(
            f'        <image href="{_attr(emp.picture_url)}" '
            f'x="{avatar_x:.1f}" y="{avatar_y:.1f}" '
            f'width="{_AVATAR_SIZE:.1f}" height="{_AVATAR_SIZE:.1f}" '
            f'preserveAspectRatio="xMidYMid slice"/>'
        )
    else:
        radius = _AVATAR_SIZE / 2
        parts.append(
            f'        <circle cx="{avatar_x + radius:.1f}" cy="{avatar_y + radius:.1f}" '
            f'r="{radius:.1f}" fill="{_attr(color)}"/>'
        )
        parts.append(
            f'        <text x="{avatar_x + radius:.1f}" y="{avatar_y + radius:.1f}" '
            f'fill="#ffffff" font-size="20" font-weight="700" '
            f'text-anchor="middle" dominant-baseline="central">{escape(emp.initials)}</text>'
        )

    line_y = avatar_y + 18
    parts.append(
        f'        <text x="{text_x:.1f}" y="{line_y:.1f}" font-size="18" font-weight="700" '
        f'fill="#111827">{escape(emp.name)}</text>'
    )
    line_y += 22
    parts.append(
        f'        <text x="{text_x:.1f}" y="{line_y:.1f}" font-size="14" '
        f'fill="#4b5563">{escape(emp.position)}</text>'
    )
    if emp.department:
        line_y += 18
        parts.append(
            f'        <text x="{text_x:.1f}" y="{line_y:.1f}" font-size="12" '
            f'fill="#6b7280">{escape(emp.department)}</text>'
        )
    if emp.email:
        line_y += 22
        parts.append(
            f'        <text x="{text_x:.1f}" y="{line_y:.1f}" font-size="12" '
            f'fill="#2563eb">{escape(emp.email)}</text>'
        )

    parts.append("      </g>")
    return "\n".join(parts)


__all__ = ["to_svg"]

"""
Fit-to-canvas scaling for chart export.

The rendered chart is measured first, then scaled by a single uniform factor
so that it fits a fixed canvas with margins:

    available = canvas - 2 * margin
    scale = min(available_w / measured_w, available_h / measured_h, 1) * 0.98

Content is never enlarged past its natural size. The 0.98 factor keeps
sub-pixel rounding from clipping the content at the canvas edge. Degenerate
inputs (unconstrained canvas, margins that consume the canvas, empty
measurements) give a scale of 1.

Measurement and scaling form a two-phase protocol: a ChartMeasurement records
which forest it was taken from, and apply_measurement() refuses to combine it
with a different forest.
"""

from __future__ import annotations

import hashlib
import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from .hierarchy import iter_forest
from .types import CanvasLike, CanvasSize, TreeNode
from .validation import ValidationError, validate_canvas_size

logger = logging.getLogger(__name__)

SAFETY_FACTOR = 0.98
DEFAULT_MARGIN = 32.0


class StaleMeasurementError(RuntimeError):
    """Raised when a measurement taken from one forest is applied to another."""

    pass


@dataclass(frozen=True)
class ChartMeasurement:
    """
    Pixel footprint of a rendered forest.

    Attributes:
        width: Content width in pixels
        height: Content height in pixels
        revision: Fingerprint of the forest that was measured
    """

    width: float
    height: float
    revision: str = ""


@dataclass(frozen=True)
class CanvasFit:
    """
    Placement of scaled content on the export canvas.

    Attributes:
        scale: Uniform scale factor in (0, 1]
        canvas_width: Canvas width (content width for unconstrained canvases)
        canvas_height: Canvas height (content height for unconstrained canvases)
        offset_x: Left edge of the scaled content
        offset_y: Top edge of the scaled content
    """

    scale: float
    canvas_width: float
    canvas_height: float
    offset_x: float = 0.0
    offset_y: float = 0.0


def resolve_canvas_size(value: CanvasLike) -> Optional[tuple[float, float]]:
    """
    Resolve a canvas selection to pixel dimensions.

    Args:
        value: A CanvasSize, a preset name such as "ppt-standard", a custom
            (width, height) pair, a {"width": ..., "height": ...} mapping or
            an object with width and height attributes, or None. Unknown
            preset names resolve to the unconstrained canvas.

    Returns:
        (width, height), or None for an unconstrained canvas

    Raises:
        InvalidCanvasSizeError: If a custom (width, height) is invalid
    """
    if value is None:
        return None
    if isinstance(value, CanvasSize):
        return value.dimensions
    if isinstance(value, str):
        try:
            return CanvasSize(value.strip().lower()).dimensions
        except ValueError:
            logger.debug("Unknown canvas size %r, using auto", value)
            return None
    if isinstance(value, Mapping):
        return validate_canvas_size((value.get("width"), value.get("height")))
    if hasattr(value, "width") and hasattr(value, "height"):
        return validate_canvas_size((value.width, value.height))
    return validate_canvas_size(value)


def compute_scale(
    measured_width: float,
    measured_height: float,
    canvas: CanvasLike,
    margin: float = DEFAULT_MARGIN,
) -> float:
    """
    Compute the uniform scale that fits measured content into a canvas.

    Never raises: every degenerate input falls back to a scale of 1.

    Args:
        measured_width: Natural content width in pixels
        measured_height: Natural content height in pixels
        canvas: Canvas selection (see resolve_canvas_size())
        margin: Space kept free on every side of the canvas

    Returns:
        Scale factor in (0, 1]

    Example:
        >>> round(compute_scale(1000, 500, CanvasSize.PPT_STANDARD, 16), 5)
        0.90944
    """
    try:
        measured_width = float(measured_width)
        measured_height = float(measured_height)
        margin = float(margin)
    except (TypeError, ValueError):
        logger.debug("Non-numeric measurement or margin, not scaling")
        return 1.0

    try:
        dimensions = resolve_canvas_size(canvas)
    except ValidationError:
        logger.debug("Invalid custom canvas %r, treating as unconstrained", canvas)
        dimensions = None
    if dimensions is None:
        return 1.0

    width, height = dimensions
    available_width = width - 2 * margin
    available_height = height - 2 * margin
    if not (available_width > 0 and available_height > 0):
        logger.debug(
            "Margin %s leaves no room on %sx%s canvas, not scaling", margin, width, height
        )
        return 1.0
    if not (measured_width > 0 and measured_height > 0):
        return 1.0

    scale_x = available_width / measured_width
    scale_y = available_height / measured_height
    raw_scale = min(scale_x, scale_y, 1.0)
    final_scale = raw_scale * SAFETY_FACTOR

    if not (final_scale > 0 and math.isfinite(final_scale)):
        return 1.0
    return final_scale


def fit_to_canvas(
    measured_width: float,
    measured_height: float,
    canvas: CanvasLike,
    margin: float = DEFAULT_MARGIN,
) -> CanvasFit:
    """
    Scale content and center it on the canvas.

    For an unconstrained canvas the canvas takes the content's natural size
    and no offset is applied.

    Args:
        measured_width: Natural content width in pixels
        measured_height: Natural content height in pixels
        canvas: Canvas selection (see resolve_canvas_size())
        margin: Space kept free on every side of the canvas

    Returns:
        CanvasFit with the scale and the content's top-left corner
    """
    scale = compute_scale(measured_width, measured_height, canvas, margin)
    try:
        dimensions = resolve_canvas_size(canvas)
    except ValidationError:
        dimensions = None

    content_width = max(float(measured_width), 0.0)
    content_height = max(float(measured_height), 0.0)
    if dimensions is None:
        return CanvasFit(scale=scale, canvas_width=content_width, canvas_height=content_height)

    width, height = dimensions
    # Centered like a transform with its origin at the content center
    offset_x = (width - content_width * scale) / 2
    offset_y = (height - content_height * scale) / 2
    return CanvasFit(
        scale=scale,
        canvas_width=width,
        canvas_height=height,
        offset_x=offset_x,
        offset_y=offset_y,
    )


def forest_revision(roots: Sequence[TreeNode]) -> str:
    """
    Fingerprint the visible content of a forest.

    Any change that can alter the rendered footprint (employees, their order
    or nesting, level assignment) changes the fingerprint.
    """
    digest = hashlib.sha1()
    for node, depth in iter_forest(roots):
        emp = node.employee
        fields = (
            str(depth),
            emp.id,
            emp.name,
            emp.position,
            emp.level_id or "",
            emp.department or "",
            emp.email or "",
            emp.picture_url or "",
        )
        digest.update("\x1f".join(fields).encode("utf-8"))
        digest.update(b"\x1e")
    return digest.hexdigest()


def apply_measurement(
    measurement: ChartMeasurement,
    roots: Sequence[TreeNode],
    canvas: CanvasLike,
    margin: float = DEFAULT_MARGIN,
) -> CanvasFit:
    """
    Compute the canvas fit for a measurement of the given forest.

    Args:
        measurement: Result of the layout pass
        roots: The forest about to be exported
        canvas: Canvas selection
        margin: Space kept free on every side of the canvas

    Returns:
        CanvasFit for the measured content

    Raises:
        StaleMeasurementError: If the measurement was taken from a different
            forest than ``roots``
    """
    revision = forest_revision(roots)
    if measurement.revision != revision:
        raise StaleMeasurementError(
            "Measurement does not match the current forest; "
            "run the layout again before scaling"
        )
    return fit_to_canvas(measurement.width, measurement.height, canvas, margin)


__all__ = [
    "SAFETY_FACTOR",
    "DEFAULT_MARGIN",
    "StaleMeasurementError",
    "ChartMeasurement",
    "CanvasFit",
    "resolve_canvas_size",
    "compute_scale",
    "fit_to_canvas",
    "forest_revision",
    "apply_measurement",
]

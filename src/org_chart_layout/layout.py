"""
Box-per-node org chart layout.

Positions one fixed-width card per visible employee with elbow connectors
from each manager to its direct reports. Horizontal placement uses the
Reingold-Tilford tidy tree algorithm with Walker's linear-time improvements:

"Tidier Drawings of Trees" by Reingold and Tilford (1981)
"A Node-Positioning Algorithm for General Trees" by Walker (1990)

Roots are laid out side by side as children of a virtual super-root, which is
dropped from the result. The measured footprint feeds the fit-to-canvas
scaler (see org_chart_layout.scaling).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional, Sequence

if TYPE_CHECKING:
    from typing_extensions import Self

from .hierarchy import iter_forest
from .scaling import ChartMeasurement, forest_revision
from .types import Employee, Event, EventType, TreeNode

# Card content metrics, in pixels
_LINE_DEPARTMENT = 16.0
_LINE_EMAIL = 24.0


@dataclass
class NodeBox:
    """
    A positioned employee card.

    Attributes:
        index: Position in pre-order of the visible forest
        employee: The employee shown on the card
        depth: Distance from the root (roots are 0)
        x: Left edge
        y: Top edge
        width: Card width
        height: Card height
        parent: Index of the manager's box, or None for roots
    """

    index: int
    employee: Employee
    depth: int
    x: float
    y: float
    width: float
    height: float
    parent: Optional[int] = None

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass
class Connector:
    """
    Orthogonal connector from a manager card to a direct report.

    Attributes:
        parent: Index of the manager's box
        child: Index of the report's box
        points: Polyline from the manager's bottom center to the report's top center
    """

    parent: int
    child: int
    points: list[tuple[float, float]] = field(default_factory=list)


class _LayoutNode:
    """Internal node representation for the tidy tree computation."""

    def __init__(self, index: int, depth: int) -> None:
        self.index = index
        self.depth = depth
        self.children: list[_LayoutNode] = []
        self.parent: Optional[_LayoutNode] = None

        # Walker fields
        self.mod: float = 0.0
        self.thread: Optional[_LayoutNode] = None
        self.ancestor: _LayoutNode = self
        self.prelim: float = 0.0
        self.change: float = 0.0
        self.shift: float = 0.0
        self.number: int = 0  # Position among siblings
        self.x: float = 0.0


class OrgChartLayout:
    """
    Tidy box layout of an org chart forest.

    Cards share one width; a card grows taller when it shows a department or
    an email. Every depth forms a row as tall as its tallest card.

    Example:
        roots = build_forest(employees, level_order_map(levels))
        layout = OrgChartLayout(roots=roots).run()

        for box in layout.boxes:
            print(box.employee.name, box.x, box.y)

        measurement = layout.measure()
        scale = compute_scale(measurement.width, measurement.height, "ppt-standard")
    """

    def __init__(
        self,
        *,
        roots: Optional[Sequence[TreeNode]] = None,
        card_width: float = 300.0,
        card_height: float = 112.0,
        sibling_gap: float = 48.0,
        level_gap: float = 48.0,
        padding: float = 48.0,
        header_height: float = 0.0,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
    ) -> None:
        """
        Initialize layout with configuration.

        Args:
            roots: Root nodes as returned by build_forest()
            card_width: Width of every card
            card_height: Height of a card showing only name and position
            sibling_gap: Horizontal space between neighbouring cards
            level_gap: Vertical space between rows (holds the connectors)
            padding: Space around the chart content
            header_height: Space reserved above the first row for a title band
            on_start: Callback for start event
            on_end: Callback for end event
        """
        self._roots: list[TreeNode] = list(roots) if roots is not None else []
        self._card_width = _positive("card_width", card_width)
        self._card_height = _positive("card_height", card_height)
        self._sibling_gap = _non_negative("sibling_gap", sibling_gap)
        self._level_gap = _non_negative("level_gap", level_gap)
        self._padding = _non_negative("padding", padding)
        self._header_height = _non_negative("header_height", header_height)
        self._events: dict[EventType, Callable[[Optional[Event]], None]] = {}

        self._boxes: list[NodeBox] = []
        self._connectors: list[Connector] = []
        self._computed = False

        if on_start:
            self._events[EventType.start] = on_start
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def roots(self) -> list[TreeNode]:
        """Get the forest being laid out."""
        return self._roots

    @roots.setter
    def roots(self, value: Sequence[TreeNode]) -> None:
        """Replace the forest. Previous results are discarded."""
        self._roots = list(value)
        self._invalidate()

    @property
    def card_width(self) -> float:
        return self._card_width

    @card_width.setter
    def card_width(self, value: float) -> None:
        self._card_width = _positive("card_width", value)
        self._invalidate()

    @property
    def card_height(self) -> float:
        return self._card_height

    @card_height.setter
    def card_height(self, value: float) -> None:
        self._card_height = _positive("card_height", value)
        self._invalidate()

    @property
    def sibling_gap(self) -> float:
        return self._sibling_gap

    @sibling_gap.setter
    def sibling_gap(self, value: float) -> None:
        self._sibling_gap = _non_negative("sibling_gap", value)
        self._invalidate()

    @property
    def level_gap(self) -> float:
        return self._level_gap

    @level_gap.setter
    def level_gap(self, value: float) -> None:
        self._level_gap = _non_negative("level_gap", value)
        self._invalidate()

    @property
    def padding(self) -> float:
        return self._padding

    @padding.setter
    def padding(self, value: float) -> None:
        self._padding = _non_negative("padding", value)
        self._invalidate()

    @property
    def header_height(self) -> float:
        return self._header_height

    @header_height.setter
    def header_height(self, value: float) -> None:
        self._header_height = _non_negative("header_height", value)
        self._invalidate()

    @property
    def boxes(self) -> list[NodeBox]:
        """Positioned cards in pre-order (empty until run())."""
        return self._boxes

    @property
    def connectors(self) -> list[Connector]:
        """Manager-to-report connectors (empty until run())."""
        return self._connectors

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Callable[[Optional[Event]], None]) -> Self:
        """
        Subscribe to a layout event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """Trigger an event, calling the registered callback."""
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    def run(self) -> Self:
        """
        Compute card positions and connectors.

        Returns:
            self (for chaining)
        """
        self.trigger({"type": EventType.start})

        self._boxes = []
        self._connectors = []
        if self._roots:
            self._compute()
        self._computed = True

        self.trigger({"type": EventType.end, "node_count": len(self._boxes)})
        return self

    def measure(self) -> ChartMeasurement:
        """
        Measure the pixel footprint of the chart, padding included.

        Runs the layout first if needed. An empty forest measures 0 x 0.
        """
        if not self._computed:
            self.run()
        revision = forest_revision(self._roots)
        if not self._boxes:
            return ChartMeasurement(width=0.0, height=0.0, revision=revision)
        width = max(box.right for box in self._boxes) + self._padding
        height = max(box.bottom for box in self._boxes) + self._padding
        return ChartMeasurement(width=width, height=height, revision=revision)

    def _invalidate(self) -> None:
        self._computed = False
        self._boxes = []
        self._connectors = []

    # -------------------------------------------------------------------------
    # Tree Construction
    # -------------------------------------------------------------------------

    def _build_tree(self) -> _LayoutNode:
        """Mirror the visible forest under a virtual super-root at depth -1."""
        super_root = _LayoutNode(index=-1, depth=-1)
        stack: list[_LayoutNode] = [super_root]

        for node, depth in iter_forest(self._roots):
            # Pre-order: the parent is the last open node one level up
            while stack[-1].depth >= depth:
                stack.pop()
            parent = stack[-1]
            index = len(self._boxes)
            layout_node = _LayoutNode(index=index, depth=depth)
            layout_node.parent = parent
            layout_node.number = len(parent.children)
            parent.children.append(layout_node)
            stack.append(layout_node)

            self._boxes.append(
                NodeBox(
                    index=index,
                    employee=node.employee,
                    depth=depth,
                    x=0.0,
                    y=0.0,
                    width=self._card_width,
                    height=self._card_height_for(node.employee),
                    parent=parent.index if parent.index >= 0 else None,
                )
            )

        return super_root

    def _card_height_for(self, employee: Employee) -> float:
        height = self._card_height
        if employee.department:
            height += _LINE_DEPARTMENT
        if employee.email:
            height += _LINE_EMAIL
        return height

    # -------------------------------------------------------------------------
    # Reingold-Tilford / Walker
    # -------------------------------------------------------------------------

    @property
    def _distance(self) -> float:
        """Center-to-center distance between neighbouring cards."""
        return self._card_width + self._sibling_gap

    def _left_sibling(self, v: _LayoutNode) -> Optional[_LayoutNode]:
        if v.number > 0 and v.parent is not None:
            return v.parent.children[v.number - 1]
        return None

    def _first_walk(self, root: _LayoutNode) -> None:
        """
        First walk: preliminary x-coordinates, bottom-up.

        Post-order with an explicit stack of [node, next_child, default_ancestor]
        frames, so long reporting chains do not hit the recursion limit.
        """
        stack: list[list] = [[root, 0, root.children[0] if root.children else None]]
        while stack:
            frame = stack[-1]
            v, next_child = frame[0], frame[1]
            if next_child < len(v.children):
                frame[1] = next_child + 1
                child = v.children[next_child]
                stack.append([child, 0, child.children[0] if child.children else None])
                continue

            stack.pop()
            self._place(v)
            if stack:
                parent_frame = stack[-1]
                parent_frame[2] = self._apportion(v, parent_frame[2])

    def _place(self, v: _LayoutNode) -> None:
        """Set the preliminary x of v once all of its children are placed."""
        left = self._left_sibling(v)
        if not v.children:
            v.prelim = left.prelim + self._distance if left is not None else 0.0
            return

        self._execute_shifts(v)

        midpoint = (v.children[0].prelim + v.children[-1].prelim) / 2
        if left is not None:
            v.prelim = left.prelim + self._distance
            v.mod = v.prelim - midpoint
        else:
            v.prelim = midpoint

    def _apportion(self, v: _LayoutNode, default_ancestor: _LayoutNode) -> _LayoutNode:
        """Push the subtree of v clear of its left siblings' subtrees."""
        left = self._left_sibling(v)
        if left is None or v.parent is None:
            return default_ancestor

        # Contours: inside/outside, of the right subtree (v) and left forest
        in_right = out_right = v
        in_left = left
        out_left = v.parent.children[0]
        s_in_right = in_right.mod
        s_out_right = out_right.mod
        s_in_left = in_left.mod
        s_out_left = out_left.mod

        next_in_left = _next_right(in_left)
        next_in_right = _next_left(in_right)
        while next_in_left is not None and next_in_right is not None:
            next_out_left = _next_left(out_left)
            next_out_right = _next_right(out_right)
            # Outer contours are at least as deep as the inner ones
            assert next_out_left is not None
            assert next_out_right is not None

            in_left = next_in_left
            in_right = next_in_right
            out_left = next_out_left
            out_right = next_out_right
            out_right.ancestor = v

            shift = (in_left.prelim + s_in_left) - (in_right.prelim + s_in_right) + self._distance
            if shift > 0:
                if in_left.ancestor.parent is v.parent:
                    ancestor = in_left.ancestor
                else:
                    ancestor = default_ancestor
                _move_subtree(ancestor, v, shift)
                s_in_right += shift
                s_out_right += shift

            s_in_left += in_left.mod
            s_in_right += in_right.mod
            s_out_left += out_left.mod
            s_out_right += out_right.mod

            next_in_left = _next_right(in_left)
            next_in_right = _next_left(in_right)

        if next_in_left is not None and _next_right(out_right) is None:
            out_right.thread = next_in_left
            out_right.mod += s_in_left - s_out_right

        if next_in_right is not None and _next_left(out_left) is None:
            out_left.thread = next_in_right
            out_left.mod += s_in_right - s_out_left
            default_ancestor = v

        return default_ancestor

    def _execute_shifts(self, v: _LayoutNode) -> None:
        """Apply accumulated shifts to the children of v, right to left."""
        shift = 0.0
        change = 0.0
        for child in reversed(v.children):
            child.prelim += shift
            child.mod += shift
            change += child.change
            shift += child.shift + change

    def _second_walk(self, root: _LayoutNode) -> None:
        """Second walk: final x-coordinates, top-down."""
        stack = [(root, 0.0)]
        while stack:
            v, mod = stack.pop()
            v.x = v.prelim + mod
            for child in v.children:
                stack.append((child, mod + v.mod))

    # -------------------------------------------------------------------------
    # Layout Computation
    # -------------------------------------------------------------------------

    def _compute(self) -> None:
        super_root = self._build_tree()
        if not self._boxes:
            return

        self._first_walk(super_root)
        self._second_walk(super_root)

        # Row tops: each row is as tall as its tallest card
        row_heights: dict[int, float] = {}
        for box in self._boxes:
            row_heights[box.depth] = max(row_heights.get(box.depth, 0.0), box.height)
        row_tops: dict[int, float] = {}
        top = self._padding + self._header_height
        for depth in sorted(row_heights):
            row_tops[depth] = top
            top += row_heights[depth] + self._level_gap

        centers = _collect_centers(super_root)
        min_center = min(centers.values())
        for box in self._boxes:
            center = centers[box.index] - min_center + self._padding + self._card_width / 2
            box.x = center - box.width / 2
            box.y = row_tops[box.depth]

        for box in self._boxes:
            if box.parent is not None:
                self._connectors.append(self._connect(self._boxes[box.parent], box))

    def _connect(self, parent: NodeBox, child: NodeBox) -> Connector:
        mid_y = parent.bottom + self._level_gap / 2
        return Connector(
            parent=parent.index,
            child=child.index,
            points=[
                (parent.center_x, parent.bottom),
                (parent.center_x, mid_y),
                (child.center_x, mid_y),
                (child.center_x, child.y),
            ],
        )


def _next_left(v: _LayoutNode) -> Optional[_LayoutNode]:
    """Next node on the left contour."""
    if v.children:
        return v.children[0]
    return v.thread


def _next_right(v: _LayoutNode) -> Optional[_LayoutNode]:
    """Next node on the right contour."""
    if v.children:
        return v.children[-1]
    return v.thread


def _move_subtree(wl: _LayoutNode, wr: _LayoutNode, shift: float) -> None:
    """Shift subtree wr right, spreading the change over the subtrees in between."""
    subtrees = wr.number - wl.number
    if subtrees > 0:
        wr.change -= shift / subtrees
        wr.shift += shift
        wl.change += shift / subtrees
        wr.prelim += shift
        wr.mod += shift


def _collect_centers(super_root: _LayoutNode) -> dict[int, float]:
    centers: dict[int, float] = {}
    stack = list(super_root.children)
    while stack:
        v = stack.pop()
        centers[v.index] = v.x
        stack.extend(v.children)
    return centers


def _positive(name: str, value: float) -> float:
    value = float(value)
    if not value > 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _non_negative(name: str, value: float) -> float:
    value = float(value)
    if not value >= 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


__all__ = ["OrgChartLayout", "NodeBox", "Connector"]

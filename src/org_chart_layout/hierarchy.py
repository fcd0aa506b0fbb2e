"""
Hierarchy construction from flat employee records.

Employees reference their manager by id. The builder turns that flat list into
an ordered forest of TreeNode objects:

1. Every record is wrapped in a TreeNode stored in an index-addressed arena,
   with a hash map from employee id to arena index.
2. Each node is appended to exactly one list: its manager's children when the
   manager id resolves, the root list otherwise. Manager chains are never
   walked, so the build terminates for any input, cycles included.
3. Every children list and the root list is stably sorted by level order.

A manager cycle (including an employee managing itself) places its members
under each other, so none of them is reachable from a root. They stay in the
forest but are not visited by traversal from the roots; a
HiddenEmployeeWarning reports how many records are affected.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from .types import EmployeeLike, LevelLike, TreeNode, as_employee, as_level

logger = logging.getLogger(__name__)

# Order used for employees whose level is missing or unknown
DEFAULT_LEVEL_ORDER = 0


class HiddenEmployeeWarning(UserWarning):
    """Warning issued when employees are not reachable from any root."""

    pass


@dataclass(frozen=True)
class ForestStats:
    """
    Shape of the visible forest.

    Attributes:
        count: Number of nodes reachable from the roots
        depth: Number of levels (0 for an empty forest)
        breadth: Largest number of nodes on a single level
    """

    count: int
    depth: int
    breadth: int


def level_order_map(levels: Iterable[LevelLike]) -> dict[str, int]:
    """
    Build the level id -> order lookup used for sibling ordering.

    Args:
        levels: Level objects, dicts or attribute objects

    Returns:
        Mapping from level id to its order
    """
    orders: dict[str, int] = {}
    for data in levels:
        level = as_level(data)
        orders[level.id] = level.order
    return orders


def build_forest(
    employees: Sequence[EmployeeLike],
    level_order_of: Optional[Mapping[str, int]] = None,
    *,
    warn_hidden: bool = True,
) -> list[TreeNode]:
    """
    Build an ordered forest from flat employee records.

    Employees whose manager id is unset or does not resolve become roots.
    Siblings (and roots) are sorted by the order of their level, ascending;
    ties keep input order. Unknown levels sort with order 0.

    Args:
        employees: Employee objects, dicts, or attribute objects
        level_order_of: Mapping from level id to order. See level_order_map().
        warn_hidden: Issue a HiddenEmployeeWarning when records are
            unreachable from every root.

    Returns:
        Root nodes in display order. Empty input gives an empty list.

    Example:
        >>> roots = build_forest(
        ...     [
        ...         {"id": 1, "name": "A"},
        ...         {"id": 2, "name": "B", "manager_id": 1},
        ...     ]
        ... )
        >>> [child.employee.name for child in roots[0].children]
        ['B']
    """
    records = [as_employee(data) for data in employees]
    orders = {str(key): order for key, order in (level_order_of or {}).items()}

    # Arena: one node per record, addressed by input position
    arena = [TreeNode(employee=emp) for emp in records]
    index_of: dict[str, int] = {}
    for i, emp in enumerate(records):
        index_of[emp.id] = i

    roots: list[TreeNode] = []
    for i, emp in enumerate(records):
        parent = index_of.get(emp.manager_id) if emp.manager_id is not None else None
        if parent is None:
            roots.append(arena[i])
        else:
            arena[parent].children.append(arena[i])

    def sort_key(node: TreeNode) -> int:
        level_id = node.employee.level_id
        if level_id is None:
            return DEFAULT_LEVEL_ORDER
        return orders.get(level_id, DEFAULT_LEVEL_ORDER)

    # Sorting the arena in place covers every children list exactly once
    roots.sort(key=sort_key)
    for node in arena:
        if len(node.children) > 1:
            node.children.sort(key=sort_key)

    logger.debug("Built forest with %d root(s) from %d employee(s)", len(roots), len(records))

    if warn_hidden and records:
        visible = sum(1 for _ in iter_forest(roots))
        hidden = len(records) - visible
        if hidden:
            warnings.warn(
                f"Found {hidden} employee(s) not reachable from any root. "
                "Their manager references form a cycle (or an employee manages "
                "itself), so they will not be rendered.",
                HiddenEmployeeWarning,
                stacklevel=2,
            )

    return roots


def iter_forest(roots: Sequence[TreeNode]) -> Iterator[tuple[TreeNode, int]]:
    """
    Iterate over the visible forest in pre-order.

    Yields (node, depth) pairs, roots at depth 0, siblings in display order.
    Only nodes reachable from the roots are visited. Iteration uses an
    explicit stack, so deep hierarchies do not hit the recursion limit.

    Args:
        roots: Root nodes as returned by build_forest()
    """
    stack = [(root, 0) for root in reversed(roots)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        for child in reversed(node.children):
            stack.append((child, depth + 1))


def hidden_employees(
    employees: Sequence[EmployeeLike],
    roots: Sequence[TreeNode],
) -> list[str]:
    """
    List ids of employees that traversal from the roots never reaches.

    Args:
        employees: The records the forest was built from
        roots: Root nodes as returned by build_forest()

    Returns:
        Employee ids in input order, each listed once
    """
    visible = {node.employee.id for node, _ in iter_forest(roots)}
    hidden: list[str] = []
    for data in employees:
        emp_id = as_employee(data).id
        if emp_id not in visible:
            hidden.append(emp_id)
            visible.add(emp_id)
    return hidden


def forest_stats(roots: Sequence[TreeNode]) -> ForestStats:
    """Compute node count, depth and widest level of the visible forest."""
    per_level: dict[int, int] = {}
    count = 0
    for _, depth in iter_forest(roots):
        count += 1
        per_level[depth] = per_level.get(depth, 0) + 1
    if not per_level:
        return ForestStats(count=0, depth=0, breadth=0)
    return ForestStats(count=count, depth=max(per_level) + 1, breadth=max(per_level.values()))


__all__ = [
    "DEFAULT_LEVEL_ORDER",
    "HiddenEmployeeWarning",
    "ForestStats",
    "level_order_map",
    "build_forest",
    "iter_forest",
    "hidden_employees",
    "forest_stats",
]

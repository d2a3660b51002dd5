from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Iterable, List, Tuple

from bktreex import config as bk_config
from bktreex.core.metrics import MetricElement
from bktreex.core.tree import BKTree, BKTreeNode
from bktreex.diagnostics import log_operation
from bktreex.logging import get_logger
from bktreex.queries.results import SearchResult


LOGGER = get_logger("queries.radius")


def _validate_radius(radius: int) -> int:
    radius = int(radius)
    if radius < 0:
        raise ValueError("radius must be non-negative.")
    return radius


def expand_children(
    node: BKTreeNode, distance: int, radius: int, *, ordered: bool = False
) -> Iterable[BKTreeNode]:
    """Yield the children whose edge key lies in ``[distance - radius, distance + radius]``.

    By the triangle inequality no element under any other edge can be within
    ``radius`` of the query.
    """

    low, high = distance - radius, distance + radius
    keys: Iterable[int] = sorted(node.children) if ordered else node.children
    for key in keys:
        if low <= key <= high:
            yield node.children[key]


def radius_search(
    tree: BKTree,
    value: MetricElement,
    radius: int,
    *,
    ordered: bool | None = None,
) -> SearchResult:
    """Return every indexed element within ``radius`` of ``value``.

    Nodes are visited breadth first from the root. ``comparisons`` counts
    distance evaluations. With ``ordered`` (default: the runtime
    ``sorted_expansion`` flag) children are expanded in ascending key order,
    which makes the match order independent of insertion order.
    """

    radius = _validate_radius(radius)
    if ordered is None:
        ordered = bk_config.runtime_config().sorted_expansion
    with log_operation(LOGGER, "radius_search", level=logging.DEBUG) as op_log:
        return _radius_search_impl(op_log, tree, value, radius, ordered=ordered)


def _radius_search_impl(
    op_log: Any,
    tree: BKTree,
    value: MetricElement,
    radius: int,
    *,
    ordered: bool,
) -> SearchResult:
    if tree.root is None:
        result = SearchResult.build((), 0, tree_empty=True)
    else:
        matches, comparisons = _traverse(tree.root, value, radius, ordered=ordered)
        result = SearchResult.build(tuple(matches), comparisons, tree_empty=False)

    if op_log is not None:
        op_log.add_metadata(
            radius=radius,
            comparisons=result.comparisons,
            matches=len(result.matches),
            tree_size=tree.size,
            outcome=result.outcome.value,
        )
    return result


def _traverse(
    root: BKTreeNode, value: MetricElement, radius: int, *, ordered: bool
) -> Tuple[List[MetricElement], int]:
    comparisons = 0
    matches: List[MetricElement] = []
    candidates: Deque[BKTreeNode] = deque([root])
    while candidates:
        node = candidates.popleft()
        distance = node.element.distance_to(value)
        comparisons += 1
        if distance <= radius:
            matches.append(node.element)
        candidates.extend(expand_children(node, distance, radius, ordered=ordered))
    return matches, comparisons


__all__ = ["expand_children", "radius_search"]

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional

from bktreex.core.metrics import MetricElement

if TYPE_CHECKING:  # pragma: no cover - typing only
    from bktreex.algo.insert import InsertOutcome, InsertSummary
    from bktreex.queries.results import AsyncSearchResult, SearchResult


class BKTreeNode:
    """One indexed element and the subtrees hanging off it, keyed by distance."""

    __slots__ = ("element", "children")

    def __init__(self, element: MetricElement) -> None:
        self.element = element
        self.children: Dict[int, BKTreeNode] = {}

    def size(self) -> int:
        """Count the nodes in this subtree, this node included.

        Walks the subtree with an explicit stack; degenerate trees can be far
        deeper than the interpreter recursion limit.
        """

        count = 0
        stack: List[BKTreeNode] = [self]
        while stack:
            node = stack.pop()
            count += 1
            stack.extend(node.children.values())
        return count

    def is_leaf(self) -> bool:
        return not self.children

    def __repr__(self) -> str:
        return (
            f"BKTreeNode(element={self.element!r}, "
            f"children={sorted(self.children)})"
        )


class BKTree:
    """Burkhard-Keller tree over a caller-supplied integer metric.

    Insertion is single-writer: the children mappings are mutated without
    coordination, so concurrent ``add`` calls must be serialised by the
    caller. Searches only read the structure.
    """

    def __init__(self) -> None:
        self.root: Optional[BKTreeNode] = None
        self.size: int = 0

    @classmethod
    def from_elements(cls, values: Iterable[MetricElement]) -> "BKTree":
        tree = cls()
        tree.extend(values)
        return tree

    def is_empty(self) -> bool:
        return self.root is None

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[MetricElement]:
        """Yield indexed elements breadth first."""

        if self.root is None:
            return
        queue = deque([self.root])
        while queue:
            node = queue.popleft()
            yield node.element
            queue.extend(node.children.values())

    def add(self, value: MetricElement) -> "InsertOutcome":
        from bktreex.algo.insert import insert_element

        return insert_element(self, value)

    def extend(self, values: Iterable[MetricElement]) -> "InsertSummary":
        from bktreex.algo.insert import batch_insert

        return batch_insert(self, values)

    def search(
        self,
        value: MetricElement,
        radius: int,
        *,
        ordered: bool | None = None,
    ) -> "SearchResult":
        from bktreex.queries.radius import radius_search

        return radius_search(self, value, radius, ordered=ordered)

    def search_async(
        self,
        value: MetricElement,
        radius: int,
        *,
        workers: int | None = None,
        budget_ms: float | None = None,
    ) -> "AsyncSearchResult":
        """Experimental concurrent search; may return a partial result.

        See :func:`bktreex.queries.concurrent.radius_search_concurrent`.
        """

        from bktreex.queries.concurrent import radius_search_concurrent

        return radius_search_concurrent(
            self, value, radius, workers=workers, budget_ms=budget_ms
        )

    def calculate_size(self) -> int:
        """Recount nodes from the root and overwrite the stored size."""

        self.size = 0 if self.root is None else self.root.size()
        return self.size

    def export(self) -> Optional[List[Any]]:
        from bktreex.core.persistence import export_tree

        return export_tree(self)

    def to_json(self, **kwargs: Any) -> str:
        from bktreex.core.persistence import tree_to_json

        return tree_to_json(self, **kwargs)

    def __repr__(self) -> str:
        return f"BKTree(size={self.size}, empty={self.is_empty()})"


__all__ = ["BKTree", "BKTreeNode"]

from __future__ import annotations

from typing import Iterable, List

from bktreex.core.metrics import MetricElement
from bktreex.queries.results import SearchResult


class LinearScanIndex:
    """Brute-force reference index comparing the query against every element.

    Duplicates are folded the same way the tree folds them (an element at
    distance zero from one already stored is dropped), so both indexes hold
    the same set and their radius queries can be compared directly.
    """

    def __init__(self, elements: Iterable[MetricElement] = ()) -> None:
        # Taken as-is; from_elements() folds duplicates.
        self._elements: List[MetricElement] = list(elements)

    @classmethod
    def from_elements(cls, values: Iterable[MetricElement]) -> "LinearScanIndex":
        index = cls()
        for value in values:
            index.add(value)
        return index

    def add(self, value: MetricElement) -> bool:
        for element in self._elements:
            if element.distance_to(value) == 0:
                return False
        self._elements.append(value)
        return True

    def __len__(self) -> int:
        return len(self._elements)

    def search(self, value: MetricElement, radius: int) -> SearchResult:
        if radius < 0:
            raise ValueError("radius must be non-negative.")
        matches = tuple(
            element for element in self._elements if element.distance_to(value) <= radius
        )
        return SearchResult.build(
            matches, len(self._elements), tree_empty=not self._elements
        )


__all__ = ["LinearScanIndex"]

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple, Union

from bktreex.core.metrics import MetricElement


class SearchOutcome(Enum):
    EMPTY_TREE = "empty_tree"
    NO_MATCHES = "no_matches"
    MATCHED = "matched"


def _classify(tree_empty: bool, matches: Tuple[MetricElement, ...]) -> SearchOutcome:
    if tree_empty:
        return SearchOutcome.EMPTY_TREE
    return SearchOutcome.MATCHED if matches else SearchOutcome.NO_MATCHES


@dataclass(frozen=True)
class SearchResult:
    """Matches of a radius query plus the number of distance evaluations.

    Unpacks as ``matches, comparisons = result``.
    """

    matches: Tuple[MetricElement, ...]
    comparisons: int
    outcome: SearchOutcome

    @classmethod
    def build(
        cls, matches: Tuple[MetricElement, ...], comparisons: int, *, tree_empty: bool
    ) -> "SearchResult":
        return cls(
            matches=matches,
            comparisons=comparisons,
            outcome=_classify(tree_empty, matches),
        )

    def __iter__(self) -> Iterator[Union[Tuple[MetricElement, ...], int]]:
        yield self.matches
        yield self.comparisons

    def __len__(self) -> int:
        return len(self.matches)

    def descriptions(self) -> Tuple[str, ...]:
        return tuple(element.describe() for element in self.matches)


@dataclass(frozen=True)
class AsyncSearchResult:
    """Best-effort result of the concurrent search.

    ``complete`` is False when the time budget expired before every reachable
    node was processed; ``matches`` is then a subset of the exact answer.
    """

    matches: Tuple[MetricElement, ...]
    comparisons: int
    outcome: SearchOutcome
    complete: bool

    def __len__(self) -> int:
        return len(self.matches)

    def descriptions(self) -> Tuple[str, ...]:
        return tuple(element.describe() for element in self.matches)


__all__ = ["AsyncSearchResult", "SearchOutcome", "SearchResult"]

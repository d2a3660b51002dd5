"""bktreex: BK-tree for radius queries over integer metric spaces.

Quick Start
-----------
>>> from bktreex import BKTree, Word
>>>
>>> tree = BKTree.from_elements(Word(w) for w in ["book", "books", "cake", "boo"])
>>> matches, comparisons = tree.search(Word("bok"), 1)
>>> sorted(m.describe() for m in matches)
['boo', 'book']

Custom metrics
--------------
Any object with ``distance_to(other) -> int`` and ``describe() -> str`` can be
indexed; the distance must be a true metric.

Classes
-------
BKTree : The index (add, search, search_async, calculate_size, to_json).
Word, HammingCode, Integer : Reference element types.
LinearScanIndex : Brute-force baseline with the same query interface.
"""

from importlib.metadata import version as _pkg_version

try:
    __version__ = _pkg_version("bktreex")
except Exception:  # pragma: no cover - best effort during local development
    __version__ = "0.1.0"

from .algo import InsertOutcome, InsertSummary, batch_insert, insert_element
from .baseline import LinearScanIndex
from .core import (
    BKTree,
    BKTreeNode,
    ElementMetric,
    HammingCode,
    Integer,
    MetricElement,
    MetricRegistry,
    Word,
    available_metrics,
    export_tree,
    get_metric,
    register_metric,
    tree_to_json,
    write_export,
)
from .queries import (
    AsyncSearchResult,
    SearchOutcome,
    SearchResult,
    radius_search,
    radius_search_concurrent,
)

__all__ = [
    "__version__",
    "AsyncSearchResult",
    "BKTree",
    "BKTreeNode",
    "ElementMetric",
    "HammingCode",
    "InsertOutcome",
    "InsertSummary",
    "Integer",
    "LinearScanIndex",
    "MetricElement",
    "MetricRegistry",
    "SearchOutcome",
    "SearchResult",
    "Word",
    "available_metrics",
    "batch_insert",
    "export_tree",
    "get_metric",
    "insert_element",
    "radius_search",
    "radius_search_concurrent",
    "register_metric",
    "tree_to_json",
    "write_export",
]

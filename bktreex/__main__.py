#!/usr/bin/env python
"""Quick-start guide for bktreex library usage.

Run with: python -m bktreex
"""

from __future__ import annotations

QUICKSTART = """\
================================================================================
                                 BKTREEX
          BK-tree radius queries for fuzzy matching in metric spaces
================================================================================

INSTALLATION
------------
    pip install bktreex

BASIC USAGE (edit distance)
---------------------------
    from bktreex import BKTree, Word

    tree = BKTree()
    for text in ["book", "books", "cake", "boo", "cape", "cart"]:
        tree.add(Word(text))

    # All words within edit distance 1 of "bok"
    matches, comparisons = tree.search(Word("bok"), 1)

    # Explicit outcomes instead of ambiguous empty lists
    result = tree.search(Word("zzzz"), 1)
    result.outcome            # SearchOutcome.NO_MATCHES
    BKTree().search(Word("a"), 1).outcome   # SearchOutcome.EMPTY_TREE

CUSTOM METRICS
--------------
Any object exposing two methods can be indexed:

    from dataclasses import dataclass

    @dataclass(frozen=True)
    class Fingerprint:
        value: int

        def distance_to(self, other: "Fingerprint") -> int:
            return bin(self.value ^ other.value).count("1")

        def describe(self) -> str:
            return f"{self.value:016x}"

The distance must be a true metric (symmetric, zero only for identical
values, triangle inequality); it is never validated.

EXPERIMENTAL CONCURRENT SEARCH
------------------------------
    result = tree.search_async(Word("bok"), 1, workers=4, budget_ms=100)
    result.complete           # False when the time budget cut the walk short

EXPORT
------
    tree.to_json()            # ["book", {"1": ["books", {}], ...}]

CONFIGURATION
-------------
    BKTREEX_LOG_LEVEL            logging level (INFO)
    BKTREEX_ENABLE_DIAGNOSTICS   cpu/rss figures in operation logs (1)
    BKTREEX_METRIC               default metric for the CLI (levenshtein)
    BKTREEX_SORTED_EXPANSION     deterministic child expansion (0)
    BKTREEX_ASYNC_WORKERS        concurrent search pool size (cpu count)
    BKTREEX_ASYNC_BUDGET_MS      concurrent search time budget (50)

COMMAND LINE
------------
    python -m cli.bktree build words.txt --output tree.json
    python -m cli.bktree search words.txt bok cak --radius 1
    python -m cli.bktree benchmark --tree-size 4096 --queries 256 --radius 2

================================================================================
"""


def main() -> None:
    """Print quick-start guide."""
    print(QUICKSTART)


if __name__ == "__main__":
    main()

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from bktreex.core.metrics import MetricElement
from bktreex.core.tree import BKTree, BKTreeNode
from bktreex.diagnostics import log_operation
from bktreex.logging import get_logger


LOGGER = get_logger("algo.insert")


class InsertOutcome(Enum):
    ROOT = "root"
    INSERTED = "inserted"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class InsertSummary:
    roots: int = 0
    inserted: int = 0
    duplicates: int = 0

    @property
    def total(self) -> int:
        return self.roots + self.inserted + self.duplicates

    @property
    def added(self) -> int:
        return self.roots + self.inserted


def insert_element(tree: BKTree, value: MetricElement) -> InsertOutcome:
    """Place ``value`` by descending the tree with distances as routing keys.

    A zero distance to any node on the descent path aborts the whole
    insertion: ``value`` is treated as a duplicate of that node's element and
    no node is created. Siblings of the matching path are never consulted.
    """

    if tree.root is None:
        tree.root = BKTreeNode(value)
        tree.size += 1
        return InsertOutcome.ROOT

    current = tree.root
    while True:
        dist = current.element.distance_to(value)
        if dist < 0:
            raise ValueError(
                f"Metric returned negative distance {dist} between "
                f"{current.element.describe()!r} and {value.describe()!r}."
            )
        if dist == 0:
            return InsertOutcome.DUPLICATE
        target = current.children.get(dist)
        if target is None:
            current.children[dist] = BKTreeNode(value)
            tree.size += 1
            return InsertOutcome.INSERTED
        current = target


def batch_insert(tree: BKTree, values: Iterable[MetricElement]) -> InsertSummary:
    with log_operation(LOGGER, "batch_insert") as op_log:
        return _batch_insert_impl(op_log, tree, values)


def _batch_insert_impl(
    op_log: Any, tree: BKTree, values: Iterable[MetricElement]
) -> InsertSummary:
    counts = {outcome: 0 for outcome in InsertOutcome}
    for value in values:
        counts[insert_element(tree, value)] += 1

    summary = InsertSummary(
        roots=counts[InsertOutcome.ROOT],
        inserted=counts[InsertOutcome.INSERTED],
        duplicates=counts[InsertOutcome.DUPLICATE],
    )
    if op_log is not None:
        op_log.add_metadata(
            values=summary.total,
            inserted=summary.added,
            duplicates=summary.duplicates,
            size=tree.size,
        )
    return summary


__all__ = ["InsertOutcome", "InsertSummary", "batch_insert", "insert_element"]

"""Experimental concurrent radius search.

Each node visit runs as its own unit of work on a bounded thread pool and
children discovered by a unit are submitted back to the same pool. Collection
stops when every reachable node has been processed or when the wall-clock
budget runs out, whichever comes first, so a result may be partial. For
pure-Python metrics the GIL serialises the distance evaluations and this is
not faster than :func:`bktreex.queries.radius.radius_search`; it exists for
experimentation with metrics that release the GIL or block on I/O.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from threading import Event, Lock
from typing import Any, List, Set, Tuple

from bktreex import config as bk_config
from bktreex.core.metrics import MetricElement
from bktreex.core.tree import BKTree, BKTreeNode
from bktreex.diagnostics import log_operation
from bktreex.logging import get_logger
from bktreex.queries.radius import _validate_radius, expand_children
from bktreex.queries.results import AsyncSearchResult, SearchOutcome


LOGGER = get_logger("queries.concurrent")


class _MatchAccumulator:
    """Lock-protected sink for per-unit results.

    Once sealed, late units are rejected so nothing changes after the
    collector has taken its snapshot.
    """

    __slots__ = ("_lock", "_matches", "_comparisons", "_sealed")

    def __init__(self) -> None:
        self._lock = Lock()
        self._matches: List[MetricElement] = []
        self._comparisons = 0
        self._sealed = False

    def record(self, element: MetricElement, matched: bool) -> bool:
        with self._lock:
            if self._sealed:
                return False
            self._comparisons += 1
            if matched:
                self._matches.append(element)
            return True

    def seal(self) -> Tuple[Tuple[MetricElement, ...], int]:
        with self._lock:
            self._sealed = True
            return tuple(self._matches), self._comparisons


def _visit(
    node: BKTreeNode,
    value: MetricElement,
    radius: int,
    accumulator: _MatchAccumulator,
    cancelled: Event,
) -> Tuple[BKTreeNode, ...]:
    if cancelled.is_set():
        return ()
    distance = node.element.distance_to(value)
    if not accumulator.record(node.element, distance <= radius):
        return ()
    if cancelled.is_set():
        return ()
    return tuple(expand_children(node, distance, radius))


def radius_search_concurrent(
    tree: BKTree,
    value: MetricElement,
    radius: int,
    *,
    workers: int | None = None,
    budget_ms: float | None = None,
) -> AsyncSearchResult:
    """Best-effort concurrent radius search bounded by ``budget_ms``.

    ``workers`` caps the number of units running at once (default: the
    runtime ``async_workers``). When the budget expires, queued units are
    cancelled, running units are signalled through an event and whatever
    they produce afterwards is dropped. ``AsyncSearchResult.complete`` tells
    the caller whether the traversal finished.
    """

    radius = _validate_radius(radius)
    runtime = bk_config.runtime_config()
    workers = runtime.async_workers if workers is None else int(workers)
    if workers <= 0:
        raise ValueError("workers must be positive.")
    budget_ms = runtime.async_budget_ms if budget_ms is None else float(budget_ms)
    if budget_ms <= 0:
        raise ValueError("budget_ms must be positive.")

    with log_operation(LOGGER, "radius_search_concurrent", level=logging.DEBUG) as op_log:
        return _concurrent_impl(
            op_log, tree, value, radius, workers=workers, budget_seconds=budget_ms / 1e3
        )


def _concurrent_impl(
    op_log: Any,
    tree: BKTree,
    value: MetricElement,
    radius: int,
    *,
    workers: int,
    budget_seconds: float,
) -> AsyncSearchResult:
    if tree.root is None:
        return AsyncSearchResult(
            matches=(), comparisons=0, outcome=SearchOutcome.EMPTY_TREE, complete=True
        )

    accumulator = _MatchAccumulator()
    cancelled = Event()
    deadline = time.monotonic() + budget_seconds
    complete = False
    submitted = 0
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bktreex-search")
    try:
        pending: Set[Future] = {
            executor.submit(_visit, tree.root, value, radius, accumulator, cancelled)
        }
        submitted = 1
        while pending:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            done, pending = wait(pending, timeout=remaining, return_when=FIRST_COMPLETED)
            for future in done:
                for child in future.result():
                    pending.add(
                        executor.submit(_visit, child, value, radius, accumulator, cancelled)
                    )
                    submitted += 1
        else:
            complete = True
    finally:
        cancelled.set()
        executor.shutdown(wait=False, cancel_futures=True)
        matches, comparisons = accumulator.seal()

    outcome = SearchOutcome.MATCHED if matches else SearchOutcome.NO_MATCHES
    if op_log is not None:
        op_log.add_metadata(
            radius=radius,
            workers=workers,
            budget_ms=budget_seconds * 1e3,
            submitted=submitted,
            comparisons=comparisons,
            matches=len(matches),
            complete=complete,
        )
    return AsyncSearchResult(
        matches=matches,
        comparisons=comparisons,
        outcome=outcome,
        complete=complete,
    )


__all__ = ["radius_search_concurrent"]

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from numpy.random import Generator, default_rng

from bktreex import BKTree, InsertSummary, LinearScanIndex, MetricElement, Word
from bktreex.datasets import perturb_words, random_elements
from bktreex.telemetry import BenchmarkLogWriter


@dataclass(frozen=True)
class SearchBenchmarkResult:
    queries: int
    radius: int
    tree_size: int
    build_seconds: float
    tree_seconds: float
    tree_comparisons: int
    baseline_seconds: float
    baseline_comparisons: int
    matches: int
    mismatched_queries: int
    concurrent_seconds: float | None = None
    concurrent_incomplete: int | None = None

    @property
    def latency_ms(self) -> float:
        return (self.tree_seconds / self.queries) * 1e3 if self.queries else 0.0

    @property
    def baseline_latency_ms(self) -> float:
        return (self.baseline_seconds / self.queries) * 1e3 if self.queries else 0.0

    @property
    def comparisons_per_query(self) -> float:
        return self.tree_comparisons / self.queries if self.queries else 0.0

    @property
    def pruned_ratio(self) -> float:
        if not self.baseline_comparisons:
            return 0.0
        return 1.0 - self.tree_comparisons / self.baseline_comparisons


def _generate_queries(
    rng: Generator,
    metric: str,
    elements: Sequence[MetricElement],
    count: int,
) -> List[MetricElement]:
    if metric == "levenshtein" and elements:
        picks = rng.integers(0, len(elements), size=count)
        sample = [elements[int(idx)] for idx in picks]
        words = [element for element in sample if isinstance(element, Word)]
        return list(perturb_words(rng, words))
    return random_elements(rng, metric, count)


def build_tree(
    *,
    metric: str,
    tree_size: int,
    seed: int,
    log_writer: BenchmarkLogWriter | None = None,
) -> Tuple[BKTree, List[MetricElement], InsertSummary, float]:
    elements = random_elements(default_rng(seed), metric, tree_size)
    tree = BKTree()
    start = time.perf_counter()
    summary = tree.extend(elements)
    build_seconds = time.perf_counter() - start
    if log_writer is not None:
        log_writer.record_build(
            metric=metric,
            summary=summary,
            tree_size=tree.size,
            build_seconds=build_seconds,
        )
    return tree, elements, summary, build_seconds


def benchmark_radius_search(
    *,
    metric: str,
    tree_size: int,
    query_count: int,
    radius: int,
    batch_size: int,
    seed: int,
    concurrent: bool = False,
    workers: int | None = None,
    budget_ms: float | None = None,
    log_writer: BenchmarkLogWriter | None = None,
) -> Tuple[BKTree, SearchBenchmarkResult]:
    if batch_size <= 0:
        raise ValueError("batch_size must be positive.")
    tree, elements, _, build_seconds = build_tree(
        metric=metric, tree_size=tree_size, seed=seed, log_writer=log_writer
    )
    baseline = LinearScanIndex(tree)
    queries = _generate_queries(default_rng(seed + 1), metric, elements, query_count)

    totals = {
        "tree_seconds": 0.0,
        "tree_comparisons": 0,
        "baseline_seconds": 0.0,
        "baseline_comparisons": 0,
        "matches": 0,
        "mismatched": 0,
        "concurrent_seconds": 0.0,
        "concurrent_incomplete": 0,
    }
    for batch_index, offset in enumerate(range(0, len(queries), batch_size)):
        batch = queries[offset : offset + batch_size]
        batch_tree_seconds = 0.0
        batch_tree_comparisons = 0
        batch_baseline_seconds = 0.0
        batch_baseline_comparisons = 0
        batch_matches = 0
        batch_concurrent_seconds = 0.0
        batch_incomplete = 0
        for query in batch:
            start = time.perf_counter()
            result = tree.search(query, radius)
            batch_tree_seconds += time.perf_counter() - start

            start = time.perf_counter()
            reference = baseline.search(query, radius)
            batch_baseline_seconds += time.perf_counter() - start

            batch_tree_comparisons += result.comparisons
            batch_baseline_comparisons += reference.comparisons
            batch_matches += len(result.matches)
            if sorted(result.descriptions()) != sorted(reference.descriptions()):
                totals["mismatched"] += 1

            if concurrent:
                start = time.perf_counter()
                async_result = tree.search_async(
                    query, radius, workers=workers, budget_ms=budget_ms
                )
                batch_concurrent_seconds += time.perf_counter() - start
                if not async_result.complete:
                    batch_incomplete += 1

        totals["tree_seconds"] += batch_tree_seconds
        totals["tree_comparisons"] += batch_tree_comparisons
        totals["baseline_seconds"] += batch_baseline_seconds
        totals["baseline_comparisons"] += batch_baseline_comparisons
        totals["matches"] += batch_matches
        totals["concurrent_seconds"] += batch_concurrent_seconds
        totals["concurrent_incomplete"] += batch_incomplete

        if log_writer is not None:
            extra = None
            if concurrent:
                extra = {
                    "concurrent_ms": batch_concurrent_seconds * 1e3,
                    "concurrent_incomplete": batch_incomplete,
                }
            log_writer.record_batch(
                batch_index=batch_index,
                batch_size=len(batch),
                radius=radius,
                tree_size=tree.size,
                tree_seconds=batch_tree_seconds,
                tree_comparisons=batch_tree_comparisons,
                baseline_seconds=batch_baseline_seconds,
                baseline_comparisons=batch_baseline_comparisons,
                matches=batch_matches,
                extra=extra,
            )

    return tree, SearchBenchmarkResult(
        queries=len(queries),
        radius=radius,
        tree_size=tree.size,
        build_seconds=build_seconds,
        tree_seconds=float(totals["tree_seconds"]),
        tree_comparisons=int(totals["tree_comparisons"]),
        baseline_seconds=float(totals["baseline_seconds"]),
        baseline_comparisons=int(totals["baseline_comparisons"]),
        matches=int(totals["matches"]),
        mismatched_queries=int(totals["mismatched"]),
        concurrent_seconds=float(totals["concurrent_seconds"]) if concurrent else None,
        concurrent_incomplete=int(totals["concurrent_incomplete"]) if concurrent else None,
    )


__all__ = ["SearchBenchmarkResult", "benchmark_radius_search", "build_tree"]

from __future__ import annotations

from typing import Dict

SEARCH_BENCHMARK_SCHEMA_ID = "bktreex.search_benchmark.v1"
SEARCH_BENCHMARK_SCHEMA: Dict[str, object] = {
    "id": SEARCH_BENCHMARK_SCHEMA_ID,
    "description": "Per-batch radius query telemetry comparing the BK-tree to a linear scan.",
    "required": (
        "schema_id",
        "run_id",
        "timestamp",
        "batch_index",
        "batch_size",
        "radius",
        "tree_size",
        "tree_ms",
        "tree_comparisons",
        "baseline_ms",
        "baseline_comparisons",
        "matches",
    ),
}

BUILD_SUMMARY_SCHEMA_ID = "bktreex.build_summary.v1"
BUILD_SUMMARY_SCHEMA: Dict[str, object] = {
    "id": BUILD_SUMMARY_SCHEMA_ID,
    "description": "Tree construction summary emitted once per benchmark run.",
    "required": (
        "schema_id",
        "run_id",
        "timestamp",
        "metric",
        "values",
        "inserted",
        "duplicates",
        "tree_size",
        "build_ms",
    ),
}

__all__ = [
    "BUILD_SUMMARY_SCHEMA",
    "BUILD_SUMMARY_SCHEMA_ID",
    "SEARCH_BENCHMARK_SCHEMA",
    "SEARCH_BENCHMARK_SCHEMA_ID",
]

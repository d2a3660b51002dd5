from __future__ import annotations

from .app import app, main
from .benchmark import SearchBenchmarkResult, benchmark_radius_search, build_tree

__all__ = [
    "SearchBenchmarkResult",
    "app",
    "benchmark_radius_search",
    "build_tree",
    "main",
]

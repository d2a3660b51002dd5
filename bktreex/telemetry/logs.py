from __future__ import annotations

import json
import os
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping

import psutil

from bktreex.telemetry.schemas import (
    BUILD_SUMMARY_SCHEMA_ID,
    SEARCH_BENCHMARK_SCHEMA_ID,
)

_DEFAULT_ARTIFACT_ROOT = "artifacts"


def artifact_root() -> Path:
    return Path(os.getenv("BKTREEX_ARTIFACT_ROOT", _DEFAULT_ARTIFACT_ROOT)).expanduser()


def generate_run_id(prefix: str = "bktreex") -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    return f"{prefix}-{stamp}-{uuid.uuid4().hex[:8]}"


def resolve_artifact_path(path: str | Path, *, category: str = "benchmarks") -> Path:
    """Relative paths land under ``$BKTREEX_ARTIFACT_ROOT/<category>``."""

    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = artifact_root() / category / candidate
    candidate.parent.mkdir(parents=True, exist_ok=True)
    return candidate


def timestamped_artifact(
    *,
    category: str = "benchmarks",
    prefix: str = "search",
    suffix: str = ".jsonl",
) -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return resolve_artifact_path(f"{prefix}_{stamp}{suffix}", category=category)


def _read_rss_bytes() -> int | None:
    try:
        return int(psutil.Process().memory_info().rss)
    except psutil.Error:
        return None


def _ms(value: float) -> float:
    return float(value) * 1e3


class BenchmarkLogWriter:
    """Append-only JSONL sink for benchmark telemetry."""

    def __init__(self, path: str | Path, *, run_id: str | None = None):
        self._path = Path(path).expanduser()
        if self._path.parent:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self._path.open("a", encoding="utf-8")
        self._previous_rss = _read_rss_bytes()
        self.run_id = run_id or generate_run_id()

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        if self._handle and not self._handle.closed:
            self._handle.close()

    def _write(self, record: Mapping[str, Any]) -> None:
        self._handle.write(json.dumps(record, sort_keys=True))
        self._handle.write("\n")
        self._handle.flush()

    def record_build(
        self,
        *,
        metric: str,
        summary: Any,
        tree_size: int,
        build_seconds: float,
    ) -> None:
        self._write(
            {
                "schema_id": BUILD_SUMMARY_SCHEMA_ID,
                "run_id": self.run_id,
                "timestamp": time.time(),
                "metric": metric,
                "values": int(summary.total),
                "inserted": int(summary.added),
                "duplicates": int(summary.duplicates),
                "tree_size": int(tree_size),
                "build_ms": _ms(build_seconds),
            }
        )

    def record_batch(
        self,
        *,
        batch_index: int,
        batch_size: int,
        radius: int,
        tree_size: int,
        tree_seconds: float,
        tree_comparisons: int,
        baseline_seconds: float,
        baseline_comparisons: int,
        matches: int,
        extra: Dict[str, Any] | None = None,
    ) -> None:
        rss_now = _read_rss_bytes()
        rss_delta = None
        if rss_now is not None and self._previous_rss is not None:
            rss_delta = rss_now - self._previous_rss
        self._previous_rss = rss_now

        record: Dict[str, Any] = {
            "schema_id": SEARCH_BENCHMARK_SCHEMA_ID,
            "run_id": self.run_id,
            "timestamp": time.time(),
            "batch_index": int(batch_index),
            "batch_size": int(batch_size),
            "radius": int(radius),
            "tree_size": int(tree_size),
            "tree_ms": _ms(tree_seconds),
            "tree_comparisons": int(tree_comparisons),
            "baseline_ms": _ms(baseline_seconds),
            "baseline_comparisons": int(baseline_comparisons),
            "matches": int(matches),
        }
        if baseline_comparisons:
            record["pruned_ratio"] = 1.0 - tree_comparisons / baseline_comparisons
        if extra:
            for key, value in extra.items():
                if value is not None:
                    record[key] = value
        if rss_now is not None:
            record["rss_bytes"] = int(rss_now)
        if rss_delta is not None:
            record["rss_delta_bytes"] = int(rss_delta)
        self._write(record)

    def __enter__(self) -> "BenchmarkLogWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "BenchmarkLogWriter",
    "artifact_root",
    "generate_run_id",
    "resolve_artifact_path",
    "timestamped_artifact",
]

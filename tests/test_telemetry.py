from __future__ import annotations

import json
from pathlib import Path

import pytest

from bktreex import InsertSummary
from bktreex.telemetry import (
    BUILD_SUMMARY_SCHEMA,
    SEARCH_BENCHMARK_SCHEMA,
    BenchmarkLogWriter,
    generate_run_id,
    resolve_artifact_path,
    timestamped_artifact,
)


def _read_records(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_generate_run_id_prefix():
    first = generate_run_id("demo")
    second = generate_run_id("demo")

    assert first.startswith("demo-")
    assert first != second


def test_relative_paths_resolve_under_artifact_root(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.setenv("BKTREEX_ARTIFACT_ROOT", str(tmp_path / "artifacts"))

    resolved = resolve_artifact_path("run.jsonl")
    stamped = timestamped_artifact(category="searches", prefix="levenshtein")

    assert resolved == tmp_path / "artifacts" / "benchmarks" / "run.jsonl"
    assert resolved.parent.is_dir()
    assert stamped.parent == tmp_path / "artifacts" / "searches"
    assert stamped.name.startswith("levenshtein_")
    assert stamped.suffix == ".jsonl"


def test_absolute_paths_are_kept(tmp_path: Path):
    target = tmp_path / "elsewhere" / "log.jsonl"

    assert resolve_artifact_path(target) == target
    assert target.parent.is_dir()


def test_writer_records_follow_schemas(tmp_path: Path):
    path = tmp_path / "telemetry.jsonl"

    with BenchmarkLogWriter(path, run_id="run-1") as writer:
        writer.record_build(
            metric="levenshtein",
            summary=InsertSummary(roots=1, inserted=8, duplicates=2),
            tree_size=9,
            build_seconds=0.002,
        )
        writer.record_batch(
            batch_index=0,
            batch_size=4,
            radius=2,
            tree_size=9,
            tree_seconds=0.001,
            tree_comparisons=9,
            baseline_seconds=0.003,
            baseline_comparisons=36,
            matches=5,
            extra={"concurrent_ms": 1.5, "ignored": None},
        )

    build, batch = _read_records(path)
    assert set(BUILD_SUMMARY_SCHEMA["required"]) <= set(build)
    assert set(SEARCH_BENCHMARK_SCHEMA["required"]) <= set(batch)
    assert build["values"] == 11
    assert build["inserted"] == 9
    assert build["build_ms"] == pytest.approx(2.0)
    assert batch["run_id"] == "run-1"
    assert batch["pruned_ratio"] == pytest.approx(0.75)
    assert batch["concurrent_ms"] == pytest.approx(1.5)
    assert "ignored" not in batch
    assert "rss_bytes" in batch


def test_writer_appends_and_skips_ratio_without_baseline(tmp_path: Path):
    path = tmp_path / "telemetry.jsonl"
    for _ in range(2):
        with BenchmarkLogWriter(path) as writer:
            writer.record_batch(
                batch_index=0,
                batch_size=1,
                radius=0,
                tree_size=0,
                tree_seconds=0.0,
                tree_comparisons=0,
                baseline_seconds=0.0,
                baseline_comparisons=0,
                matches=0,
            )

    records = _read_records(path)
    assert len(records) == 2
    assert all("pruned_ratio" not in record for record in records)
    assert records[0]["run_id"].startswith("bktreex-")

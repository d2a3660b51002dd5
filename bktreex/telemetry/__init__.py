from .logs import (
    BenchmarkLogWriter,
    artifact_root,
    generate_run_id,
    resolve_artifact_path,
    timestamped_artifact,
)
from .schemas import (
    BUILD_SUMMARY_SCHEMA,
    BUILD_SUMMARY_SCHEMA_ID,
    SEARCH_BENCHMARK_SCHEMA,
    SEARCH_BENCHMARK_SCHEMA_ID,
)

__all__ = [
    "BUILD_SUMMARY_SCHEMA",
    "BUILD_SUMMARY_SCHEMA_ID",
    "BenchmarkLogWriter",
    "SEARCH_BENCHMARK_SCHEMA",
    "SEARCH_BENCHMARK_SCHEMA_ID",
    "artifact_root",
    "generate_run_id",
    "resolve_artifact_path",
    "timestamped_artifact",
]

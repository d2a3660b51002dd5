from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from typing_extensions import Annotated

from bktreex import BKTree, ElementMetric, MetricElement, available_metrics, get_metric
from bktreex import config as bk_config
from bktreex.core.persistence import write_export
from bktreex.queries import SearchOutcome
from bktreex.telemetry import BenchmarkLogWriter, generate_run_id, timestamped_artifact

from .benchmark import benchmark_radius_search


app = typer.Typer(
    add_completion=False,
    pretty_exceptions_enable=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Build, query and benchmark BK-trees from the command line.",
)

_INPUT_PANEL = "Input"
_QUERY_PANEL = "Query controls"
_TELEMETRY_PANEL = "Telemetry"


def _resolve_metric(name: str | None) -> ElementMetric:
    try:
        return get_metric(name)
    except KeyError as exc:
        raise typer.BadParameter(
            f"unknown metric {name!r}; expected one of {', '.join(available_metrics())}",
            param_hint="--metric",
        ) from exc


def _read_elements(path: Path, metric: ElementMetric) -> List[MetricElement]:
    elements: List[MetricElement] = []
    with path.open("r", encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, start=1):
            text = line.rstrip("\r\n")
            if not text.strip():
                continue
            try:
                elements.append(metric.parse(text))
            except ValueError as exc:
                raise typer.BadParameter(
                    f"{path}:{lineno}: cannot parse {text!r} as {metric.name}: {exc}"
                ) from exc
    return elements


def _load_tree(path: Path, metric: ElementMetric) -> BKTree:
    tree = BKTree()
    summary = tree.extend(_read_elements(path, metric))
    typer.echo(
        f"bktree | metric={metric.name} size={tree.size} "
        f"values={summary.total} duplicates={summary.duplicates}"
    )
    return tree


MetricOption = Annotated[
    Optional[str],
    typer.Option(
        "--metric",
        "-m",
        help="Registered metric name (default: BKTREEX_METRIC).",
        rich_help_panel=_INPUT_PANEL,
    ),
]

InputArgument = Annotated[
    Path,
    typer.Argument(
        exists=True,
        dir_okay=False,
        readable=True,
        help="File with one element per line.",
    ),
]


@app.command()
def build(
    input_path: InputArgument,
    metric: MetricOption = None,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write the JSON export of the tree to this path.",
            rich_help_panel=_INPUT_PANEL,
        ),
    ] = None,
    indent: Annotated[
        Optional[int],
        typer.Option("--indent", help="Indentation for the JSON export."),
    ] = None,
) -> None:
    """Index INPUT_PATH and optionally export the tree."""

    element_metric = _resolve_metric(metric)
    tree = _load_tree(input_path, element_metric)
    if output is not None:
        target = write_export(tree, output, indent=indent)
        typer.echo(f"export written to {target}")


@app.command()
def search(
    input_path: InputArgument,
    queries: Annotated[List[str], typer.Argument(help="Query elements.")],
    metric: MetricOption = None,
    radius: Annotated[
        int,
        typer.Option("--radius", "-r", min=0, help="Search radius.", rich_help_panel=_QUERY_PANEL),
    ] = 1,
    ordered: Annotated[
        Optional[bool],
        typer.Option(
            "--ordered/--unordered",
            help="Expand children by ascending distance (default: BKTREEX_SORTED_EXPANSION).",
            rich_help_panel=_QUERY_PANEL,
        ),
    ] = None,
    concurrent: Annotated[
        bool,
        typer.Option(
            "--concurrent",
            help="Use the experimental concurrent search (results may be partial).",
            rich_help_panel=_QUERY_PANEL,
        ),
    ] = False,
    workers: Annotated[
        Optional[int],
        typer.Option("--workers", min=1, help="Concurrent search pool size.", rich_help_panel=_QUERY_PANEL),
    ] = None,
    budget_ms: Annotated[
        Optional[float],
        typer.Option("--budget-ms", help="Concurrent search time budget.", rich_help_panel=_QUERY_PANEL),
    ] = None,
) -> None:
    """Print every element of INPUT_PATH within RADIUS of each query."""

    element_metric = _resolve_metric(metric)
    tree = _load_tree(input_path, element_metric)
    for text in queries:
        try:
            query = element_metric.parse(text)
        except ValueError as exc:
            raise typer.BadParameter(f"cannot parse query {text!r}: {exc}") from exc
        if concurrent:
            async_result = tree.search_async(query, radius, workers=workers, budget_ms=budget_ms)
            suffix = "" if async_result.complete else " (partial)"
            typer.echo(
                f"{text}: {', '.join(async_result.descriptions()) or '-'} "
                f"[comparisons={async_result.comparisons}{suffix}]"
            )
            continue
        result = tree.search(query, radius, ordered=ordered)
        if result.outcome is SearchOutcome.EMPTY_TREE:
            typer.echo(f"{text}: tree is empty")
            continue
        typer.echo(
            f"{text}: {', '.join(result.descriptions()) or '-'} "
            f"[comparisons={result.comparisons}]"
        )


@app.command()
def benchmark(
    metric: MetricOption = None,
    tree_size: Annotated[
        int,
        typer.Option("--tree-size", min=1, help="Number of random elements inserted.", rich_help_panel=_INPUT_PANEL),
    ] = 4_096,
    queries: Annotated[
        int,
        typer.Option("--queries", min=1, help="Number of queries per run.", rich_help_panel=_QUERY_PANEL),
    ] = 256,
    radius: Annotated[
        int,
        typer.Option("--radius", "-r", min=0, help="Search radius.", rich_help_panel=_QUERY_PANEL),
    ] = 2,
    batch_size: Annotated[
        int,
        typer.Option("--batch-size", min=1, help="Queries per telemetry record.", rich_help_panel=_QUERY_PANEL),
    ] = 64,
    seed: Annotated[
        int,
        typer.Option("--seed", help="Base random seed for elements and queries.", rich_help_panel=_INPUT_PANEL),
    ] = 0,
    concurrent: Annotated[
        bool,
        typer.Option("--concurrent", help="Also time the experimental concurrent search.", rich_help_panel=_QUERY_PANEL),
    ] = False,
    workers: Annotated[
        Optional[int],
        typer.Option("--workers", min=1, help="Concurrent search pool size.", rich_help_panel=_QUERY_PANEL),
    ] = None,
    budget_ms: Annotated[
        Optional[float],
        typer.Option("--budget-ms", help="Concurrent search time budget.", rich_help_panel=_QUERY_PANEL),
    ] = None,
    run_id: Annotated[
        Optional[str],
        typer.Option("--run-id", help="Identifier propagated to telemetry records.", rich_help_panel=_TELEMETRY_PANEL),
    ] = None,
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="JSONL telemetry path (default: timestamped artifact).", rich_help_panel=_TELEMETRY_PANEL),
    ] = None,
    no_log_file: Annotated[
        bool,
        typer.Option("--no-log-file", help="Disable JSONL telemetry.", rich_help_panel=_TELEMETRY_PANEL),
    ] = False,
) -> None:
    """Compare BK-tree radius queries against a linear scan on random data."""

    element_metric = _resolve_metric(metric)
    run_id = run_id or generate_run_id()
    log_writer: BenchmarkLogWriter | None = None
    if not no_log_file:
        log_path = log_file or timestamped_artifact(prefix=f"search_{element_metric.name}")
        log_writer = BenchmarkLogWriter(log_path, run_id=run_id)
    try:
        _, result = benchmark_radius_search(
            metric=element_metric.name,
            tree_size=tree_size,
            query_count=queries,
            radius=radius,
            batch_size=batch_size,
            seed=seed,
            concurrent=concurrent,
            workers=workers,
            budget_ms=budget_ms,
            log_writer=log_writer,
        )
    finally:
        if log_writer is not None:
            log_writer.close()

    typer.echo(
        f"bktree | metric={element_metric.name} size={result.tree_size} "
        f"build={result.build_seconds:.4f}s queries={result.queries} radius={result.radius} "
        f"latency={result.latency_ms:.4f}ms comparisons/query={result.comparisons_per_query:.1f} "
        f"pruned={result.pruned_ratio:.1%}"
    )
    typer.echo(
        f"baseline[linear] | latency={result.baseline_latency_ms:.4f}ms "
        f"matches={result.matches} mismatched={result.mismatched_queries}"
    )
    if result.concurrent_seconds is not None:
        latency = (result.concurrent_seconds / result.queries) * 1e3 if result.queries else 0.0
        typer.echo(
            f"concurrent | latency={latency:.4f}ms incomplete={result.concurrent_incomplete}"
        )
    if log_writer is not None:
        typer.echo(f"telemetry written to {log_writer.path} (run_id={run_id})")
    if result.mismatched_queries:
        raise typer.Exit(code=1)


@app.command()
def runtime() -> None:
    """Print the active runtime configuration."""

    for key, value in bk_config.describe_runtime().items():
        typer.echo(f"{key}={value}")
    typer.echo(f"metrics={','.join(available_metrics())}")


def main() -> None:
    app()


__all__ = ["app", "main"]

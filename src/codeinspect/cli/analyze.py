"""cinspect analyze command - run the analysis engine over a snapshot."""

import json
from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.table import Table

from codeinspect.analysis import (
    AnalysisContext,
    AnalysisResult,
    Inventory,
    load_snapshot,
    run_analysis,
)
from codeinspect.config import load_config
from codeinspect.core.errors import CodeInspectError, InternalError
from codeinspect.core.formatting import compress_path, format_duration, format_percentage, pluralize
from codeinspect.core.logging import (
    clear_run_id,
    configure_logging,
    get_log_file_path,
    set_run_id,
)
from codeinspect.core.progress import spinner, status

log = structlog.get_logger(__name__)

_TOP_N = 10

_SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "dim",
}


def _scorecard(result: AnalysisResult) -> Table:
    table = Table(title="Lowest-scoring features", box=None, padding=(0, 1), pad_edge=False)
    table.add_column("feature", style="cyan")
    table.add_column("files", justify="right")
    table.add_column("arch", justify="right")
    table.add_column("quality", justify="right")
    table.add_column("risk", justify="right")
    table.add_column("tests", justify="right")
    table.add_column("overall", justify="right")
    table.add_column("grade", justify="center")

    for score in sorted(result.feature_scores, key=lambda s: (s.overall, s.feature_id))[:_TOP_N]:
        table.add_row(
            score.name,
            str(score.file_count),
            f"{score.architecture:.1f}",
            f"{score.code_quality:.1f}",
            f"{score.bug_risk:.1f}",
            f"{score.test_coverage:.1f}",
            f"{score.overall:.1f}",
            str(score.grade),
        )
    return table


def _hotspots(result: AnalysisResult) -> Table:
    table = Table(title="Highest blast radius", box=None, padding=(0, 1), pad_edge=False)
    table.add_column("file", style="cyan")
    table.add_column("score", justify="right")
    table.add_column("severity")
    table.add_column("fan-in", justify="right")
    table.add_column("features", justify="right")
    table.add_column("tests", justify="center")

    for record in result.impact[:_TOP_N]:
        style = _SEVERITY_STYLES.get(str(record.severity), "")
        table.add_row(
            compress_path(record.path, max_len=50),
            str(record.score),
            f"[{style}]{record.severity}[/{style}]" if style else str(record.severity),
            str(record.fan_in),
            str(record.feature_count),
            "✓" if record.has_tests else "✗",
        )
    return table


def _print_summary(result: AnalysisResult, console: Console) -> None:
    summary = result.summary()
    console.print(
        f"{pluralize(summary['files'], 'file')}, "
        f"{pluralize(summary['edges'], 'import edge')}, "
        f"{pluralize(summary['features'], 'feature')} "
        f"({summary['low_confidence_features']} low-confidence, "
        f"{pluralize(summary['cross_cutting_files'], 'cross-cutting file')})",
        highlight=False,
    )
    console.print(
        f"{pluralize(summary['impact_hotspots'], 'impact hotspot')} "
        f"({summary['critical']} critical), "
        f"{pluralize(summary['duplicates'], 'duplicate pair')}, "
        f"{pluralize(summary['dead_files'], 'dead file')}, "
        f"{pluralize(summary['unused_exports'], 'unused export')}",
        highlight=False,
    )
    if summary["orphaned_convention_files"] or summary["unused_stores"]:
        console.print(
            f"{pluralize(summary['orphaned_convention_files'], 'orphaned mixin/composable file')}, "
            f"{pluralize(summary['unused_stores'], 'unused store')}",
            highlight=False,
        )
    if result.migration:
        console.print(
            f"Migration: {format_percentage(summary['migrated_components'], summary['migration_components'])} "
            f"of {pluralize(summary['migration_components'], 'component')} migrated",
            highlight=False,
        )
    if result.feature_scores:
        console.print()
        console.print(_scorecard(result))
    if result.impact:
        console.print()
        console.print(_hotspots(result))


def _with_log_pointer(message: str) -> str:
    log_file = get_log_file_path()
    return f"{message}. See {log_file} for details." if log_file else message


def _analyze(
    inventory: Inventory,
    context: AnalysisContext,
    *,
    max_workers: int,
    feature_filter: str | None,
) -> AnalysisResult:
    try:
        return run_analysis(inventory, context, max_workers=max_workers, feature_filter=feature_filter)
    except Exception as e:
        log.exception("analysis_crashed", error=str(e))
        error = InternalError.unexpected(str(e), error_type=type(e).__name__)
        raise click.ClickException(_with_log_pointer(str(error))) from e


@click.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Repository root for config and file content (default: current directory)",
)
@click.option("--feature", "feature_filter", default=None, help="Only report features matching TEXT")
@click.option("--json", "as_json", is_flag=True, help="Output the full result as JSON")
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Worker threads (default: execution.max_workers from config)",
)
@click.pass_context
def analyze_command(
    ctx: click.Context,
    snapshot: Path,
    root: Path | None,
    feature_filter: str | None,
    as_json: bool,
    workers: int | None,
) -> None:
    """Analyze a walker/extractor SNAPSHOT (JSON or YAML).

    Builds the import graph, clusters files into features, and scores
    impact, duplication, dead code and feature health.
    """
    repo_root = (root or Path.cwd()).resolve()
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))

    try:
        config = load_config(repo_root)
    except CodeInspectError as e:
        raise click.ClickException(str(e)) from e

    log_config = config.logging.model_copy(update={"level": "DEBUG"}) if verbose else config.logging
    configure_logging(config=log_config)

    max_workers = workers or config.execution.max_workers
    set_run_id()
    try:
        try:
            inventory = load_snapshot(snapshot, root=repo_root, packages=config.analysis.packages)
        except CodeInspectError as e:
            raise click.ClickException(str(e)) from e

        context = AnalysisContext.from_config(config)
        if as_json:
            result = _analyze(inventory, context, max_workers=max_workers, feature_filter=feature_filter)
            click.echo(json.dumps(result.to_dict(), indent=2))
        else:
            with spinner(f"Analyzing {pluralize(len(inventory.files), 'file')}"):
                result = _analyze(
                    inventory, context, max_workers=max_workers, feature_filter=feature_filter
                )
            total = sum(result.timings.get(p, 0.0) for p in ("resolve", "cluster", "analyze"))
            status(f"Analysis complete in {format_duration(total)}", style="success")
            _print_summary(result, Console())
    finally:
        clear_run_id()

    for failure in result.failures:
        status(_with_log_pointer(failure.message), style="error")
    if result.failures:
        ctx.exit(1)

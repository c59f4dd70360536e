"""CLI commands for lazypick."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from lazypick.config import PickConfig, load_config
from lazypick.core.session import MAX_VALUE_COUNT, PickSession
from lazypick.coverage import CoverageStats, measure_coverage
from lazypick.errors import ConfigValidationError, MaxRepetitionError
from lazypick.pockets import CartesianPocket
from lazypick.runner import RepetitionResult, RepetitionRunner, RunRecord


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def parse_parameters(
    ctx: click.Context, param: click.Parameter, value: tuple[str, ...]
) -> list[tuple[str, int]]:
    """Parse NAME=SIZE option values."""
    parsed: list[tuple[str, int]] = []
    for item in value:
        name, sep, size = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=SIZE, got {item!r}", ctx=ctx, param=param)
        try:
            count = int(size)
        except ValueError:
            raise click.BadParameter(f"size of {name!r} is not an integer: {size!r}", ctx=ctx, param=param)
        if not 1 <= count <= MAX_VALUE_COUNT:
            raise click.BadParameter(
                f"size of {name!r} must be between 1 and {MAX_VALUE_COUNT}, got {count}",
                ctx=ctx,
                param=param,
            )
        parsed.append((name, count))
    return parsed


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """lazypick - Lazy pairwise combinations for repeated test runs."""
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
    except ConfigValidationError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(1)
    if verbose:
        config_obj.verbose = True

    ctx.obj["config"] = config_obj
    ctx.obj["verbose"] = config_obj.verbose

    setup_logging(config_obj.verbose)


@cli.command()
@click.option(
    "--param",
    "-p",
    "combined",
    multiple=True,
    callback=parse_parameters,
    help="Combined parameter as NAME=SIZE (repeatable)",
)
@click.option(
    "--uncombined",
    "-u",
    "uncombined",
    multiple=True,
    callback=parse_parameters,
    help="Uncombined parameter as NAME=SIZE (repeatable)",
)
@click.option(
    "--pocket",
    "pocketed",
    multiple=True,
    callback=parse_parameters,
    help="Parameter fully combined with the other pocket parameters (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--max-total", type=click.IntRange(min=1), default=None, help="Override max total run count")
@click.pass_context
def simulate(
    ctx: click.Context,
    combined: list[tuple[str, int]],
    uncombined: list[tuple[str, int]],
    pocketed: list[tuple[str, int]],
    as_json: bool,
    max_total: int | None,
) -> None:
    """Simulate a test that introduces the given parameters on every run.

    Combined parameters are introduced first, then pocket parameters and
    finally uncombined ones. Prints the picked values of every run and the
    achieved coverage.
    """
    config: PickConfig = ctx.obj["config"]
    if max_total is not None:
        config = config.model_copy(update={"max_total_count": max_total})

    if not (combined or uncombined or pocketed):
        click.echo("No parameters given. Use -p, -u or --pocket NAME=SIZE.", err=True)
        sys.exit(2)

    pocket = CartesianPocket("simulate")
    observed: list[dict[str, int]] = []

    def simulated_test(session: PickSession) -> None:
        values: dict[str, int] = {}
        observed.append(values)
        for name, size in combined:
            values[name] = session.pick(name, True, size)
        for name, size in pocketed:
            values[name] = pocket.pick(session, name, size)
        for name, size in uncombined:
            values[name] = session.pick(name, False, size)

    limit_error: MaxRepetitionError | None = None
    try:
        result = RepetitionRunner(config).run(simulated_test)
    except MaxRepetitionError as e:
        limit_error = e
        result = e.result or RepetitionResult()

    named_runs = [
        RunRecord(run_number=record.run_number, picks=list(values.items()), success=record.success)
        for record, values in zip(result.runs, observed)
    ]
    stats = measure_coverage(
        named_runs,
        combined=dict(combined + pocketed),
        uncombined=dict(uncombined),
    )

    if as_json:
        click.echo(json.dumps(_to_json(result, named_runs, stats, limit_error), indent=2))
    else:
        _print_report(named_runs, stats, result, limit_error)

    sys.exit(1 if limit_error is not None else 0)


def _to_json(
    result: RepetitionResult,
    named_runs: list[RunRecord],
    stats: CoverageStats,
    limit_error: MaxRepetitionError | None,
) -> dict[str, Any]:
    return {
        "completed": result.completed,
        "total_runs": result.total_runs,
        "limit": limit_error.message if limit_error else None,
        "runs": [{"run": r.run_number, "values": dict(r.picks)} for r in named_runs],
        "coverage": {
            "strength": stats.strength,
            "total_tuples": stats.total_tuples,
            "covered_tuples": stats.covered_tuples,
            "coverage_pct": round(stats.coverage_pct, 2),
            "missing": [[list(pair) for pair in t] for t in stats.missing],
        },
    }


def _print_report(
    named_runs: list[RunRecord],
    stats: CoverageStats,
    result: RepetitionResult,
    limit_error: MaxRepetitionError | None,
) -> None:
    console = Console()

    names: list[str] = []
    for record in named_runs:
        for name, _ in record.picks:
            if name not in names:
                names.append(name)

    table = Table(title="Simulated runs")
    table.add_column("Run", justify="right", style="dim")
    for name in names:
        table.add_column(name, justify="right")
    for record in named_runs:
        values = dict(record.picks)
        table.add_row(str(record.run_number), *(str(values.get(name, "-")) for name in names))
    console.print(table)

    console.print(f"Coverage: {stats!r}")
    if stats.missing:
        console.print(f"[yellow]{len(stats.missing)} tuple(s) not covered[/yellow]")

    if limit_error is not None:
        console.print(f"[red]Stopped: {limit_error.message}[/red]")
    elif result.completed:
        console.print(f"[green]All combinations covered in {result.total_runs} run(s)[/green]")
    else:
        console.print(f"[yellow]Stopped after {result.total_runs} run(s)[/yellow]")

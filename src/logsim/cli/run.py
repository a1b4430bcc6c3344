"""``logsim run``: simulate users and stream their access logs to Kafka."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from logsim._internal.config import (
    DEFAULT_PUBLISH_TIMEOUT,
    DEFAULT_RUN_SECONDS,
    DEFAULT_THINK_TIME,
    DEFAULT_TOPIC,
    DEFAULT_USERS,
    RunConfig,
    parse_brokers,
)
from logsim._internal.errors import ConfigError, LogSimError
from logsim.engine.runner import SimulationRunner
from logsim.sinks.kafka import kafka_sink_factory
from logsim.sinks.memory import MemorySinkFactory

if TYPE_CHECKING:
    from logsim.metrics.models import RunSummary
    from logsim.sinks.base import SinkFactory

console = Console(stderr=True)

USAGE_HINT = (
    "Run [bold]logsim run --help[/bold] for the possible arguments. "
    "--broker-list is required; think times and run seconds must be >= 1 "
    "and --think-min must not exceed --think-max."
)


def _print_summary(summary: RunSummary) -> None:
    """Print the final run summary table.

    Args:
        summary: Completed run summary.
    """
    table = Table(
        title="Simulation Complete",
        show_header=True,
        header_style="bold green",
        expand=True,
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Users", str(summary.users))
    table.add_row("Duration", f"{summary.duration_seconds:.1f}s")
    table.add_row("Events Published", str(summary.events_published))
    table.add_row("Events/sec", f"{summary.events_per_second:.2f}")
    table.add_row("Publish Failures", str(summary.publish_failures))
    table.add_row("Failed Users", str(summary.failed_users))
    table.add_row("p50 Publish Latency", f"{summary.latency_p50:.1f}ms")
    table.add_row("p95 Publish Latency", f"{summary.latency_p95:.1f}ms")
    table.add_row("p99 Publish Latency", f"{summary.latency_p99:.1f}ms")
    table.add_row("Max Publish Latency", f"{summary.latency_max:.1f}ms")

    console.print(table)


def run_cmd(
    broker_list: str = typer.Option(
        "",
        "--broker-list",
        "-b",
        help="Comma-separated list of Kafka broker host:port pairs. Required.",
        envvar="LOGSIM_BROKERS",
    ),
    topic: str = typer.Option(
        DEFAULT_TOPIC,
        "--topic",
        "-t",
        help="Name of the Kafka topic for sending log messages.",
        envvar="LOGSIM_TOPIC",
    ),
    users: int = typer.Option(
        DEFAULT_USERS,
        "--users",
        "-u",
        help="Number of users to simulate.",
        envvar="LOGSIM_USERS",
        min=1,
    ),
    run_seconds: float = typer.Option(
        DEFAULT_RUN_SECONDS,
        "--run-seconds",
        "-d",
        help="Number of seconds to run and simulate user traffic.",
        envvar="LOGSIM_RUN_SECONDS",
        min=1.0,
    ),
    think_min: float = typer.Option(
        DEFAULT_THINK_TIME[0],
        "--think-min",
        help="Minimum think time between simulated actions, in seconds.",
        envvar="LOGSIM_THINK_MIN",
        min=1.0,
    ),
    think_max: float = typer.Option(
        DEFAULT_THINK_TIME[1],
        "--think-max",
        help="Maximum think time between simulated actions, in seconds.",
        envvar="LOGSIM_THINK_MAX",
        min=1.0,
    ),
    publish_timeout: float = typer.Option(
        DEFAULT_PUBLISH_TIMEOUT,
        "--publish-timeout",
        help="Seconds to wait for the broker to acknowledge each event.",
        envvar="LOGSIM_PUBLISH_TIMEOUT",
        min=0.1,
    ),
    seed: int | None = typer.Option(
        None,
        "--seed",
        help="Seed the random sources for a reproducible event sequence.",
    ),
    silent: bool = typer.Option(
        False,
        "--silent",
        "-s",
        help="Suppress all messages.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Generate events without sending them to Kafka.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit structured JSON log lines.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
) -> None:
    """Simulate users browsing a site and publish their access logs."""
    try:
        config = RunConfig(
            brokers=parse_brokers(broker_list),
            topic=topic,
            users=users,
            run_seconds=run_seconds,
            think_time=(think_min, think_max),
            silent=silent,
            publish_timeout=publish_timeout,
            seed=seed,
        )
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        console.print(USAGE_HINT)
        raise typer.Exit(code=1) from exc

    if silent:
        log_level = logging.WARNING
    else:
        log_level = logging.DEBUG if verbose else logging.INFO

    sink_factory: SinkFactory = MemorySinkFactory() if dry_run else kafka_sink_factory

    if not silent:
        console.print(
            Panel(
                f"[bold]Brokers:[/bold]    {','.join(config.brokers)}\n"
                f"[bold]Topic:[/bold]      {config.topic}\n"
                f"[bold]Users:[/bold]      {config.users}\n"
                f"[bold]Duration:[/bold]   {config.run_seconds}s\n"
                f"[bold]Think time:[/bold] {think_min}-{think_max}s"
                + ("\n[yellow]Dry run: events are not sent to Kafka[/yellow]" if dry_run else ""),
                title="logsim",
                border_style="cyan",
            )
        )

    try:
        summary = SimulationRunner(
            config,
            sink_factory=sink_factory,
            log_level=log_level,
            json_logs=json_logs,
        ).run()
    except LogSimError as exc:
        console.print(f"[red]Simulation failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if not silent:
        _print_summary(summary)

"""Main Typer application, the entry point for the ``logsim`` CLI."""

from __future__ import annotations

import typer

from logsim import __version__
from logsim.cli.run import run_cmd

app = typer.Typer(
    name="logsim",
    help="Simulate users browsing a site and stream their access logs to Kafka.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("run", help="Run a traffic simulation.")(run_cmd)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"logsim {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """logsim: synthetic web access-log traffic for Kafka pipelines."""

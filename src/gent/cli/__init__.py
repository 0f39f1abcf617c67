from __future__ import annotations

import logging
from pathlib import Path

import click

from gent.cli.admin import config, init
from gent.cli.dashboard import tui
from gent.cli.info import status
from gent.cli.issues import create, list_cmd, pr, run, setup_labels

LOG_FILE = Path.home() / ".cache" / "gent" / "gent.log"


def configure_logging(verbose: bool, log_file: Path = LOG_FILE) -> None:
    """Send log records to a file; the terminal belongs to the dashboard."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger("gent")
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help=f"Debug logging to {LOG_FILE}.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """gent: issue-driven git and GitHub workflow dashboard."""
    try:
        configure_logging(verbose)
    except OSError as e:
        # No writable cache dir: run without a log file
        if verbose:
            click.echo(f"Warning: could not open log file {LOG_FILE}: {e}", err=True)
    if ctx.invoked_subcommand is None:
        ctx.invoke(tui)


cli.add_command(tui)
cli.add_command(status)
cli.add_command(init)
cli.add_command(config)
cli.add_command(setup_labels)
cli.add_command(create)
cli.add_command(list_cmd)
cli.add_command(run)
cli.add_command(pr)

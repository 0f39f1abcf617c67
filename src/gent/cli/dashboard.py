from __future__ import annotations

import click


@click.command()
def tui() -> None:
    """Open the workflow dashboard."""
    from gent.tui.app import run_dashboard

    run_dashboard()

from __future__ import annotations

import os
import subprocess

import click

from gent.config import ConfigError, config_exists, ensure_config, get_config_path


@click.command()
@click.option("-f", "--force", is_flag=True, help="Overwrite an existing config.")
def init(force: bool) -> None:
    """Write a default .gent.toml in the current directory."""
    if config_exists() and not force:
        click.echo(f"{get_config_path()} already exists. Use --force to overwrite.")
        return
    try:
        path = ensure_config(overwrite=force)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Created {path}")


@click.command()
@click.option("--edit", is_flag=True, help="Open config in $EDITOR.")
def config(edit: bool) -> None:
    """View or edit configuration."""
    try:
        config_path = ensure_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if edit:
        editor = os.environ.get("EDITOR", "vi")
        subprocess.run([editor, str(config_path)])
    else:
        click.echo(config_path.read_text())

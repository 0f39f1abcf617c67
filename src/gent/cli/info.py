from __future__ import annotations

import click

from gent.ai_provider import display_name
from gent.tui.actions import available_actions
from gent.tui.display import contextual_hint
from gent.tui.state import StateAggregator, StateSnapshot


def _yes_no(value: bool) -> str:
    return click.style("yes", fg="green") if value else click.style("no", fg="red")


def format_status(state: StateSnapshot) -> list[str]:
    """Plain-text summary of a snapshot, one fact per line."""
    lines = [
        f"{'Git repository':<18} {_yes_no(state.is_git_repo)}",
        f"{'gh authenticated':<18} {_yes_no(state.is_gh_authenticated)}",
        f"{'AI provider':<18} {display_name(state.config.provider)} "
        f"({'available' if state.is_ai_provider_available else 'not found'})",
    ]
    if not state.is_git_repo:
        return lines

    lines.append(f"{'Config':<18} {_yes_no(state.has_config)}")
    remote = f"{state.repo.owner}/{state.repo.repo}" if state.repo else "none"
    lines.append(f"{'Remote':<18} {remote}")
    lines.append(f"{'Branch':<18} {state.branch} (base {state.base_branch})")
    if not state.is_on_main:
        lines.append(f"{'Commits ahead':<18} {len(state.commits)}")
        lines.append(f"{'Uncommitted':<18} {_yes_no(state.has_uncommitted_changes)}")
        lines.append(f"{'Unpushed':<18} {_yes_no(state.has_unpushed_commits)}")
        if state.issue is not None:
            lines.append(
                f"{'Issue':<18} #{state.issue.number} {state.issue.title} "
                f"[{state.workflow_status}]"
            )
        if state.pr is not None:
            lines.append(f"{'Pull request':<18} #{state.pr.number} {state.pr.state}")
            lines.append(f"{'Review feedback':<18} {len(state.review_feedback)} item(s)")
    return lines


@click.command()
def status() -> None:
    """Show the dashboard state as plain text."""
    state = StateAggregator().aggregate()
    for line in format_status(state):
        click.echo(line)

    actions = available_actions(state)
    click.echo()
    click.echo("Actions: " + "  ".join(f"[{a.shortcut}] {a.label}" for a in actions))
    hint = contextual_hint(state)
    if hint:
        click.echo(f"Hint: {hint}")

"""Dashboard action handlers.

Each handler takes the snapshot the action was offered for and a `Screen`
for dialogs, and returns False only when the dashboard should exit. Handler
failures are logged and reported in a dialog; nothing propagates into the
interaction loop.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable
from pathlib import Path

import click

from gent import ai_provider, git, github
from gent.config import (
    PROVIDERS,
    ConfigError,
    ensure_config,
    load_agent_instructions,
    set_runtime_provider,
)
from gent.labels import all_labels, sort_by_priority, workflow_labels
from gent.progress import read_progress
from gent.prompts import (
    build_commit_message_prompt,
    build_fix_prompt,
    build_implementation_prompt,
    clean_commit_message,
)
from gent.review import format_summary
from gent.services import workflow
from gent.tui.dialogs import show_confirm, show_input, show_message, show_select
from gent.tui.keys import KeyPress, read_key
from gent.tui.layout import SelectItem, SelectSeparator
from gent.tui.overlay import show_status
from gent.tui.state import StateSnapshot

logger = logging.getLogger(__name__)

COMMAND_ERRORS = (
    git.GitError,
    github.GitHubUnavailableError,
    ai_provider.AIProviderError,
    ConfigError,
    OSError,
)


class Screen:
    """Dialogs bound to the dashboard they are drawn over."""

    def __init__(
        self, dashboard_rows: list[str], read: Callable[[], KeyPress] = read_key
    ) -> None:
        self.dashboard_rows = dashboard_rows
        self.read = read

    def select(self, title, entries, initial_index=0, current_index=None) -> str | None:
        return show_select(
            title, entries, self.dashboard_rows, initial_index, current_index, read=self.read
        )

    def confirm(self, title: str, message: str) -> bool:
        return bool(show_confirm(title, message, self.dashboard_rows, read=self.read))

    def input(self, title: str, label: str) -> str | None:
        return show_input(title, label, self.dashboard_rows, read=self.read)

    def message(self, title: str, *lines: str) -> None:
        show_message(title, list(lines), self.dashboard_rows, read=self.read)

    def status(self, title: str, message: str) -> None:
        show_status(title, message, self.dashboard_rows)

    def error(self, title: str, error: Exception) -> None:
        logger.error("%s: %s", title, error)
        self.message(title, click.style(str(error), fg="red"))


def _run_in_terminal(fn: Callable[[], object]) -> None:
    """Give the whole terminal to an external program, then wait for a key."""
    click.clear()
    fn()
    click.echo()
    click.pause()


# -- Handlers --


def handle_quit(state: StateSnapshot, screen: Screen) -> bool:
    return False


def handle_refresh(state: StateSnapshot, screen: Screen) -> bool:
    return True


def handle_init(state: StateSnapshot, screen: Screen) -> bool:
    try:
        path = ensure_config()
    except ConfigError as e:
        screen.error("Init failed", e)
        return True
    screen.message("Init", f"Created {path.name}", "Edit it to match your workflow.")
    return True


def handle_setup_labels(state: StateSnapshot, screen: Screen) -> bool:
    labels = all_labels(state.config)
    if not screen.confirm("Labels", f"Create {len(labels)} workflow labels on GitHub?"):
        return True
    failed = []
    for label in labels:
        screen.status("Labels", f"Creating {label.name}…")
        try:
            github.create_label(label)
        except github.GitHubUnavailableError as e:
            logger.warning("Could not create label %s: %s", label.name, e)
            failed.append(label.name)
    if failed:
        screen.message(
            "Labels",
            click.style(f"{len(failed)} of {len(labels)} labels failed", fg="red"),
            ", ".join(failed),
        )
    else:
        screen.message("Labels", click.style(f"Created {len(labels)} labels", fg="green"))
    return True


def handle_github_remote(state: StateSnapshot, screen: Screen) -> bool:
    name = screen.input("GitHub", f"Repository name (default: {Path.cwd().name}):")
    if name is None:
        return True
    name = name or Path.cwd().name
    visibility = screen.select(
        "Visibility",
        [SelectItem("Private", "private"), SelectItem("Public", "public")],
    )
    if visibility is None:
        return True
    screen.status("GitHub", f"Creating {name} and pushing…")
    try:
        url = github.create_repo(name, private=visibility == "private")
    except COMMAND_ERRORS as e:
        screen.error("GitHub remote failed", e)
        return True
    screen.message("GitHub", click.style("Repository created", fg="green"), url)
    return True


def handle_create(state: StateSnapshot, screen: Screen) -> bool:
    description = screen.input("New ticket", "Describe the ticket:")
    if not description:
        return True

    draft = None
    if state.is_ai_provider_available:
        name = ai_provider.display_name(state.config.provider)
        screen.status("New ticket", f"Writing ticket with {name}…")
        try:
            draft = workflow.generate_ticket(description, state.config)
        except COMMAND_ERRORS as e:
            logger.warning("Ticket generation failed, using the description: %s", e)
    if draft is None:
        type_choice = screen.select(
            "Type", [SelectItem(t, t) for t in state.config.labels.types]
        )
        if type_choice is None:
            return True
        draft = workflow.plain_ticket(description, state.config, type_choice)
    elif not screen.confirm(
        "New ticket", f"Create \"{draft.title}\" ({', '.join(draft.labels)})?"
    ):
        return True

    screen.status("New ticket", "Creating issue…")
    try:
        number = github.create_issue(draft.title, draft.body, labels=list(draft.labels))
    except COMMAND_ERRORS as e:
        screen.error("Create failed", e)
        return True
    screen.message(
        "New ticket", click.style(f"Created issue #{number}", fg="green"), draft.title
    )
    return True


def handle_list(state: StateSnapshot, screen: Screen) -> bool:
    ready = workflow_labels(state.config)["ready"]
    screen.status("Issues", "Loading ready issues…")
    try:
        issues = github.list_issues(labels=[ready])
    except COMMAND_ERRORS as e:
        screen.error("List failed", e)
        return True
    if not issues:
        screen.message("Issues", f"No open issues labelled {ready}")
        return True

    issues = sort_by_priority(issues, state.config)
    entries = [SelectSeparator(f"{len(issues)} ready")]
    entries += [SelectItem(f"#{i.number}  {i.title}", str(i.number)) for i in issues]
    choice = screen.select("Issues", entries)
    if choice is None:
        return True
    issue = next(i for i in issues if str(i.number) == choice)

    branch = workflow.branch_for_issue(issue, state.config)
    if not screen.confirm("Start work", f"Switch to branch {branch}?"):
        return True
    try:
        workflow.start_issue(issue, state.config, state.base_branch)
    except COMMAND_ERRORS as e:
        screen.error("Branch failed", e)
    return True


def _commit_message(state: StateSnapshot, screen: Screen) -> tuple[str, bool] | None:
    """Return (message, generated_by_ai), or None if the user backed out."""
    provider_name = ai_provider.display_name(state.config.provider)
    mode = screen.select(
        "Commit",
        [
            SelectItem(f"Generate with {provider_name}", "ai"),
            SelectItem("Enter manually", "manual"),
        ],
    )
    if mode is None:
        return None
    if mode == "ai":
        screen.status("Commit", f"Generating message with {provider_name}…")
        issue = state.issue
        try:
            prompt = build_commit_message_prompt(
                git.staged_diff(),
                issue.number if issue else None,
                issue.title if issue else None,
            )
            message = clean_commit_message(ai_provider.run_prompt(prompt, state.config))
        except COMMAND_ERRORS as e:
            logger.warning("AI commit message generation failed: %s", e)
            message = ""
        if message:
            return message, True
    message = screen.input("Commit", "Commit message:")
    return (message, False) if message else None


def handle_commit(state: StateSnapshot, screen: Screen) -> bool:
    try:
        git.stage_all()
        result = _commit_message(state, screen)
        if result is None or not screen.confirm("Commit", f"Commit: {result[0]}"):
            git.reset_staged()
            return True
        message, generated = result
        if generated:
            provider = state.config.provider
            message += (
                f"\n\nCo-Authored-By: {ai_provider.display_name(provider)} "
                f"<{ai_provider.provider_email(provider)}>"
            )
        git.commit(message)
    except COMMAND_ERRORS as e:
        screen.error("Commit failed", e)
    return True


def handle_push(state: StateSnapshot, screen: Screen) -> bool:
    if not screen.confirm("Push", f"Push {state.branch} to origin?"):
        return True
    screen.status("Push", f"Pushing {state.branch}…")
    try:
        git.push_branch(state.branch)
    except COMMAND_ERRORS as e:
        screen.error("Push failed", e)
        return True
    screen.message("Push", click.style("Pushed to origin", fg="green"))
    return True


def handle_pr(state: StateSnapshot, screen: Screen) -> bool:
    kind = screen.select(
        f"Pull request into {state.base_branch}",
        [SelectItem("Ready for review", "ready"), SelectItem("Draft", "draft")],
    )
    if kind is None:
        return True

    issue = state.issue
    commits = list(state.commits)
    body = None
    if state.is_ai_provider_available:
        name = ai_provider.display_name(state.config.provider)
        screen.status("Pull request", f"Writing description with {name}…")
        try:
            files = git.changed_files(state.base_branch)
            body = workflow.generate_pr_body(issue, commits, files, state.config)
        except COMMAND_ERRORS as e:
            logger.warning("PR description generation failed, listing commits: %s", e)
    if body is None:
        body = workflow.plain_pr_body(issue, commits)

    screen.status("Pull request", "Creating pull request…")
    try:
        if state.has_unpushed_commits:
            git.push_branch(state.branch)
        url = github.create_pull_request(
            workflow.pr_title(issue, commits, state.branch),
            body,
            base=state.base_branch,
            draft=kind == "draft",
        )
    except COMMAND_ERRORS as e:
        screen.error("PR failed", e)
        return True
    if issue is not None:
        workflow.mark_completed(issue.number, state.config)
    screen.message("Pull request", click.style("Created", fg="green"), url)
    return True


def _run_message(state: StateSnapshot) -> str:
    if state.has_actionable_feedback and state.commits:
        return "Start AI agent to address review feedback?"
    if state.commits:
        return "Start AI agent to continue from existing commits?"
    return "Start AI agent to implement this ticket?"


def _launch(prompt: str, state: StateSnapshot) -> None:
    name = ai_provider.display_name(state.config.provider)

    def run() -> None:
        click.echo(click.style(f"{name} session", bold=True))
        try:
            code = ai_provider.run_interactive(prompt, state.config)
        except ai_provider.AIProviderError as e:
            logger.error("%s session failed: %s", name, e)
            click.echo(click.style(str(e), fg="red"))
            return
        if code != 0:
            click.echo(click.style(f"{name} exited with status {code}", fg="yellow"))

    _run_in_terminal(run)


def handle_run(state: StateSnapshot, screen: Screen) -> bool:
    if state.issue is None:
        screen.message("Run", "No linked issue for this branch")
        return True
    if not screen.confirm("Run", _run_message(state)):
        return True

    context = []
    if state.commits:
        listing = "\n".join(f"- {c}" for c in state.commits)
        context.append(
            f"## Current Progress\nThere are {len(state.commits)} existing "
            f"commit(s) on this branch:\n{listing}\n\n"
            "Continue the implementation from where it left off."
        )
    if state.has_actionable_feedback:
        context.append("## Review Feedback\n" + format_summary(list(state.review_feedback)))

    prompt = build_implementation_prompt(
        state.issue,
        state.config,
        agent_instructions=load_agent_instructions(state.config),
        progress=read_progress(state.config),
        extra_context="\n\n".join(context) or None,
    )
    _launch(prompt, state)
    return True


def handle_fix(state: StateSnapshot, screen: Screen) -> bool:
    if state.pr is None or not state.review_feedback:
        screen.message("Fix", "No actionable review feedback")
        return True
    n = len(state.review_feedback)
    if not screen.confirm("Fix", f"Start AI agent to address {n} review comment(s)?"):
        return True
    prompt = build_fix_prompt(state.pr, format_summary(list(state.review_feedback)), state.issue)
    _launch(prompt, state)
    return True


def handle_video(state: StateSnapshot, screen: Screen) -> bool:
    command = state.config.video.command
    if not screen.confirm("Video", f"Record a demo with: {command}?"):
        return True

    try:
        argv = shlex.split(command)
    except ValueError as e:
        screen.error("Invalid video command", e)
        return True

    def run() -> None:
        try:
            result = subprocess.run(argv)
        except OSError as e:
            logger.error("Video capture failed: %s", e)
            click.echo(click.style(str(e), fg="red"))
            return
        if result.returncode != 0:
            click.echo(click.style(f"Exited with status {result.returncode}", fg="yellow"))

    _run_in_terminal(run)
    return True


def handle_checkout_main(state: StateSnapshot, screen: Screen) -> bool:
    if not screen.confirm("Main", f"Switch to {state.base_branch} and pull?"):
        return True
    screen.status("Main", f"Switching to {state.base_branch}…")
    try:
        git.checkout(state.base_branch)
        git.pull()
    except COMMAND_ERRORS as e:
        screen.error("Checkout failed", e)
    return True


def handle_switch_provider(state: StateSnapshot, screen: Screen) -> bool:
    current = state.config.provider
    entries = [
        SelectItem(ai_provider.display_name(p) + (" (current)" if p == current else ""), p)
        for p in PROVIDERS
    ]
    index = PROVIDERS.index(current) if current in PROVIDERS else 0
    choice = screen.select("AI provider", entries, initial_index=index, current_index=index)
    if choice is not None and choice != current:
        set_runtime_provider(choice)
    return True


HANDLERS: dict[str, Callable[[StateSnapshot, Screen], bool]] = {
    "quit": handle_quit,
    "refresh": handle_refresh,
    "init": handle_init,
    "setup-labels": handle_setup_labels,
    "github-remote": handle_github_remote,
    "create": handle_create,
    "list": handle_list,
    "commit": handle_commit,
    "push": handle_push,
    "pr": handle_pr,
    "run": handle_run,
    "fix": handle_fix,
    "video": handle_video,
    "checkout-main": handle_checkout_main,
    "switch-provider": handle_switch_provider,
}

# Actions after which session-cached environment checks are stale
CACHE_INVALIDATING = {"setup-labels", "github-remote", "switch-provider"}


def execute_action(action_id: str, state: StateSnapshot, screen: Screen) -> bool:
    """Run the handler for `action_id`. Returns False when the dashboard should exit."""
    handler = HANDLERS.get(action_id)
    if handler is None:
        logger.warning("No handler for action %s", action_id)
        return True
    try:
        return handler(state, screen)
    except Exception as e:
        logger.exception("Action %s failed", action_id)
        screen.error(f"{action_id} failed", e)
        return True

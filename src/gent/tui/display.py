"""Dashboard rendering. Builds rows; callers decide where they go."""

from __future__ import annotations

import re
import shutil
from importlib.metadata import PackageNotFoundError, version

import click

from gent.ai_provider import display_name
from gent.tui.actions import TuiAction
from gent.tui.layout import fit, truncate_ansi, visible_len
from gent.tui.state import StateSnapshot

MAX_DASHBOARD_WIDTH = 90
MAX_COMMITS_SHOWN = 6

WORKFLOW_BADGES = {
    "ready": (" READY ", "green", "black"),
    "in-progress": (" IN PROGRESS ", "yellow", "black"),
    "completed": (" COMPLETED ", "blue", "white"),
    "blocked": (" BLOCKED ", "red", "white"),
}

REVIEW_BADGES = {
    "APPROVED": ("Approved", "green"),
    "CHANGES_REQUESTED": ("Changes requested", "red"),
    "REVIEW_REQUIRED": ("Review pending", "yellow"),
}


def gent_version() -> str:
    try:
        return version("gent")
    except PackageNotFoundError:
        return "dev"


def dashboard_width(columns: int | None = None) -> int:
    if columns is None:
        columns = shutil.get_terminal_size((80, 24)).columns
    return min(columns, MAX_DASHBOARD_WIDTH)


def _dim(text: str) -> str:
    return click.style(text, dim=True)


def _title_row(left: str, right: str, title: str, w: int) -> str:
    label = truncate_ansi(f" {title} ", w - 2)
    fill = w - 2 - visible_len(label)
    return _dim(left) + click.style(label, fg="cyan", bold=True) + _dim("─" * fill + right)


def _top_row(title: str, w: int) -> str:
    return _title_row("┌", "┐", title, w)


def _mid_row(title: str, w: int) -> str:
    return _title_row("├", "┤", title, w)


def _div_row(w: int) -> str:
    return _dim("├" + "─" * (w - 2) + "┤")


def _bot_row(w: int) -> str:
    return _dim("└" + "─" * (w - 2) + "┘")


def _row(text: str, w: int) -> str:
    return _dim("│") + " " + fit(text, w - 4) + " " + _dim("│")


def extract_description(body: str, max_len: int) -> str:
    """First meaningful line of an issue/PR body, markdown stripped."""
    for line in body.splitlines():
        text = line.strip()
        if not text or text.startswith(("#", "---", "META:", "**Type:**")):
            continue
        text = text.replace("**", "")
        text = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", text)
        return truncate_ansi(text, max_len)
    return ""


def workflow_badge(status: str) -> str:
    if status not in WORKFLOW_BADGES:
        return ""
    text, bg, fg = WORKFLOW_BADGES[status]
    return click.style(text, bg=bg, fg=fg)


def pr_badge(state: str, is_draft: bool) -> str:
    if state == "merged":
        return click.style(" MERGED ", bg="magenta", fg="white")
    if state == "closed":
        return click.style(" CLOSED ", bg="red", fg="white")
    if is_draft:
        return click.style(" DRAFT ", bg="yellow", fg="black")
    return click.style(" OPEN ", bg="green", fg="black")


def review_badge(decision: str | None) -> str:
    if decision not in REVIEW_BADGES:
        return ""
    text, color = REVIEW_BADGES[decision]
    return "  " + click.style(text, fg=color)


def command_bar(actions: list[TuiAction], w: int) -> list[str]:
    """Shortcut chips wrapped to the box interior."""
    inner = w - 4
    lines: list[str] = []
    current = ""
    for action in actions:
        chip = click.style(f" {action.shortcut} ", reverse=True) + " " + _dim(action.label)
        candidate = current + ("   " if current else "") + chip
        if current and visible_len(candidate) > inner:
            lines.append(current)
            current = chip
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def contextual_hint(state: StateSnapshot) -> str | None:
    if state.is_on_main:
        return "Select an action to get started"
    if state.pr is not None and state.pr.state == "merged":
        return "PR merged - switch back to main for the next ticket"
    if state.has_uncommitted_changes and state.pr is None:
        return "Commit your changes before creating a PR"
    if state.has_actionable_feedback:
        return "Review feedback needs attention"
    return None


def _header(state: StateSnapshot, w: int, refreshing: bool) -> str:
    provider = display_name(state.config.provider)
    provider_tag = click.style(
        provider, fg="green" if state.is_ai_provider_available else "red"
    )
    gh_tag = click.style("gh", fg="green" if state.is_gh_authenticated else "red")
    left = click.style(" gent ", bold=True) + _dim(f"v{gent_version()}")
    if refreshing:
        left += _dim("  refreshing…")
    right = provider_tag + _dim(" · ") + gh_tag + " "
    gap = max(1, w - visible_len(left) - visible_len(right))
    return left + " " * gap + right


def render_dashboard(
    state: StateSnapshot,
    actions: list[TuiAction],
    hint: str | None = None,
    width: int | None = None,
    refreshing: bool = False,
) -> list[str]:
    w = width or dashboard_width()
    desc_max = w - 8
    rows = [_header(state, w, refreshing), ""]

    if not state.is_git_repo:
        return rows + [
            _top_row("Setup", w),
            _row(click.style("Not a git repository", fg="red"), w),
            _row(_dim("Run gent inside a git repository to get started"), w),
            _bot_row(w),
        ]
    if not state.is_gh_authenticated:
        return rows + [
            _top_row("Setup", w),
            _row(click.style("GitHub CLI not authenticated", fg="red"), w),
            _row(_dim("Run: gh auth login"), w),
            _bot_row(w),
        ]

    def footer() -> list[str]:
        out = [_div_row(w)]
        out += [_row(line, w) for line in command_bar(actions, w)]
        if hint:
            out.append(_row(_dim(hint), w))
        out.append(_bot_row(w))
        return out

    if state.is_on_main:
        rows.append(_top_row("Branch", w))
        rows.append(
            _row(
                click.style(state.branch, fg="magenta") + _dim("  ·  ready to start new work"),
                w,
            )
        )
        if state.has_uncommitted_changes:
            rows.append(_row(click.style("● uncommitted changes", fg="yellow"), w))
        rows.append(_mid_row("Workflow", w))
        rows.append(_row(_dim("No active ticket"), w))
        return rows + footer()

    # Ticket
    rows.append(_top_row("Ticket", w))
    if state.issue is not None:
        issue = state.issue
        rows.append(
            _row(
                click.style(f"#{issue.number}", fg="cyan")
                + "  "
                + click.style(truncate_ansi(issue.title, desc_max - 6), bold=True),
                w,
            )
        )
        description = extract_description(issue.body, desc_max)
        if description:
            rows.append(_row(_dim(description), w))
        tags = []
        if state.workflow_status != "none":
            tags.append(workflow_badge(state.workflow_status))
        for prefix in ("type:", "priority:", "risk:", "area:"):
            label = next((l for l in issue.labels if l.startswith(prefix)), None)
            if label:
                tags.append(_dim(label))
        if tags:
            rows.append(_row("  ".join(tags), w))
    else:
        rows.append(_row(_dim("No linked issue"), w))

    # Branch
    rows.append(_mid_row("Branch", w))
    rows.append(_row(click.style(state.branch, fg="magenta"), w))
    bits = []
    if state.commits:
        bits.append(_dim(f"{len(state.commits)} ahead"))
    if state.has_uncommitted_changes:
        bits.append(click.style("● uncommitted", fg="yellow"))
    if state.has_unpushed_commits:
        bits.append(click.style("● unpushed", fg="yellow"))
    if not state.has_uncommitted_changes and not state.has_unpushed_commits and state.commits:
        bits.append(click.style("● synced", fg="green"))
    if bits:
        rows.append(_row(_dim("  ·  ").join(bits), w))

    # Pull request
    rows.append(_mid_row("Pull Request", w))
    if state.pr is not None:
        pr = state.pr
        title = "  " + truncate_ansi(pr.title, desc_max - 12) if pr.title else ""
        rows.append(_row(click.style(f"#{pr.number}", fg="cyan") + title, w))
        rows.append(_row(pr_badge(pr.state, pr.is_draft) + review_badge(pr.review_decision), w))
        if state.has_actionable_feedback:
            n = len(state.review_feedback)
            rows.append(
                _row(
                    click.style(
                        f"{n} actionable comment{'s' if n != 1 else ''} pending", fg="yellow"
                    ),
                    w,
                )
            )
        if (
            state.has_ui_changes
            and state.is_playwright_available
            and state.config.video.enabled
            and pr.state == "open"
        ):
            rows.append(
                _row(
                    click.style("UI changes detected", fg="cyan")
                    + _dim(" · video capture available"),
                    w,
                )
            )
        rows.append(_row(_dim(pr.url), w))
    else:
        rows.append(_row(_dim("No PR created"), w))

    # Commits
    rows.append(_mid_row("Commits", w))
    if state.commits:
        for subject in state.commits[:MAX_COMMITS_SHOWN]:
            rows.append(_row(subject, w))
        if len(state.commits) > MAX_COMMITS_SHOWN:
            rows.append(
                _row(_dim(f"… and {len(state.commits) - MAX_COMMITS_SHOWN} more"), w)
            )
    else:
        rows.append(_row(_dim("No commits"), w))

    return rows + footer()

"""Ticket, branch and pull request operations shared by the dashboard and the CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gent import ai_provider, git, github
from gent.branch import generate_branch_name
from gent.config import Config, load_agent_instructions
from gent.labels import issue_labels, workflow_labels
from gent.models import Issue
from gent.prompts import (
    build_pr_prompt,
    build_ticket_prompt,
    extract_issue_body,
    extract_title,
    parse_ticket_meta,
)

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200


@dataclass(frozen=True)
class TicketDraft:
    title: str
    body: str
    labels: tuple[str, ...]
    generated: bool = False


# -- Tickets --


def fallback_title(description: str) -> str:
    """First line of the description, cut at a word boundary if it is too long."""
    first = description.strip().splitlines()[0].strip() if description.strip() else ""
    if len(first) <= MAX_TITLE_LENGTH:
        return first
    cut = first[:MAX_TITLE_LENGTH]
    space = cut.rfind(" ")
    return cut[:space] if space > MAX_TITLE_LENGTH // 2 else cut


def plain_ticket(description: str, config: Config, issue_type: str = "feature") -> TicketDraft:
    return TicketDraft(
        title=fallback_title(description),
        body=description.strip(),
        labels=tuple(issue_labels({"type": issue_type}, config)),
    )


def generate_ticket(
    description: str, config: Config, hints: str | None = None
) -> TicketDraft:
    """Have the assistant write the ticket body and pick its labels.

    Raises AIProviderError if the assistant fails or returns nothing usable.
    """
    prompt = build_ticket_prompt(
        description, config, load_agent_instructions(config), hints
    )
    output = ai_provider.run_prompt(prompt, config, timeout=300)
    body = extract_issue_body(output)
    if not body:
        raise ai_provider.AIProviderError(f"{config.provider} returned an empty ticket")

    meta = parse_ticket_meta(output)
    if meta is None:
        logger.warning("No META line in generated ticket, using default labels")
        meta = {"type": "feature", "priority": "medium", "risk": "low", "area": "shared"}

    name = ai_provider.display_name(config.provider)
    return TicketDraft(
        title=extract_title(output) or fallback_title(description),
        body=f"{body}\n\n---\n*Created with {name} by gent*",
        labels=tuple(issue_labels(meta, config)),
        generated=True,
    )


# -- Branches --


def issue_type(issue: Issue) -> str:
    return next(
        (
            label.removeprefix("type:")
            for label in issue.labels
            if label.startswith("type:")
        ),
        "feature",
    )


def branch_for_issue(issue: Issue, config: Config) -> str:
    return generate_branch_name(config, issue.number, issue.title, issue_type(issue))


def start_issue(issue: Issue, config: Config, base_branch: str) -> str:
    """Check out the issue's branch, creating it from `base_branch` if needed.

    Moves the issue from ready to in-progress. Returns the branch name.
    Raises GitError if the branch cannot be checked out.
    """
    branch = branch_for_issue(issue, config)
    if git.branch_exists(branch):
        git.checkout(branch)
    else:
        git.create_branch(branch, base_branch)

    labels = workflow_labels(config)
    try:
        github.update_issue_labels(
            issue.number, add=[labels["in-progress"]], remove=[labels["ready"]]
        )
    except github.GitHubUnavailableError as e:
        logger.warning("Could not update labels on #%s: %s", issue.number, e)
    return branch


def mark_completed(issue_number: int, config: Config) -> None:
    labels = workflow_labels(config)
    try:
        github.update_issue_labels(
            issue_number, add=[labels["completed"]], remove=[labels["in-progress"]]
        )
    except github.GitHubUnavailableError as e:
        logger.warning("Could not update labels on #%s: %s", issue_number, e)


# -- Pull requests --


def pr_title(issue: Issue | None, commits: list[str], branch: str) -> str:
    """Issue title, else the oldest commit subject, else the branch name."""
    if issue is not None:
        return issue.title
    return commits[-1] if commits else branch


def plain_pr_body(issue: Issue | None, commits: list[str]) -> str:
    """`commits` is newest first; the body lists them oldest first."""
    body = f"Closes #{issue.number}\n\n" if issue is not None else ""
    return body + "\n".join(f"- {c}" for c in reversed(commits))


def generate_pr_body(
    issue: Issue | None, commits: list[str], changed_files: list[str], config: Config
) -> str:
    """Raises AIProviderError if the assistant fails or returns nothing."""
    output = ai_provider.run_prompt(
        build_pr_prompt(issue, commits, changed_files), config, timeout=300
    ).strip()
    if not output:
        raise ai_provider.AIProviderError(f"{config.provider} returned an empty description")
    if issue is not None and f"#{issue.number}" not in output:
        output += f"\n\nCloses #{issue.number}"
    return output

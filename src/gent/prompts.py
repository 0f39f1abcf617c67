"""Prompt text handed to the AI assistant."""

from __future__ import annotations

import re

from gent.config import Config
from gent.models import Issue, PrStatus


def build_implementation_prompt(
    issue: Issue,
    config: Config,
    agent_instructions: str | None = None,
    progress: str = "",
    extra_context: str | None = None,
) -> str:
    sections = [
        f"Implement GitHub issue #{issue.number}: {issue.title}",
        "## Issue\n" + (issue.body.strip() or "(no description)"),
    ]
    if agent_instructions:
        sections.append("## Project Instructions\n" + agent_instructions.strip())
    if progress.strip():
        # Only the tail is useful context
        tail = "\n".join(progress.strip().splitlines()[-60:])
        sections.append("## Recent Progress\n" + tail)
    if extra_context:
        sections.append(extra_context)
    if config.validation:
        checks = "\n".join(f"- `{cmd}`" for cmd in config.validation)
        sections.append("## Validation\nRun these before committing:\n" + checks)
    sections.append(
        "Commit your work with clear messages referencing "
        f"#{issue.number} when finished."
    )
    return "\n\n".join(sections)


def build_fix_prompt(
    pr: PrStatus, feedback_summary: str, issue: Issue | None = None
) -> str:
    header = f"Address the review feedback on pull request #{pr.number}"
    if pr.title:
        header += f" ({pr.title})"
    sections = [header + "."]
    if issue is not None:
        sections.append(f"The PR implements issue #{issue.number}: {issue.title}")
    sections.append("## Feedback\n" + feedback_summary)
    sections.append(
        "Make the requested changes, then commit them. Do not push."
    )
    return "\n\n".join(sections)


def build_commit_message_prompt(
    diff: str, issue_number: int | None = None, issue_title: str | None = None
) -> str:
    lines = [
        "Write a single-line conventional commit message (max 72 characters) "
        "for the following staged changes. Output ONLY the message.",
    ]
    if issue_number is not None:
        lines.append(f"The changes are for issue #{issue_number}: {issue_title or ''}")
    lines.append("")
    lines.append(diff)
    return "\n".join(lines)


def clean_commit_message(output: str) -> str:
    """First line of the assistant's output without quotes or code fences."""
    text = re.sub(r"^```\w*\s*", "", output.strip())
    text = re.sub(r"\s*```$", "", text)
    message = text.strip().split("\n")[0].strip()
    for quote in ('"', "'", "`"):
        if len(message) >= 2 and message.startswith(quote) and message.endswith(quote):
            message = message[1:-1]
            break
    return message


def build_ticket_prompt(
    description: str,
    config: Config,
    agent_instructions: str | None = None,
    hints: str | None = None,
) -> str:
    labels = config.labels
    sections = [
        "You are writing a GitHub issue for a project that uses an "
        "AI-assisted development workflow.",
        f"User request: {description}",
    ]
    if agent_instructions:
        sections.append("## Project Instructions\n" + agent_instructions.strip())
    if hints:
        sections.append("## Additional Context\n" + hints.strip())
    sections.append(
        'Start your output with "TITLE:" and a concise issue title in the '
        "imperative mood, under 100 characters. Continue on the next line "
        'with "## Description". No preamble or commentary.'
    )
    sections.append(
        "TITLE: <title>\n\n"
        "## Description\n<what needs to be done, from the user's point of view>\n\n"
        "## Technical Context\n"
        f"**Type:** {' | '.join(labels.types)}\n"
        f"**Area:** {' | '.join(labels.areas)}\n"
        f"**Priority:** {' | '.join(labels.priorities)}\n"
        f"**Risk:** {' | '.join(labels.risks)}\n\n"
        "## Implementation Steps\n- [ ] <specific technical task>\n\n"
        "## Testing Requirements\n- <what to test>\n\n"
        "## Acceptance Criteria\n- [ ] <criterion>"
    )
    sections.append(
        "After the issue, on its own line, output the metadata in exactly "
        "this format:\n"
        "META:type=<type>,priority=<priority>,risk=<risk>,area=<area>"
    )
    return "\n\n".join(sections)


_META_RE = re.compile(r"META:type=(\w+),priority=(\w+),risk=(\w+),area=(\w+)")


def parse_ticket_meta(output: str) -> dict[str, str] | None:
    """The type/priority/risk/area values from the META line, if there is one."""
    match = _META_RE.search(output)
    if match is None:
        return None
    return dict(zip(("type", "priority", "risk", "area"), match.groups()))


def extract_issue_body(output: str) -> str:
    """Issue body without the TITLE line, the META line or any preamble."""
    body = re.sub(
        r"\n?META:type=\w+,priority=\w+,risk=\w+,area=\w+\s*$", "", output.strip()
    ).strip()
    body = re.sub(r"^TITLE:\s*.+\n+", "", body)
    start = body.find("## Description")
    if start > 0:
        body = body[start:]
    return body


def extract_title(output: str) -> str | None:
    match = re.search(r"^TITLE:\s*(.+)$", output, re.MULTILINE)
    if match is None:
        return None
    title = match.group(1).strip()
    for quote in ('"', "'"):
        if len(title) >= 2 and title.startswith(quote) and title.endswith(quote):
            title = title[1:-1]
            break
    # An unfilled template placeholder
    if ("[" in title and "]" in title) or ("<" in title and ">" in title):
        return None
    if not 5 <= len(title) <= 200:
        return None
    return title


def build_pr_prompt(
    issue: Issue | None, commits: list[str], changed_files: list[str]
) -> str:
    sections = ["Write a pull request description for the following changes."]
    if issue is not None:
        related = f"## Related Issue\n#{issue.number}: {issue.title}"
        if issue.body.strip():
            related += "\n\n" + issue.body.strip()
        sections.append(related)
    sections.append("## Commits\n" + "\n".join(f"- {c}" for c in commits))
    if changed_files:
        sections.append("## Changed Files\n" + "\n".join(changed_files))
    template = (
        "Use this format:\n\n"
        "## Summary\n- <1-3 bullet points summarizing the changes>\n\n"
        "## Test Plan\n- [ ] <testing steps>"
    )
    if issue is not None:
        template += f"\n\nCloses #{issue.number}"
    sections.append(template)
    sections.append("Only output the PR description, nothing else.")
    return "\n\n".join(sections)

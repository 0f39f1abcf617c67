from __future__ import annotations

import os
import re

from gent import git
from gent.config import Config
from gent.models import BranchInfo

BRANCH_TYPES = "feature|fix|refactor|chore|docs|test"

# author/type-issue-slug, e.g. ro/feature-123-add-login
_AUTHOR_PATTERN = re.compile(rf"^([^/]+)/({BRANCH_TYPES})-(\d+)-(.+)$")
# type/issue-slug, e.g. feature/123-add-login
_TYPE_PATTERN = re.compile(rf"^({BRANCH_TYPES})/(\d+)-(.+)$")
# issue-slug, e.g. 123-add-login
_ISSUE_PATTERN = re.compile(r"^(\d+)-(.+)$")
_ANY_NUMBER = re.compile(r"(\d+)")


def sanitize_slug(title: str, max_length: int = 40) -> str:
    """Convert text to a branch-safe slug (lowercase, dashes, no special chars)."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug[:max_length]


def parse_branch_name(branch: str) -> BranchInfo | None:
    """Parse a branch name into its author, type, issue number and slug.

    Falls back to the first number anywhere in the name; returns None when
    the name carries no number at all.
    """
    match = _AUTHOR_PATTERN.match(branch)
    if match:
        return BranchInfo(
            name=branch,
            author=match.group(1),
            type=match.group(2),
            issue_number=int(match.group(3)),
            slug=match.group(4),
        )

    match = _TYPE_PATTERN.match(branch)
    if match:
        return BranchInfo(
            name=branch,
            author="",
            type=match.group(1),
            issue_number=int(match.group(2)),
            slug=match.group(3),
        )

    match = _ISSUE_PATTERN.match(branch)
    if match:
        return BranchInfo(
            name=branch,
            author="",
            type="feature",
            issue_number=int(match.group(1)),
            slug=match.group(2),
        )

    match = _ANY_NUMBER.search(branch)
    if match:
        return BranchInfo(
            name=branch,
            author="",
            type="feature",
            issue_number=int(match.group(1)),
            slug=branch,
        )

    return None


def extract_issue_number(branch: str) -> int | None:
    info = parse_branch_name(branch)
    return info.issue_number if info else None


def resolve_author(config: Config) -> str:
    if config.branch.author_source == "env":
        value = os.environ.get(config.branch.author_env_var)
        if value:
            return value
    return git.author_initials()


def generate_branch_name(
    config: Config, issue_number: int, issue_title: str, type: str
) -> str:
    """Fill the configured branch pattern for an issue."""
    return (
        config.branch.pattern.replace("{author}", resolve_author(config))
        .replace("{type}", type)
        .replace("{issue}", str(issue_number))
        .replace("{slug}", sanitize_slug(issue_title))
    )

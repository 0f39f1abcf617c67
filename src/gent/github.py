"""GitHub issue, PR and label operations via the `gh` CLI."""

from __future__ import annotations

import json
import re
import subprocess
from typing import Any

from gent.models import (
    Issue,
    Label,
    PrComment,
    PrStatus,
    RepoIdentity,
    Review,
    ReviewComment,
    ReviewData,
    ReviewThread,
)


class GitHubUnavailableError(Exception):
    """Raised when the `gh` CLI is unavailable or returns an error."""

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__(
            f"GitHub CLI unavailable: {reason}" if reason else "GitHub CLI unavailable."
        )


REVIEW_THREADS_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      reviewThreads(first: 100) {
        nodes {
          isResolved
          path
          line
          comments(first: 50) {
            nodes { databaseId author { login } body path line createdAt }
          }
        }
      }
    }
  }
}
"""


def _gh(*args: str, cwd: str | None = None, timeout: int = 30) -> str:
    """Run a gh command and return stdout. Raises GitHubUnavailableError."""
    try:
        result = subprocess.run(
            ["gh", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
    except subprocess.CalledProcessError as e:
        raise GitHubUnavailableError((e.stderr or "").strip()) from e
    except subprocess.TimeoutExpired as e:
        raise GitHubUnavailableError(f"gh {args[0]} timed out") from e
    except FileNotFoundError as e:
        raise GitHubUnavailableError("gh is not installed") from e
    return result.stdout


def _gh_json(*args: str, cwd: str | None = None) -> Any:
    output = _gh(*args, cwd=cwd)
    try:
        return json.loads(output)
    except json.JSONDecodeError as e:
        raise GitHubUnavailableError(f"unexpected output from gh {args[0]}") from e


def check_gh_auth() -> bool:
    try:
        _gh("auth", "status")
    except GitHubUnavailableError:
        return False
    return True


def _issue_from_json(data: dict[str, Any]) -> Issue:
    assignees = data.get("assignees") or []
    return Issue(
        number=data["number"],
        title=data["title"],
        body=data.get("body") or "",
        labels=tuple(label["name"] for label in data.get("labels", [])),
        state=data.get("state", "open").lower(),
        url=data.get("url", ""),
        assignee=assignees[0]["login"] if assignees else None,
    )


def get_issue(number: int, cwd: str | None = None) -> Issue:
    data = _gh_json(
        "issue",
        "view",
        str(number),
        "--json",
        "number,title,body,labels,state,assignees,url",
        cwd=cwd,
    )
    return _issue_from_json(data)


def list_issues(
    labels: list[str] | None = None,
    state: str = "open",
    limit: int = 50,
    cwd: str | None = None,
) -> list[Issue]:
    args = ["issue", "list", "--json", "number,title,body,labels,state,url"]
    if labels:
        args += ["--label", ",".join(labels)]
    args += ["--state", state, "--limit", str(limit)]
    return [_issue_from_json(d) for d in _gh_json(*args, cwd=cwd)]


def create_issue(
    title: str, body: str, labels: list[str] | None = None, cwd: str | None = None
) -> int:
    """Create an issue and return its number."""
    args = ["issue", "create", "--title", title, "--body", body]
    if labels:
        args += ["--label", ",".join(labels)]
    output = _gh(*args, cwd=cwd)
    match = re.search(r"/issues/(\d+)", output)
    if match is None:
        raise GitHubUnavailableError("could not read issue number from gh output")
    return int(match.group(1))


def update_issue_labels(
    number: int,
    add: list[str] | None = None,
    remove: list[str] | None = None,
    cwd: str | None = None,
) -> None:
    args = ["issue", "edit", str(number)]
    if add:
        args += ["--add-label", ",".join(add)]
    if remove:
        args += ["--remove-label", ",".join(remove)]
    _gh(*args, cwd=cwd)


def get_pr_status(cwd: str | None = None) -> PrStatus | None:
    """Return the PR for the current branch, or None if there is none."""
    try:
        data = _gh_json(
            "pr",
            "view",
            "--json",
            "number,title,url,state,isDraft,reviewDecision",
            cwd=cwd,
        )
    except GitHubUnavailableError as e:
        if "no pull requests found" in e.reason.lower():
            return None
        raise
    return PrStatus(
        number=data["number"],
        title=data.get("title", ""),
        url=data.get("url", ""),
        state=data.get("state", "OPEN").lower(),
        is_draft=bool(data.get("isDraft", False)),
        review_decision=data.get("reviewDecision") or None,
    )


def _login(author: dict[str, Any] | None) -> str:
    return (author or {}).get("login", "")


def get_pr_review_data(
    number: int, repo: RepoIdentity | None = None, cwd: str | None = None
) -> ReviewData:
    """Fetch reviews and PR comments; review threads too when repo is known."""
    data = _gh_json("pr", "view", str(number), "--json", "reviews,comments", cwd=cwd)
    reviews = [
        Review(
            author=_login(r.get("author")),
            body=r.get("body") or "",
            state=r.get("state", ""),
            submitted_at=r.get("submittedAt"),
        )
        for r in data.get("reviews", [])
    ]
    comments = [
        PrComment(
            author=_login(c.get("author")),
            body=c.get("body") or "",
            id=c.get("id"),
            created_at=c.get("createdAt"),
        )
        for c in data.get("comments", [])
    ]

    threads: list[ReviewThread] = []
    if repo is not None:
        result = _gh_json(
            "api",
            "graphql",
            "-F",
            f"owner={repo.owner}",
            "-F",
            f"repo={repo.repo}",
            "-F",
            f"number={number}",
            "-f",
            f"query={REVIEW_THREADS_QUERY}",
            cwd=cwd,
        )
        nodes = (
            result.get("data", {})
            .get("repository", {})
            .get("pullRequest", {})
            .get("reviewThreads", {})
            .get("nodes", [])
        )
        for node in nodes:
            threads.append(
                ReviewThread(
                    is_resolved=node.get("isResolved"),
                    path=node.get("path"),
                    line=node.get("line"),
                    comments=[
                        ReviewComment(
                            author=_login(c.get("author")),
                            body=c.get("body") or "",
                            id=c.get("databaseId"),
                            path=c.get("path"),
                            line=c.get("line"),
                            created_at=c.get("createdAt"),
                        )
                        for c in node.get("comments", {}).get("nodes", [])
                    ],
                )
            )

    return ReviewData(reviews=reviews, review_threads=threads, comments=comments)


def labels_exist(names: list[str], cwd: str | None = None) -> bool:
    """True if every label in `names` exists on the repository."""
    data = _gh_json("label", "list", "--json", "name", "--limit", "200", cwd=cwd)
    existing = {label["name"] for label in data}
    return all(name in existing for name in names)


def create_label(label: Label, cwd: str | None = None) -> None:
    _gh(
        "label",
        "create",
        label.name,
        "--color",
        label.color,
        "--description",
        label.description,
        "--force",
        cwd=cwd,
    )


def create_pull_request(
    title: str,
    body: str,
    base: str | None = None,
    draft: bool = False,
    cwd: str | None = None,
) -> str:
    """Create a PR for the current branch and return its URL."""
    args = ["pr", "create", "--title", title, "--body", body, "--assignee", "@me"]
    if base:
        args += ["--base", base]
    if draft:
        args.append("--draft")
    return _gh(*args, cwd=cwd, timeout=60).strip()


def create_repo(name: str, private: bool = True, cwd: str | None = None) -> str:
    """Create a GitHub repo from the current directory, push, return its URL."""
    visibility = "--private" if private else "--public"
    output = _gh(
        "repo",
        "create",
        name,
        visibility,
        "--source",
        ".",
        "--remote",
        "origin",
        "--push",
        cwd=cwd,
        timeout=120,
    )
    return output.strip()

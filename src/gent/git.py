"""Local repository queries and operations via the `git` CLI."""

from __future__ import annotations

import re
import subprocess

from gent.models import RepoIdentity

MAIN_BRANCHES = ("main", "master")


class GitError(Exception):
    """Raised when a git command fails or git is not installed."""

    def __init__(self, args: list[str], stderr: str = "") -> None:
        self.command = ["git", *args]
        self.stderr = stderr.strip()
        message = f"git {' '.join(args)} failed"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


def _git(*args: str, cwd: str | None = None) -> str:
    """Run a git command and return stripped stdout. Raises GitError."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise GitError(list(args), e.stderr or "") from e
    except FileNotFoundError as e:
        raise GitError(list(args), "git is not installed") from e
    return result.stdout.strip()


def is_git_repo(cwd: str | None = None) -> bool:
    try:
        _git("rev-parse", "--git-dir", cwd=cwd)
    except GitError:
        return False
    return True


def current_branch(cwd: str | None = None) -> str:
    return _git("branch", "--show-current", cwd=cwd)


def is_on_main_branch(cwd: str | None = None) -> bool:
    return current_branch(cwd) in MAIN_BRANCHES


def default_branch(cwd: str | None = None) -> str:
    """Return the remote's default branch, falling back to main/master."""
    try:
        ref = _git("symbolic-ref", "refs/remotes/origin/HEAD", cwd=cwd)
        return ref.removeprefix("refs/remotes/origin/")
    except GitError:
        pass
    try:
        _git("rev-parse", "--verify", "main", cwd=cwd)
        return "main"
    except GitError:
        return "master"


def has_uncommitted_changes(cwd: str | None = None) -> bool:
    return bool(_git("status", "--porcelain", cwd=cwd))


def status_short(cwd: str | None = None) -> str:
    return _git("status", "--short", cwd=cwd)


def unpushed_commits_exist(cwd: str | None = None) -> bool:
    """True if HEAD has commits the upstream lacks, or no upstream is set."""
    try:
        return bool(_git("log", "@{u}..HEAD", "--oneline", cwd=cwd))
    except GitError:
        return True


def commits_since_base(base: str = "main", cwd: str | None = None) -> list[str]:
    """Subjects of commits on HEAD not on base, newest first."""
    try:
        output = _git("log", f"{base}..HEAD", "--pretty=format:%s", cwd=cwd)
    except GitError:
        return []
    return [line for line in output.splitlines() if line]


def changed_files(base: str = "main", cwd: str | None = None) -> list[str]:
    try:
        output = _git("diff", f"{base}...HEAD", "--name-only", cwd=cwd)
    except GitError:
        return []
    return [line for line in output.splitlines() if line]


def last_commit_timestamp(cwd: str | None = None) -> str | None:
    """ISO-8601 committer date of HEAD, or None for an empty repository."""
    try:
        return _git("log", "-1", "--format=%cI", cwd=cwd) or None
    except GitError:
        return None


def parse_remote_url(url: str) -> RepoIdentity | None:
    """Extract owner/repo from a GitHub SSH or HTTPS remote URL."""
    match = re.search(r"github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$", url.strip())
    if match is None:
        return None
    return RepoIdentity(owner=match.group(1), repo=match.group(2))


def repo_identity(cwd: str | None = None) -> RepoIdentity | None:
    """Return the GitHub identity of `origin`, or None if there is no such remote."""
    try:
        url = _git("config", "--get", "remote.origin.url", cwd=cwd)
    except GitError:
        return None
    return parse_remote_url(url)


def author_initials(cwd: str | None = None) -> str:
    """Initials from git config user.initials, else derived from user.name."""
    try:
        initials = _git("config", "user.initials", cwd=cwd)
        if initials:
            return initials
    except GitError:
        pass
    try:
        name = _git("config", "user.name", cwd=cwd)
    except GitError:
        return "dev"
    parts = name.split()
    return "".join(p[0].lower() for p in parts) or "dev"


def stage_all(cwd: str | None = None) -> None:
    _git("add", "-A", cwd=cwd)


def reset_staged(cwd: str | None = None) -> None:
    _git("reset", "HEAD", cwd=cwd)


def staged_diff(cwd: str | None = None, limit: int = 4000) -> str:
    """Diff stat plus patch of the staged changes, capped at `limit` chars."""
    stat = _git("diff", "--cached", "--stat", cwd=cwd)
    patch = _git("diff", "--cached", cwd=cwd)
    return (stat + "\n\n" + patch)[:limit]


def commit(message: str, cwd: str | None = None) -> None:
    _git("commit", "-m", message, cwd=cwd)


def push_branch(branch: str | None = None, cwd: str | None = None) -> None:
    _git("push", "-u", "origin", branch or current_branch(cwd), cwd=cwd)


def checkout(branch: str, cwd: str | None = None) -> None:
    _git("checkout", branch, cwd=cwd)


def branch_exists(name: str, cwd: str | None = None) -> bool:
    try:
        _git("rev-parse", "--verify", "--quiet", f"refs/heads/{name}", cwd=cwd)
    except GitError:
        return False
    return True


def create_branch(name: str, start_point: str | None = None, cwd: str | None = None) -> None:
    args = ["checkout", "-b", name]
    if start_point:
        args.append(start_point)
    _git(*args, cwd=cwd)


def pull(cwd: str | None = None) -> None:
    _git("pull", cwd=cwd)

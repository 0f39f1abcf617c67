from __future__ import annotations

import subprocess

import pytest

from gent import git
from gent.git import GitError
from gent.models import RepoIdentity


def _run(repo, *args):
    subprocess.run(["git", "-C", str(repo), *args], check=True, capture_output=True)


@pytest.fixture
def git_repo(tmp_path):
    repo = tmp_path / "myrepo"
    repo.mkdir()
    subprocess.run(
        ["git", "init", "-b", "main", str(repo)], check=True, capture_output=True
    )
    _run(repo, "config", "user.name", "Ro Ortega")
    _run(repo, "config", "user.email", "ro@example.com")
    _run(repo, "commit", "--allow-empty", "-m", "init")
    return repo


def test_is_git_repo(git_repo, tmp_path):
    assert git.is_git_repo(str(git_repo))
    outside = tmp_path / "plain"
    outside.mkdir()
    assert not git.is_git_repo(str(outside))


def test_branch_queries(git_repo):
    cwd = str(git_repo)
    assert git.current_branch(cwd) == "main"
    assert git.is_on_main_branch(cwd)
    assert git.default_branch(cwd) == "main"

    git.create_branch("ro/feature-1-thing", cwd=cwd)
    assert git.current_branch(cwd) == "ro/feature-1-thing"
    assert not git.is_on_main_branch(cwd)


def test_uncommitted_changes_and_commit(git_repo):
    cwd = str(git_repo)
    assert not git.has_uncommitted_changes(cwd)
    (git_repo / "a.txt").write_text("hello\n")
    assert git.has_uncommitted_changes(cwd)
    assert "a.txt" in git.status_short(cwd)

    git.stage_all(cwd)
    assert "hello" in git.staged_diff(cwd)
    git.commit("feat: add a", cwd=cwd)
    assert not git.has_uncommitted_changes(cwd)


def test_reset_staged(git_repo):
    cwd = str(git_repo)
    (git_repo / "a.txt").write_text("hello\n")
    git.stage_all(cwd)
    git.reset_staged(cwd)
    assert git.staged_diff(cwd).strip() == ""
    assert git.has_uncommitted_changes(cwd)


def test_commits_and_changed_files_since_base(git_repo):
    cwd = str(git_repo)
    git.create_branch("feature", cwd=cwd)
    for name in ("one", "two"):
        (git_repo / f"{name}.tsx").write_text(name)
        git.stage_all(cwd)
        git.commit(f"feat: {name}", cwd=cwd)

    assert git.commits_since_base("main", cwd) == ["feat: two", "feat: one"]
    assert sorted(git.changed_files("main", cwd)) == ["one.tsx", "two.tsx"]
    assert git.last_commit_timestamp(cwd)


def test_commits_since_unknown_base(git_repo):
    assert git.commits_since_base("nope", str(git_repo)) == []


def test_unpushed_without_upstream(git_repo):
    assert git.unpushed_commits_exist(str(git_repo))


def test_checkout(git_repo):
    cwd = str(git_repo)
    git.create_branch("other", cwd=cwd)
    git.checkout("main", cwd=cwd)
    assert git.current_branch(cwd) == "main"


def test_checkout_unknown_branch_raises(git_repo):
    with pytest.raises(GitError) as excinfo:
        git.checkout("does-not-exist", cwd=str(git_repo))
    assert excinfo.value.command == ["git", "checkout", "does-not-exist"]
    assert excinfo.value.stderr


@pytest.mark.parametrize(
    "url",
    [
        "git@github.com:octo/widgets.git",
        "https://github.com/octo/widgets.git",
        "https://github.com/octo/widgets",
        "ssh://git@github.com/octo/widgets.git",
    ],
)
def test_parse_remote_url(url):
    assert git.parse_remote_url(url) == RepoIdentity(owner="octo", repo="widgets")


def test_parse_remote_url_not_github():
    assert git.parse_remote_url("https://gitlab.com/octo/widgets.git") is None


def test_repo_identity(git_repo):
    cwd = str(git_repo)
    assert git.repo_identity(cwd) is None
    _run(git_repo, "remote", "add", "origin", "git@github.com:octo/widgets.git")
    assert git.repo_identity(cwd) == RepoIdentity(owner="octo", repo="widgets")


def test_author_initials(git_repo):
    cwd = str(git_repo)
    assert git.author_initials(cwd) == "ro"
    _run(git_repo, "config", "user.initials", "rox")
    assert git.author_initials(cwd) == "rox"


def test_branch_exists(git_repo):
    cwd = str(git_repo)
    assert git.branch_exists("main", cwd)
    assert not git.branch_exists("ro/feature-9-x", cwd)
    git.create_branch("ro/feature-9-x", cwd=cwd)
    assert git.branch_exists("ro/feature-9-x", cwd)

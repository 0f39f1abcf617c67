from __future__ import annotations

import itertools
from dataclasses import replace

import pytest

from gent.config import Config, VideoConfig
from gent.models import Issue, PrStatus
from gent.tui.actions import ACTIONS, available_actions
from gent.tui.state import StateSnapshot

ISSUE = Issue(
    number=123,
    title="Add login",
    body="",
    labels=("ai-ready",),
    state="open",
    url="https://github.com/o/r/issues/123",
)


def _pr(state: str = "open") -> PrStatus:
    return PrStatus(number=7, title="Add login", url="https://github.com/o/r/pull/7", state=state)


def _ready(**overrides) -> StateSnapshot:
    """A fully set-up repository on a feature branch."""
    base = StateSnapshot(
        is_git_repo=True,
        is_gh_authenticated=True,
        is_ai_provider_available=True,
        has_config=True,
        branch="ro/feature-123-add-login",
        has_valid_remote=True,
        has_labels=True,
        issue=ISSUE,
        workflow_status="ready",
    )
    return replace(base, **overrides)


def _ids(state: StateSnapshot) -> list[str]:
    return [a.id for a in available_actions(state)]


def test_not_a_repo_only_quit():
    assert _ids(StateSnapshot(is_git_repo=False, is_gh_authenticated=True)) == ["quit"]


def test_not_authenticated_only_quit():
    assert _ids(_ready(is_gh_authenticated=False)) == ["quit"]


def test_shortcuts_unique_in_table():
    shortcuts = [shortcut for _, shortcut in ACTIONS.values()]
    assert len(shortcuts) == len(set(shortcuts))


def _snapshot_grid():
    flags = itertools.product(
        [True, False],  # is_on_main
        [True, False],  # has_config
        [True, False],  # has_valid_remote
        [True, False],  # has_labels
        [True, False],  # has_uncommitted_changes
        [True, False],  # has_unpushed_commits
        [None, "open", "merged", "closed"],
        [True, False],  # has_actionable_feedback
    )
    for on_main, has_config, remote, labels, dirty, unpushed, pr, feedback in flags:
        yield _ready(
            is_on_main=on_main,
            has_config=has_config,
            has_valid_remote=remote,
            has_labels=labels,
            has_uncommitted_changes=dirty,
            has_unpushed_commits=unpushed,
            commits=("feat: one",),
            pr=_pr(pr) if pr else None,
            has_actionable_feedback=feedback,
        )


def test_shortcuts_unique_for_every_snapshot():
    for state in _snapshot_grid():
        shortcuts = [a.shortcut for a in available_actions(state)]
        assert len(shortcuts) == len(set(shortcuts)), state


def test_quit_always_present_and_last():
    for state in _snapshot_grid():
        assert _ids(state)[-1] == "quit"


def test_deterministic():
    state = _ready(commits=("a", "b"), has_uncommitted_changes=True, pr=_pr())
    assert available_actions(state) == available_actions(state)


def test_on_main_offers_create_and_list():
    ids = _ids(_ready(is_on_main=True, branch="main", issue=None))
    assert "create" in ids
    assert "list" in ids
    for action_id in ("commit", "push", "pr"):
        assert action_id not in ids


def test_uncommitted_changes_block_push():
    ids = _ids(
        _ready(has_uncommitted_changes=True, has_unpushed_commits=True, commits=("a",))
    )
    assert "commit" in ids
    assert "push" not in ids


def test_push_when_clean_and_unpushed():
    ids = _ids(_ready(has_unpushed_commits=True, commits=("a",)))
    assert "push" in ids


def test_merged_pr_offers_checkout_main():
    ids = _ids(_ready(pr=_pr("merged"), commits=("a",)))
    assert "checkout-main" in ids
    assert "run" not in ids


def test_fix_requires_open_pr():
    assert "fix" in _ids(_ready(pr=_pr("open"), has_actionable_feedback=True))
    assert "fix" not in _ids(_ready(pr=None, has_actionable_feedback=True))
    assert "fix" not in _ids(_ready(pr=_pr("closed"), has_actionable_feedback=True))


def test_pr_offered_once_commits_exist():
    assert "pr" in _ids(_ready(commits=("a",)))
    assert "pr" not in _ids(_ready(commits=()))
    assert "pr" not in _ids(_ready(commits=("a",), pr=_pr()))


def test_run_requires_issue():
    assert "run" in _ids(_ready())
    assert "run" not in _ids(_ready(issue=None))


@pytest.mark.parametrize("enabled", [True, False])
def test_video_gated_on_config(enabled):
    config = replace(Config(), video=VideoConfig(enabled=enabled))
    state = _ready(
        pr=_pr(), has_ui_changes=True, is_playwright_available=True, config=config
    )
    assert ("video" in _ids(state)) is enabled


def test_missing_config_offers_init_first():
    ids = _ids(_ready(has_config=False))
    assert ids[0] == "init"
    assert "create" not in ids
    assert "run" not in ids


def test_missing_labels_offers_setup_labels():
    ids = _ids(_ready(has_labels=False))
    assert ids[0] == "setup-labels"
    assert "create" not in ids
    assert "list" not in ids


def test_no_remote_offers_github_remote():
    ids = _ids(_ready(has_valid_remote=False, has_labels=False))
    assert "github-remote" in ids
    assert "setup-labels" not in ids
    assert "create" not in ids
    assert "list" not in ids


def test_session_actions_trail():
    assert _ids(_ready())[-3:] == ["refresh", "switch-provider", "quit"]


def test_labels_and_shortcuts():
    by_id = {a.id: a for a in available_actions(_ready(is_on_main=True))}
    assert by_id["create"].label == "new"
    assert by_id["create"].shortcut == "n"
    assert by_id["switch-provider"].label == "ai"

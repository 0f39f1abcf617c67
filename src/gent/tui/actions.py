from __future__ import annotations

from dataclasses import dataclass

from gent.tui.state import StateSnapshot


@dataclass(frozen=True)
class TuiAction:
    id: str
    label: str
    shortcut: str


# id -> (label, shortcut). Shortcuts are unique across the whole table, so
# any subset of it is collision-free.
ACTIONS: dict[str, tuple[str, str]] = {
    "init": ("init", "i"),
    "setup-labels": ("setup-labels", "b"),
    "create": ("new", "n"),
    "commit": ("commit", "c"),
    "push": ("push", "s"),
    "pr": ("pr", "p"),
    "run": ("run", "r"),
    "fix": ("fix", "x"),
    "video": ("video", "v"),
    "checkout-main": ("main", "m"),
    "list": ("list", "l"),
    "github-remote": ("github", "g"),
    "refresh": ("refresh", "f"),
    "switch-provider": ("ai", "a"),
    "quit": ("quit", "q"),
}


def _action(action_id: str) -> TuiAction:
    label, shortcut = ACTIONS[action_id]
    return TuiAction(id=action_id, label=label, shortcut=shortcut)


def available_actions(state: StateSnapshot) -> list[TuiAction]:
    """Ordered actions for a snapshot. Pure: same snapshot, same list."""
    if not state.is_git_repo or not state.is_gh_authenticated:
        return [_action("quit")]

    ids: list[str] = []

    # Setup gates come first so a half-configured repo can't start a workflow
    if not state.has_config:
        ids.append("init")
    elif state.has_valid_remote and not state.has_labels:
        ids.append("setup-labels")

    is_set_up = state.has_config and (not state.has_valid_remote or state.has_labels)
    has_commits = len(state.commits) > 0
    pr_state = state.pr.state if state.pr is not None else None

    if is_set_up and state.has_valid_remote:
        ids.append("create")

    if not state.is_on_main:
        if state.has_uncommitted_changes:
            ids.append("commit")
        if state.has_unpushed_commits and has_commits and not state.has_uncommitted_changes:
            ids.append("push")
        if is_set_up and state.has_valid_remote and state.pr is None and has_commits:
            ids.append("pr")
        if is_set_up and state.issue is not None and pr_state != "merged":
            ids.append("run")
        if pr_state == "open" and state.has_actionable_feedback:
            ids.append("fix")
        if (
            pr_state == "open"
            and state.has_ui_changes
            and state.is_playwright_available
            and state.config.video.enabled
        ):
            ids.append("video")
        if pr_state == "merged":
            ids.append("checkout-main")

    if is_set_up and state.has_valid_remote:
        ids.append("list")
    elif not state.has_valid_remote:
        ids.append("github-remote")

    ids += ["refresh", "switch-provider", "quit"]
    return [_action(action_id) for action_id in ids]

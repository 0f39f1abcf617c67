"""Dashboard state: one immutable snapshot of repository and workflow facts.

`StateAggregator.aggregate()` gathers everything the dashboard shows from the
git, gh and filesystem collaborators. Independent lookups are fanned out on a
thread pool and joined before the snapshot is built. Every lookup is guarded:
a failing collaborator degrades its own field to a neutral value (empty,
None, False) and never aborts the refresh.

Checks that cannot change during a session (gh auth, AI CLI on PATH,
Playwright, repository labels) are kept in an `EnvironmentCache` owned by the
aggregator.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, TypeVar

from gent import ai_provider, config as config_module, git, github, playwright, progress, review
from gent.branch import extract_issue_number, parse_branch_name
from gent.config import Config
from gent.labels import workflow_labels, workflow_status
from gent.models import BranchInfo, FeedbackItem, Issue, PrStatus, RepoIdentity

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StateSnapshot:
    # Prerequisites
    is_git_repo: bool = False
    is_gh_authenticated: bool = False
    is_ai_provider_available: bool = False

    # Configuration
    config: Config = field(default_factory=Config)
    has_config: bool = False
    has_progress: bool = False

    # Git
    branch: str = ""
    branch_info: BranchInfo | None = None
    is_on_main: bool = False
    has_uncommitted_changes: bool = False
    has_unpushed_commits: bool = False
    commits: tuple[str, ...] = ()  # newest first
    base_branch: str = "main"

    # Issue
    issue: Issue | None = None
    workflow_status: str = "none"

    # Pull request
    pr: PrStatus | None = None
    review_feedback: tuple[FeedbackItem, ...] = ()
    has_actionable_feedback: bool = False

    # UI changes
    has_ui_changes: bool = False
    is_playwright_available: bool = False

    # Setup
    has_valid_remote: bool = False
    has_labels: bool = False
    repo: RepoIdentity | None = None


@dataclass
class EnvironmentCache:
    """Session-stable checks. None means not checked yet."""

    is_gh_authenticated: bool | None = None
    is_ai_provider_available: bool | None = None
    is_playwright_available: bool | None = None
    has_labels: bool | None = None

    def reset(self) -> None:
        self.is_gh_authenticated = None
        self.is_ai_provider_available = None
        self.is_playwright_available = None
        self.has_labels = None


class StateAggregator:
    def __init__(
        self,
        cache: EnvironmentCache | None = None,
        *,
        git: Any = git,
        github: Any = github,
        settings: Any = config_module,
        progress: Any = progress,
        review: Any = review,
        ui: Any = playwright,
        ai: Any = ai_provider,
        max_workers: int = 6,
    ) -> None:
        self.cache = cache if cache is not None else EnvironmentCache()
        self.git = git
        self.github = github
        self.settings = settings
        self.progress = progress
        self.review = review
        self.ui = ui
        self.ai = ai
        self.max_workers = max_workers

    def reset_cache(self) -> None:
        self.cache.reset()

    # -- guarded calls --

    def _guard(self, fn: Callable[..., T], default: T, *args: Any) -> T:
        try:
            return fn(*args)
        except Exception:
            logger.debug(
                "State lookup %s failed", getattr(fn, "__name__", fn), exc_info=True
            )
            return default

    def _submit(
        self, pool: ThreadPoolExecutor, fn: Callable[..., T], default: T, *args: Any
    ) -> Future[T]:
        return pool.submit(self._guard, fn, default, *args)

    # -- aggregation --

    def aggregate(self) -> StateSnapshot:
        if not self._guard(self.git.is_git_repo, False):
            return StateSnapshot(config=self._guard(self.settings.load_config, Config()))

        config = self._guard(self.settings.load_config, Config())
        cache = self.cache

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            if cache.is_gh_authenticated is None or cache.is_ai_provider_available is None:
                gh_future = self._submit(pool, self.github.check_gh_auth, False)
                ai_future = self._submit(
                    pool, self.ai.is_provider_available, False, config.provider
                )
                cache.is_gh_authenticated = gh_future.result()
                cache.is_ai_provider_available = ai_future.result()

            branch_f = self._submit(pool, self.git.current_branch, "")
            on_main_f = self._submit(pool, self.git.is_on_main_branch, False)
            uncommitted_f = self._submit(pool, self.git.has_uncommitted_changes, False)
            base_f = self._submit(pool, self.git.default_branch, "main")
            repo_f = self._submit(pool, self.git.repo_identity, None)
            branch = branch_f.result()
            is_on_main = on_main_f.result()
            uncommitted = uncommitted_f.result()
            base_branch = base_f.result()
            repo = repo_f.result()

            has_config = self._guard(self.settings.config_exists, False)
            has_progress = self._guard(self.progress.progress_exists, False, config)

            commits_f = self._submit(pool, self.git.commits_since_base, [], base_branch)
            unpushed_f = self._submit(pool, self.git.unpushed_commits_exist, False)
            commits = tuple(commits_f.result())
            unpushed = unpushed_f.result()

            has_remote = repo is not None
            if has_remote and cache.has_labels is None:
                cache.has_labels = self._guard(
                    self.github.labels_exist, False, list(workflow_labels(config).values())
                )

            issue: Issue | None = None
            pr: PrStatus | None = None
            feedback: list[FeedbackItem] = []
            ui_changes = False
            playwright_available = False

            if not is_on_main:
                issue_number = extract_issue_number(branch)
                issue_f = (
                    self._submit(pool, self.github.get_issue, None, issue_number)
                    if issue_number is not None
                    else None
                )
                pr_f = self._submit(pool, self.github.get_pr_status, None)
                files_f = self._submit(pool, self.ui.changed_files, [], base_branch)
                playwright_f = (
                    self._submit(pool, self.ui.is_playwright_available, False)
                    if cache.is_playwright_available is None
                    else None
                )

                issue = issue_f.result() if issue_f is not None else None
                pr = pr_f.result()
                ui_changes = self._guard(self.ui.has_ui_changes, False, files_f.result())
                if playwright_f is not None:
                    cache.is_playwright_available = playwright_f.result()
                playwright_available = bool(cache.is_playwright_available)

                if pr is not None and pr.state == "open":
                    feedback = self._guard(self._review_feedback, [], pr, repo)

        return StateSnapshot(
            is_git_repo=True,
            is_gh_authenticated=bool(cache.is_gh_authenticated),
            is_ai_provider_available=bool(cache.is_ai_provider_available),
            config=config,
            has_config=has_config,
            has_progress=has_progress,
            branch=branch,
            branch_info=parse_branch_name(branch) if branch else None,
            is_on_main=is_on_main,
            has_uncommitted_changes=uncommitted,
            has_unpushed_commits=unpushed,
            commits=commits,
            base_branch=base_branch,
            issue=issue,
            workflow_status=workflow_status(issue.labels, config) if issue else "none",
            pr=pr,
            review_feedback=tuple(feedback),
            has_actionable_feedback=bool(feedback),
            has_ui_changes=ui_changes,
            is_playwright_available=playwright_available,
            has_valid_remote=has_remote,
            has_labels=bool(cache.has_labels) if has_remote else False,
            repo=repo,
        )

    def _review_feedback(
        self, pr: PrStatus, repo: RepoIdentity | None
    ) -> list[FeedbackItem]:
        """Review items newer than the last local commit."""
        after = self.git.last_commit_timestamp()
        data = self.github.get_pr_review_data(pr.number, repo)
        return list(self.review.summarize(data, after_timestamp=after).items)

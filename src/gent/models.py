from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BranchInfo:
    name: str
    author: str
    type: str  # feature, fix, refactor, chore, docs, test
    issue_number: int
    slug: str


@dataclass(frozen=True)
class RepoIdentity:
    owner: str
    repo: str


@dataclass(frozen=True)
class Issue:
    number: int
    title: str
    body: str
    labels: tuple[str, ...]
    state: str  # open, closed
    url: str
    assignee: str | None = None


@dataclass(frozen=True)
class PrStatus:
    number: int
    title: str
    url: str
    state: str  # open, closed, merged
    is_draft: bool = False
    review_decision: str | None = None  # APPROVED, CHANGES_REQUESTED, REVIEW_REQUIRED


@dataclass(frozen=True)
class Label:
    name: str
    color: str
    description: str = ""


@dataclass
class Review:
    author: str
    body: str
    state: str
    submitted_at: str | None = None


@dataclass
class ReviewComment:
    author: str
    body: str
    id: int | str | None = None
    path: str | None = None
    line: int | None = None
    created_at: str | None = None


@dataclass
class ReviewThread:
    comments: list[ReviewComment] = field(default_factory=list)
    is_resolved: bool | None = None
    path: str | None = None
    line: int | None = None


@dataclass
class PrComment:
    author: str
    body: str
    id: str | None = None
    created_at: str | None = None


@dataclass
class ReviewData:
    reviews: list[Review] = field(default_factory=list)
    review_threads: list[ReviewThread] = field(default_factory=list)
    comments: list[PrComment] = field(default_factory=list)


@dataclass(frozen=True)
class FeedbackItem:
    source: str  # review, thread, comment
    author: str
    body: str
    state: str | None = None
    path: str | None = None
    line: int | None = None
    comment_id: int | str | None = None

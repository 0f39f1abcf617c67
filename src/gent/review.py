"""Review feedback: reduce PR reviews, threads and comments to actionable items."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

from gent.models import FeedbackItem, ReviewComment, ReviewData, ReviewThread

ACTIONABLE_KEYWORDS = (
    "todo",
    "fix",
    "should",
    "must",
    "needs",
    "please",
    "consider",
    "can you",
    "change",
    "update",
    "remove",
    "add",
)

TRIVIAL_COMMENTS = ("lgtm", "looks good", "approved")


@dataclass
class FeedbackSummary:
    items: list[FeedbackItem] = field(default_factory=list)
    summary: str = ""


def _parse_timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _is_after(item_ts: str | None, after_ts: str | None) -> bool:
    """Items without a timestamp, or with no cutoff, always count as recent."""
    if not item_ts or not after_ts:
        return True
    item_dt = _parse_timestamp(item_ts)
    after_dt = _parse_timestamp(after_ts)
    if item_dt is None or after_dt is None:
        return True
    return item_dt > after_dt


def is_actionable_text(text: str) -> bool:
    normalized = text.lower()
    return any(keyword in normalized for keyword in ACTIONABLE_KEYWORDS)


def is_trivial_comment(text: str) -> bool:
    return text.strip().lower() in TRIVIAL_COMMENTS


def _is_unresolved(thread: ReviewThread) -> bool:
    return thread.is_resolved is not True


def _latest_meaningful(comments: list[ReviewComment]) -> ReviewComment | None:
    for comment in reversed(comments):
        body = comment.body.strip()
        if body and not is_trivial_comment(body):
            return comment
    return None


def extract_items(
    data: ReviewData, after_timestamp: str | None = None
) -> list[FeedbackItem]:
    """Collect actionable feedback newer than `after_timestamp`.

    Unresolved threads are always included; resolved threads only when they
    have comments after the cutoff and one of them reads as actionable.
    """
    items: list[FeedbackItem] = []

    for review in data.reviews:
        body = review.body.strip()
        if not body or is_trivial_comment(body):
            continue
        if not _is_after(review.submitted_at, after_timestamp):
            continue
        if review.state != "CHANGES_REQUESTED" and not is_actionable_text(body):
            continue
        items.append(
            FeedbackItem(source="review", author=review.author, body=body, state=review.state)
        )

    for thread in data.review_threads:
        if _is_unresolved(thread):
            pass
        elif not any(_is_after(c.created_at, after_timestamp) for c in thread.comments):
            continue
        elif not any(is_actionable_text(c.body) for c in thread.comments):
            continue

        latest = _latest_meaningful(thread.comments)
        if latest is None:
            continue
        items.append(
            FeedbackItem(
                source="thread",
                author=latest.author,
                body=latest.body,
                path=thread.path or latest.path,
                line=thread.line or latest.line,
                comment_id=latest.id,
            )
        )

    for comment in data.comments:
        body = comment.body.strip()
        if not body or is_trivial_comment(body):
            continue
        if not _is_after(comment.created_at, after_timestamp):
            continue
        if not is_actionable_text(body):
            continue
        items.append(
            FeedbackItem(
                source="comment", author=comment.author, body=body, comment_id=comment.id
            )
        )

    return items


def _truncate_comment(body: str, max_length: int = 200) -> str:
    normalized = re.sub(r"\s+", " ", body).strip()
    if len(normalized) <= max_length:
        return normalized
    return normalized[: max_length - 3] + "..."


def _location(item: FeedbackItem) -> str:
    if item.path and item.line:
        return f"{item.path}:{item.line}"
    return item.path or "Thread"


def format_summary(items: list[FeedbackItem]) -> str:
    """Format feedback items as a markdown bullet list."""
    lines = []
    for item in items:
        author = f"@{item.author}" if item.author else "Reviewer"
        if item.source == "review":
            state = item.state.replace("_", " ").lower() if item.state else None
            header = f"Review ({state})" if state else "Review"
        elif item.source == "comment":
            header = "Comment"
        else:
            header = _location(item)
        lines.append(f"- [{header}] {author}: {_truncate_comment(item.body)}")
    return "\n".join(lines)


def summarize(data: ReviewData, after_timestamp: str | None = None) -> FeedbackSummary:
    items = extract_items(data, after_timestamp=after_timestamp)
    return FeedbackSummary(items=items, summary=format_summary(items) if items else "")

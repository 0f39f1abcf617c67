"""Tests for review feedback summarisation."""

from __future__ import annotations

from gent.models import (
    FeedbackItem,
    PrComment,
    Review,
    ReviewComment,
    ReviewData,
    ReviewThread,
)
from gent.review import (
    format_summary,
    is_actionable_text,
    is_trivial_comment,
    summarize,
)

CUTOFF = "2024-05-01T12:00:00Z"
BEFORE = "2024-05-01T11:00:00Z"
AFTER = "2024-05-01T13:00:00Z"


def test_actionable_keywords():
    assert is_actionable_text("Please rename this")
    assert is_actionable_text("This SHOULD be async")
    assert not is_actionable_text("Nice work")


def test_trivial_comments():
    assert is_trivial_comment("LGTM")
    assert is_trivial_comment("  looks good ")
    assert not is_trivial_comment("looks good but fix the test")


def test_empty_data():
    result = summarize(ReviewData())
    assert result.items == []
    assert result.summary == ""


def test_changes_requested_review_always_counts():
    data = ReviewData(reviews=[Review("alice", "Not quite there", "CHANGES_REQUESTED", AFTER)])
    items = summarize(data, CUTOFF).items
    assert len(items) == 1
    assert items[0].source == "review"
    assert items[0].state == "CHANGES_REQUESTED"


def test_commented_review_needs_keyword():
    data = ReviewData(
        reviews=[
            Review("alice", "Interesting approach", "COMMENTED", AFTER),
            Review("bob", "Please add a test", "COMMENTED", AFTER),
        ]
    )
    assert [i.author for i in summarize(data).items] == ["bob"]


def test_trivial_and_empty_reviews_skipped():
    data = ReviewData(
        reviews=[
            Review("alice", "LGTM", "APPROVED", AFTER),
            Review("bob", "", "CHANGES_REQUESTED", AFTER),
        ]
    )
    assert summarize(data).items == []


def test_old_feedback_filtered_by_timestamp():
    data = ReviewData(
        reviews=[Review("alice", "Please fix", "COMMENTED", BEFORE)],
        comments=[PrComment("bob", "Please update docs", "c1", BEFORE)],
    )
    assert summarize(data, CUTOFF).items == []
    assert len(summarize(data).items) == 2


def test_unresolved_thread_included_regardless_of_age():
    thread = ReviewThread(
        comments=[ReviewComment("alice", "Odd name", 1, "a.py", 3, BEFORE)],
        is_resolved=False,
        path="a.py",
        line=3,
    )
    items = summarize(ReviewData(review_threads=[thread]), CUTOFF).items
    assert len(items) == 1
    assert items[0].path == "a.py"
    assert items[0].line == 3
    assert items[0].comment_id == 1


def test_resolved_thread_needs_recent_actionable_comment():
    stale = ReviewThread(
        comments=[ReviewComment("alice", "Please fix", 1, created_at=BEFORE)],
        is_resolved=True,
    )
    chatty = ReviewThread(
        comments=[ReviewComment("alice", "Thanks!", 2, created_at=AFTER)],
        is_resolved=True,
    )
    reopened = ReviewThread(
        comments=[ReviewComment("alice", "Still needs a test", 3, created_at=AFTER)],
        is_resolved=True,
    )
    data = ReviewData(review_threads=[stale, chatty, reopened])
    items = summarize(data, CUTOFF).items
    assert [i.comment_id for i in items] == [3]


def test_thread_uses_latest_meaningful_comment():
    thread = ReviewThread(
        comments=[
            ReviewComment("alice", "Please split this function", 1),
            ReviewComment("bob", "lgtm", 2),
        ],
        is_resolved=False,
    )
    items = summarize(ReviewData(review_threads=[thread])).items
    assert items[0].author == "alice"


def test_thread_with_only_trivial_comments_skipped():
    thread = ReviewThread(comments=[ReviewComment("bob", "LGTM", 2)], is_resolved=False)
    assert summarize(ReviewData(review_threads=[thread])).items == []


def test_format_summary():
    items = [
        FeedbackItem(source="review", author="alice", body="Fix it", state="CHANGES_REQUESTED"),
        FeedbackItem(source="thread", author="bob", body="Rename", path="a.py", line=4),
        FeedbackItem(source="comment", author="", body="Please   add\ndocs"),
    ]
    assert format_summary(items).splitlines() == [
        "- [Review (changes requested)] @alice: Fix it",
        "- [a.py:4] @bob: Rename",
        "- [Comment] Reviewer: Please add docs",
    ]


def test_format_summary_truncates_long_comments():
    item = FeedbackItem(source="comment", author="a", body="x" * 500)
    line = format_summary([item])
    assert line.endswith("...")
    assert len(line) < 250


def test_summary_text_matches_items():
    data = ReviewData(comments=[PrComment("bob", "Please update docs")])
    result = summarize(data)
    assert result.summary == format_summary(result.items)

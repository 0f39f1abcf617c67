from __future__ import annotations

from dataclasses import replace
from unittest.mock import patch

import pytest

from gent.branch import (
    extract_issue_number,
    generate_branch_name,
    parse_branch_name,
    sanitize_slug,
)
from gent.config import BranchConfig, Config
from gent.models import BranchInfo


def test_parse_author_type_issue_slug():
    assert parse_branch_name("ro/feature-123-add-login") == BranchInfo(
        name="ro/feature-123-add-login",
        author="ro",
        type="feature",
        issue_number=123,
        slug="add-login",
    )


def test_parse_type_issue_slug():
    info = parse_branch_name("fix/45-crash-on-start")
    assert info.author == ""
    assert info.type == "fix"
    assert info.issue_number == 45
    assert info.slug == "crash-on-start"


def test_parse_issue_slug():
    info = parse_branch_name("9-tidy")
    assert info.type == "feature"
    assert info.issue_number == 9
    assert info.slug == "tidy"


def test_parse_any_number_fallback():
    info = parse_branch_name("wip/issue7")
    assert info.issue_number == 7
    assert info.slug == "wip/issue7"


def test_parse_no_number():
    assert parse_branch_name("main") is None
    assert extract_issue_number("main") is None


def test_extract_issue_number():
    assert extract_issue_number("ro/feature-123-add-login") == 123


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Add login page", "add-login-page"),
        ("Fix: crash on start!", "fix-crash-on-start"),
        ("  --spaces--  ", "spaces"),
    ],
)
def test_sanitize_slug(title, expected):
    assert sanitize_slug(title) == expected


def test_sanitize_slug_max_length():
    assert len(sanitize_slug("word " * 40)) == 40


def test_generate_branch_name_from_git_initials():
    with patch("gent.branch.git.author_initials", return_value="ro"):
        name = generate_branch_name(Config(), 123, "Add login", "feature")
    assert name == "ro/feature-123-add-login"


def test_generate_branch_name_from_env(monkeypatch):
    monkeypatch.setenv("GENT_AUTHOR", "jd")
    config = replace(Config(), branch=BranchConfig(author_source="env"))
    assert generate_branch_name(config, 5, "Docs", "docs") == "jd/docs-5-docs"


def test_generate_branch_name_custom_pattern():
    config = replace(Config(), branch=BranchConfig(pattern="{type}/{issue}-{slug}"))
    assert generate_branch_name(config, 8, "Speed up", "refactor") == "refactor/8-speed-up"
    assert parse_branch_name("refactor/8-speed-up").issue_number == 8

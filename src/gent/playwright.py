"""UI change detection for deciding when a demo video is worth recording."""

from __future__ import annotations

import re
import subprocess

from gent.git import changed_files

__all__ = ["changed_files", "has_ui_changes", "is_playwright_available"]

UI_FILE_PATTERNS = [
    re.compile(r"\.(tsx|jsx)$"),
    re.compile(r"\.(vue|svelte)$"),
    re.compile(r"\.(css|scss|less)$"),
    re.compile(r"\.styled\.(ts|js)$"),
    re.compile(r"components?/", re.IGNORECASE),
    re.compile(r"pages?/", re.IGNORECASE),
    re.compile(r"views?/", re.IGNORECASE),
    re.compile(r"layouts?/", re.IGNORECASE),
    re.compile(r"ui/", re.IGNORECASE),
    re.compile(r"styles?/", re.IGNORECASE),
    re.compile(r"templates?/", re.IGNORECASE),
]


def has_ui_changes(files: list[str]) -> bool:
    return any(pattern.search(f) for f in files for pattern in UI_FILE_PATTERNS)


def is_playwright_available() -> bool:
    """True if `npx playwright --version` succeeds."""
    try:
        result = subprocess.run(
            ["npx", "--no-install", "playwright", "--version"],
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0

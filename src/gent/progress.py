from __future__ import annotations

import logging
from pathlib import Path

from gent.config import Config

logger = logging.getLogger(__name__)


def get_progress_path(config: Config, cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / config.progress_file


def progress_exists(config: Config, cwd: Path | None = None) -> bool:
    return get_progress_path(config, cwd).exists()


def read_progress(config: Config, cwd: Path | None = None) -> str:
    """Return the progress log contents, or "" if there is none or it is unreadable."""
    path = get_progress_path(config, cwd)
    if not path.exists():
        return ""
    try:
        return path.read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return ""

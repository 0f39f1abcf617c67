from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".gent.toml"

PROVIDERS = ("claude", "gemini", "codex")

DEFAULT_CONFIG = """\
# Commands the AI assistant is asked to run before committing.
# validation = ["npm run typecheck", "npm run lint", "npm run test"]

[github.labels]
types = ["feature", "fix", "refactor", "chore", "docs", "test"]
priorities = ["critical", "high", "medium", "low"]
risks = ["low", "medium", "high"]
areas = ["ui", "api", "database", "workers", "shared", "testing", "infra"]

[github.labels.workflow]
ready = "ai-ready"
in_progress = "ai-in-progress"
completed = "ai-completed"
blocked = "ai-blocked"

[branch]
# Placeholders: {author} {type} {issue} {slug}
pattern = "{author}/{type}-{issue}-{slug}"
# "git" derives initials from git config, "env" reads author_env_var first
author_source = "git"
author_env_var = "GENT_AUTHOR"

[progress]
file = "progress.txt"

[ai]
# claude | gemini | codex  (GENT_AI_PROVIDER overrides this)
provider = "claude"

[claude]
permission_mode = "acceptEdits"
agent_file = "AGENT.md"

[video]
enabled = true
# Command run from the dashboard to record a demo of UI changes.
command = "npx playwright test --video=on"
"""

# Session-only provider override set from the dashboard
_runtime_provider: str | None = None


class ConfigError(Exception):
    """Raised when the configuration file cannot be written or is in the way."""


@dataclass(frozen=True)
class WorkflowLabels:
    ready: str = "ai-ready"
    in_progress: str = "ai-in-progress"
    completed: str = "ai-completed"
    blocked: str = "ai-blocked"


@dataclass(frozen=True)
class LabelConfig:
    workflow: WorkflowLabels = field(default_factory=WorkflowLabels)
    types: tuple[str, ...] = ("feature", "fix", "refactor", "chore", "docs", "test")
    priorities: tuple[str, ...] = ("critical", "high", "medium", "low")
    risks: tuple[str, ...] = ("low", "medium", "high")
    areas: tuple[str, ...] = (
        "ui",
        "api",
        "database",
        "workers",
        "shared",
        "testing",
        "infra",
    )


@dataclass(frozen=True)
class BranchConfig:
    pattern: str = "{author}/{type}-{issue}-{slug}"
    author_source: str = "git"  # git | env
    author_env_var: str = "GENT_AUTHOR"


@dataclass(frozen=True)
class VideoConfig:
    enabled: bool = True
    command: str = "npx playwright test --video=on"


@dataclass(frozen=True)
class Config:
    labels: LabelConfig = field(default_factory=LabelConfig)
    branch: BranchConfig = field(default_factory=BranchConfig)
    progress_file: str = "progress.txt"
    provider: str = "claude"  # claude | gemini | codex
    permission_mode: str = "acceptEdits"
    agent_file: str = "AGENT.md"
    video: VideoConfig = field(default_factory=VideoConfig)
    validation: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a Config from parsed TOML, falling back to defaults per key."""
        defaults = cls()

        labels_data = data.get("github", {}).get("labels", {})
        workflow_data = labels_data.get("workflow", {})
        default_workflow = WorkflowLabels()
        workflow = WorkflowLabels(
            ready=workflow_data.get("ready", default_workflow.ready),
            in_progress=workflow_data.get("in_progress", default_workflow.in_progress),
            completed=workflow_data.get("completed", default_workflow.completed),
            blocked=workflow_data.get("blocked", default_workflow.blocked),
        )
        default_labels = LabelConfig()
        labels = LabelConfig(
            workflow=workflow,
            types=tuple(labels_data.get("types", default_labels.types)),
            priorities=tuple(labels_data.get("priorities", default_labels.priorities)),
            risks=tuple(labels_data.get("risks", default_labels.risks)),
            areas=tuple(labels_data.get("areas", default_labels.areas)),
        )

        branch_data = data.get("branch", {})
        branch = BranchConfig(
            pattern=branch_data.get("pattern", defaults.branch.pattern),
            author_source=branch_data.get("author_source", defaults.branch.author_source),
            author_env_var=branch_data.get(
                "author_env_var", defaults.branch.author_env_var
            ),
        )

        video_data = data.get("video", {})
        video = VideoConfig(
            enabled=video_data.get("enabled", defaults.video.enabled),
            command=video_data.get("command", defaults.video.command),
        )

        provider = data.get("ai", {}).get("provider", defaults.provider)
        if provider not in PROVIDERS:
            logger.warning("Unknown AI provider %r in config, using claude", provider)
            provider = defaults.provider

        claude = data.get("claude", {})

        return cls(
            labels=labels,
            branch=branch,
            progress_file=data.get("progress", {}).get("file", defaults.progress_file),
            provider=provider,
            permission_mode=claude.get("permission_mode", defaults.permission_mode),
            agent_file=claude.get("agent_file", defaults.agent_file),
            video=video,
            validation=tuple(data.get("validation", defaults.validation)),
        )


def get_config_path(cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / CONFIG_FILENAME


def config_exists(cwd: Path | None = None) -> bool:
    return get_config_path(cwd).exists()


def load_config(cwd: Path | None = None) -> Config:
    """Load .gent.toml merged over built-in defaults.

    Never fails: a missing or unreadable file yields the defaults. The active
    provider is resolved as runtime override > GENT_AI_PROVIDER > file.
    """
    path = get_config_path(cwd)
    data: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            data = {}

    config = Config.from_dict(data)

    env_provider = os.environ.get("GENT_AI_PROVIDER")
    provider = _runtime_provider or env_provider
    if provider in PROVIDERS and provider != config.provider:
        config = replace(config, provider=provider)
    return config


def set_runtime_provider(provider: str | None) -> None:
    """Override the AI provider for the rest of this process."""
    global _runtime_provider
    if provider is not None and provider not in PROVIDERS:
        raise ValueError(f"Unknown AI provider '{provider}'.")
    _runtime_provider = provider


def ensure_config(cwd: Path | None = None, overwrite: bool = False) -> Path:
    """Create the default config file if it doesn't exist. Returns its path.

    With `overwrite`, an existing file is replaced by the defaults.
    """
    path = get_config_path(cwd)
    if overwrite or not path.exists():
        try:
            path.write_text(DEFAULT_CONFIG)
        except OSError as e:
            raise ConfigError(f"Could not write {path}: {e}") from e
    return path


def load_agent_instructions(config: Config, cwd: Path | None = None) -> str | None:
    """Return the contents of the agent instructions file, if present."""
    path = (cwd or Path.cwd()) / config.agent_file
    if not path.exists():
        return None
    try:
        return path.read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None

"""Launching the configured AI coding assistant (claude, gemini or codex)."""

from __future__ import annotations

import shutil
import subprocess

from gent.config import Config

DISPLAY_NAMES = {"claude": "Claude", "gemini": "Gemini", "codex": "Codex"}

PROVIDER_EMAILS = {
    "claude": "noreply@anthropic.com",
    "gemini": "noreply@google.com",
    "codex": "noreply@openai.com",
}


class AIProviderError(Exception):
    """Raised when the AI assistant cannot be run or exits with an error."""


def display_name(provider: str) -> str:
    return DISPLAY_NAMES.get(provider, provider.title())


def provider_email(provider: str) -> str:
    return PROVIDER_EMAILS.get(provider, "noreply@example.com")


def is_provider_available(provider: str) -> bool:
    return shutil.which(provider) is not None


def _interactive_command(prompt: str, config: Config) -> list[str]:
    if config.provider == "claude":
        return ["claude", "--permission-mode", config.permission_mode, prompt]
    if config.provider == "gemini":
        return ["gemini", "-i", prompt]
    return ["codex", prompt]


def _print_command(prompt: str, config: Config) -> list[str]:
    if config.provider == "claude":
        return ["claude", "-p", prompt]
    if config.provider == "gemini":
        return ["gemini", "-p", prompt]
    return ["codex", "exec", prompt]


def run_interactive(prompt: str, config: Config) -> int:
    """Hand the terminal to the assistant until it exits. Returns its exit code."""
    try:
        result = subprocess.run(_interactive_command(prompt, config))
    except FileNotFoundError as e:
        raise AIProviderError(f"{config.provider} is not installed") from e
    return result.returncode


def run_prompt(prompt: str, config: Config, timeout: int = 120) -> str:
    """Run the assistant non-interactively and return its stdout."""
    try:
        result = subprocess.run(
            _print_command(prompt, config),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise AIProviderError(f"{config.provider} is not installed") from e
    except subprocess.TimeoutExpired as e:
        raise AIProviderError(f"{config.provider} timed out") from e
    if result.returncode != 0:
        raise AIProviderError(
            f"{config.provider} exited with {result.returncode}: {result.stderr.strip()}"
        )
    return result.stdout

from __future__ import annotations

import pytest

from gent import config


@pytest.fixture(autouse=True)
def _reset_provider_override(monkeypatch):
    """Keep the session provider override and env from leaking between tests."""
    monkeypatch.delenv("GENT_AI_PROVIDER", raising=False)
    config.set_runtime_provider(None)
    yield
    config.set_runtime_provider(None)

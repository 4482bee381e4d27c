"""
Pytest fixtures for mlclient tests. Settings are re-read for every test with
zero poll interval so nothing sleeps.
"""

from __future__ import annotations

import pytest

from mlclient.config import reset_settings_cache
from sample_resources import ManualExecutor


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    """No sleeping between polls and a small poll budget."""
    monkeypatch.setenv("MLCLIENT_POLL_INTERVAL", "0")
    monkeypatch.setenv("MLCLIENT_MAX_POLLS", "3")
    monkeypatch.delenv("MLCLIENT_DEFAULT_LOCALE", raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def manual_executor() -> ManualExecutor:
    return ManualExecutor()

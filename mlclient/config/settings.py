"""
Application settings built from the environment.

Responsibilities:
- Collect the env accessors into one typed Settings object.
- Cache it so connections created without arguments share the same values.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from mlclient.config import env


@dataclass(frozen=True)
class Settings:
    """
    Connection and polling settings.

    api_url: Base URL of the remote API, no trailing slash.
    username / api_key: Credentials; None when not configured.
    timeout: HTTP timeout in seconds.
    poll_interval: Seconds between status polls while a resource is not finished.
    max_polls: Number of polls before an unfinished resource is reported as a fetch error.
    default_locale: Locale for resources that do not declare one.
    """

    api_url: str = env.DEFAULT_API_URL
    username: str | None = None
    api_key: str | None = None
    timeout: float = env.DEFAULT_TIMEOUT_SEC
    poll_interval: float = env.DEFAULT_POLL_INTERVAL_SEC
    max_polls: int = env.DEFAULT_MAX_POLLS
    default_locale: str = env.DEFAULT_LOCALE


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the current settings (read once per process)."""
    username, api_key = env.get_credentials()
    return Settings(
        api_url=env.get_api_url(),
        username=username,
        api_key=api_key,
        timeout=env.get_timeout(),
        poll_interval=env.get_poll_interval(),
        max_polls=env.get_max_polls(),
        default_locale=env.get_default_locale(),
    )


def reset_settings_cache() -> None:
    """Forget cached settings (tests that change env vars call this)."""
    get_settings.cache_clear()

"""
Environment variable loading for mlclient.

- MLCLIENT_API_URL: base URL of the remote API (default: https://bigml.io/andromeda)
- MLCLIENT_USERNAME / MLCLIENT_API_KEY: credentials sent with every request
- MLCLIENT_TIMEOUT: HTTP timeout in seconds (default: 30)
- MLCLIENT_POLL_INTERVAL: seconds between status polls (default: 1.0)
- MLCLIENT_MAX_POLLS: polls before giving up on an unfinished resource (default: 60)
- MLCLIENT_DEFAULT_LOCALE: locale used when a resource has none
- Loads .env from the project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from mlclient.client_logging import get_logger
from mlclient.core.constants import DEFAULT_LOCALE

logger = get_logger(__name__)

# Project root: config is mlclient/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_API_URL = "https://bigml.io/andromeda"
DEFAULT_TIMEOUT_SEC = 30.0
DEFAULT_POLL_INTERVAL_SEC = 1.0
DEFAULT_MAX_POLLS = 60


def load_mlclient_env() -> None:
    """Load .env from project root. Existing variables are not overridden."""
    load_dotenv(_ENV_PATH, override=False)


def _get_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("config_invalid_value", name=name, value=raw, default=default)
        return default


def _get_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("config_invalid_value", name=name, value=raw, default=default)
        return default


def get_api_url() -> str:
    """Base URL without trailing slash."""
    load_mlclient_env()
    url = (os.getenv("MLCLIENT_API_URL") or "").strip() or DEFAULT_API_URL
    return url.rstrip("/")


def get_credentials() -> tuple[str | None, str | None]:
    """Return (username, api_key); either may be None when unset."""
    load_mlclient_env()
    username = (os.getenv("MLCLIENT_USERNAME") or "").strip() or None
    api_key = (os.getenv("MLCLIENT_API_KEY") or "").strip() or None
    return username, api_key


def get_timeout() -> float:
    load_mlclient_env()
    return max(0.1, _get_float("MLCLIENT_TIMEOUT", DEFAULT_TIMEOUT_SEC))


def get_poll_interval() -> float:
    load_mlclient_env()
    return max(0.0, _get_float("MLCLIENT_POLL_INTERVAL", DEFAULT_POLL_INTERVAL_SEC))


def get_max_polls() -> int:
    load_mlclient_env()
    return max(1, _get_int("MLCLIENT_MAX_POLLS", DEFAULT_MAX_POLLS))


def get_default_locale() -> str:
    load_mlclient_env()
    return (os.getenv("MLCLIENT_DEFAULT_LOCALE") or "").strip() or DEFAULT_LOCALE

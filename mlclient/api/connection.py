"""
HTTP connection to the remote ML platform.

Uses a requests.Session; credentials travel as query parameters on every call.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl, quote_plus

import requests

from mlclient.client_logging import get_logger
from mlclient.config import Settings, get_settings
from mlclient.core.exceptions import ResourceFetchError

logger = get_logger(__name__)


def _query_params(query: str | dict[str, Any] | None) -> dict[str, Any]:
    """Accept 'limit=-1&only_model=true' (';' also separates) or a dict."""
    if not query:
        return {}
    if isinstance(query, dict):
        return dict(query)
    return dict(parse_qsl(query.replace(";", "&"), keep_blank_values=True))


class Connection:
    """Authenticated connection used to get and create resources."""

    def __init__(
        self,
        username: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.username = username or settings.username
        self.api_key = api_key or settings.api_key
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.timeout
        self._session = requests.Session()

    def _auth(self) -> dict[str, str]:
        auth: dict[str, str] = {}
        if self.username:
            auth["username"] = self.username
        if self.api_key:
            auth["api_key"] = self.api_key
        return auth

    def _redact(self, text: str) -> str:
        """Hide the api key (plain or URL-encoded) in text bound for logs and errors."""
        if self.api_key:
            for secret in sorted({self.api_key, quote_plus(self.api_key)}, key=len, reverse=True):
                text = text.replace(secret, "***")
        return text

    @staticmethod
    def _error_detail(resp: requests.Response) -> str:
        """Message of an error response: status.message or detail for JSON bodies, else the text."""
        if not resp.headers.get("content-type", "").startswith("application/json"):
            return resp.text
        try:
            body = resp.json()
        except ValueError:
            return resp.text
        if not isinstance(body, dict):
            return resp.text
        status = body.get("status")
        message = status.get("message") if isinstance(status, dict) else None
        return str(message or body.get("detail") or resp.text)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}/{path.lstrip('/')}"
        query = self._auth()
        query.update(params or {})
        logger.debug("api_request", method=method, path=path)
        try:
            resp = self._session.request(method, url, params=query, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            # the failing URL in the message carries the credentials
            error = self._redact(str(e))
            logger.warning("api_request_failed", method=method, path=path, error=error)
            raise ResourceFetchError(f"Request to {path} failed: {error}", resource_id=path) from None
        if not resp.ok:
            detail = self._redact(self._error_detail(resp))
            logger.warning(
                "api_request_failed",
                method=method,
                path=path,
                status_code=resp.status_code,
                error=detail,
            )
            raise ResourceFetchError(
                f"API error for {path}: {detail}",
                resource_id=path,
                status_code=resp.status_code,
                response=resp,
            )
        return resp

    def get(self, resource_id: str, query: str | dict[str, Any] | None = None) -> dict[str, Any]:
        """Retrieve a resource's JSON; query selects fields (e.g. 'limit=-1')."""
        return self._request("GET", resource_id, params=_query_params(query)).json()

    def create(self, resource_type: str, body: dict[str, Any]) -> dict[str, Any]:
        """Create a resource of the given type (e.g. 'prediction') and return its JSON."""
        return self._request("POST", resource_type, json=body).json()

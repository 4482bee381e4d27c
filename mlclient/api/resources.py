"""
Helpers over resource JSON: ids, status, unwrapping and waiting for completion.
"""

from __future__ import annotations

import time
from typing import Any

from mlclient.client_logging import get_logger
from mlclient.core.constants import FAULTY, FINISHED, RESOURCE_RE, UNKNOWN
from mlclient.core.exceptions import MalformedResourceError, ResourceFetchError

logger = get_logger(__name__)


def get_resource_type(resource_id: str) -> str | None:
    """Return the resource type ('model', 'logisticregression', ...) or None."""
    for resource_type, pattern in RESOURCE_RE.items():
        if pattern.match(resource_id):
            return resource_type
    return None


def get_resource_id(resource: str | dict[str, Any]) -> str | None:
    """
    Extract the resource id from an id string or a resource dict.

    A dict may carry the id at the top level or under 'object'; a dict without
    one gives None. A string that is not a known id raises MalformedResourceError.
    """
    if isinstance(resource, str):
        if get_resource_type(resource) is None:
            raise MalformedResourceError(f"Cannot build a local resource from this id: {resource}")
        return resource
    if not isinstance(resource, dict):
        raise MalformedResourceError(f"Cannot build a local resource from {type(resource).__name__}")
    resource_id = resource.get("resource")
    if resource_id is None and isinstance(resource.get("object"), dict):
        resource_id = resource["object"].get("resource")
    if resource_id is not None and get_resource_type(resource_id) is None:
        raise MalformedResourceError(f"Cannot build a local resource from this id: {resource_id}")
    return resource_id


def unwrap(resource: dict[str, Any]) -> dict[str, Any]:
    """Return the payload: resource['object'] when present, else the resource."""
    obj = resource.get("object")
    return obj if isinstance(obj, dict) else resource


def get_status(resource: dict[str, Any]) -> dict[str, Any]:
    """Return the status dict; {'code': UNKNOWN} when the resource has none."""
    status = unwrap(resource).get("status")
    if not isinstance(status, dict):
        status = resource.get("status")
    if not isinstance(status, dict) or "code" not in status:
        return {"code": UNKNOWN}
    return status


def is_finished(resource: dict[str, Any]) -> bool:
    return get_status(resource)["code"] == FINISHED


def fetch_finished(
    connection: Any,
    resource_id: str,
    query: str | None = None,
    poll_interval: float = 1.0,
    max_polls: int = 60,
) -> dict[str, Any]:
    """
    GET the resource until its status is FINISHED.

    A resource that is still running is polled again after poll_interval.
    FAULTY, or still unfinished after max_polls GETs, raises ResourceFetchError.
    """
    for attempt in range(1, max_polls + 1):
        resource = connection.get(resource_id, query=query)
        status = get_status(resource)
        if status["code"] == FINISHED:
            return resource
        if status["code"] == FAULTY:
            raise ResourceFetchError(
                f"Resource {resource_id} is faulty: {status.get('message', 'no message')}",
                resource_id=resource_id,
            )
        logger.debug("api_wait_polling", resource_id=resource_id, code=status["code"], attempt=attempt)
        if attempt < max_polls:
            time.sleep(poll_interval)
    raise ResourceFetchError(
        f"Resource {resource_id} not finished after {max_polls} polls",
        resource_id=resource_id,
    )

"""
Remote API collaborator: HTTP connection and resource helpers.
"""

from mlclient.api.connection import Connection
from mlclient.api.resources import (
    fetch_finished,
    get_resource_id,
    get_resource_type,
    get_status,
    is_finished,
    unwrap,
)

__all__ = [
    "Connection",
    "fetch_finished",
    "get_resource_id",
    "get_resource_type",
    "get_status",
    "is_finished",
    "unwrap",
]

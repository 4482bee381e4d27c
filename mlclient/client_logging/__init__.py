"""
Structured logging for mlclient.

JSON logs with timestamp, resource_id and event_type.
Use get_logger() in every module for aggregation-friendly output.
"""

from mlclient.client_logging.logger import bind_resource, get_logger

__all__ = ["bind_resource", "get_logger"]

"""
Application-level exceptions.

Construction errors (ResourceFetchError, MalformedResourceError) are fatal for
a local wrapper. PredictionError subclasses are raised for a single predict
call and leave the wrapper usable.
"""

from __future__ import annotations

from typing import Any


class MLClientError(Exception):
    """Base class for every error raised by mlclient."""


class ResourceFetchError(MLClientError):
    """Raised when a resource cannot be retrieved or never finishes."""

    def __init__(
        self,
        message: str,
        resource_id: str | None = None,
        status_code: int | None = None,
        response: Any = None,
    ):
        super().__init__(message)
        self.resource_id = resource_id
        self.status_code = status_code
        self.response = response


class MalformedResourceError(MLClientError):
    """Raised when a resource's JSON cannot be turned into a local structure."""


class PredictionError(MLClientError):
    """Base class for errors local to one predict call."""


class TypeMismatchError(PredictionError):
    """Input value cannot be coerced to the field's declared type."""

    def __init__(self, field_name: str, value: Any):
        super().__init__(f"Mismatch input data type in field {field_name} for value {value!r}")
        self.field_name = field_name
        self.value = value


class MissingInputError(PredictionError):
    """A required input field is absent and the model has no missing-value handling."""

    def __init__(self, field_name: str):
        super().__init__(f"Missing input value for field {field_name}")
        self.field_name = field_name


class ResourceNotReadyError(MLClientError):
    """A blocking predict was made where waiting for the resource would never end."""

"""
mlclient: client bindings for a remote machine-learning platform.

Fetches finished resources (models, logistic regressions) over HTTP and
rebuilds their predictive structure locally, so predictions can be made
without further network calls and match the ones served remotely.
"""

from mlclient.api.connection import Connection
from mlclient.core.exceptions import (
    MalformedResourceError,
    MissingInputError,
    MLClientError,
    PredictionError,
    ResourceFetchError,
    ResourceNotReadyError,
    TypeMismatchError,
)
from mlclient.local.logistic import LocalLogisticRegression
from mlclient.local.model import LocalModel

__version__ = "0.1.0"

__all__ = [
    "Connection",
    "LocalLogisticRegression",
    "LocalModel",
    "MLClientError",
    "MalformedResourceError",
    "MissingInputError",
    "PredictionError",
    "ResourceFetchError",
    "ResourceNotReadyError",
    "TypeMismatchError",
]

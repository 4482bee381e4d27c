"""
Constants for resource status, HTTP responses and local prediction.
"""

from __future__ import annotations

import re

# Resource status codes
WAITING = 0
QUEUED = 1
STARTED = 2
IN_PROGRESS = 3
SUMMARIZED = 4
FINISHED = 5
UPLOADING = 6
FAULTY = -1
UNKNOWN = -2
RUNNABLE = -3

# HTTP status codes
HTTP_OK = 200
HTTP_CREATED = 201
HTTP_ACCEPTED = 202
HTTP_NO_CONTENT = 204
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_PAYMENT_REQUIRED = 402
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_METHOD_NOT_ALLOWED = 405
HTTP_TOO_MANY_REQUESTS = 429
HTTP_INTERNAL_SERVER_ERROR = 500

DEFAULT_LOCALE = "en_US.UTF-8"

# Resource ids: "<type>/<24 hex chars>"
ID_PATTERN = "[a-f0-9]{24}"
SOURCE_RE = re.compile(rf"^source/{ID_PATTERN}$")
DATASET_RE = re.compile(rf"^dataset/{ID_PATTERN}$")
MODEL_RE = re.compile(rf"^model/{ID_PATTERN}$")
LOGISTIC_REGRESSION_RE = re.compile(rf"^logisticregression/{ID_PATTERN}$")
PREDICTION_RE = re.compile(rf"^prediction/{ID_PATTERN}$")

RESOURCE_RE = {
    "source": SOURCE_RE,
    "dataset": DATASET_RE,
    "model": MODEL_RE,
    "logisticregression": LOGISTIC_REGRESSION_RE,
    "prediction": PREDICTION_RE,
}

# Missing value strategies for tree predictions
LAST_PREDICTION = 0
PROPORTIONAL = 1

# Decimal places used when reporting probabilities
PROBABILITY_PRECISION = 5

# Optypes
NUMERIC = "numeric"
CATEGORICAL = "categorical"
TEXT = "text"
ITEMS = "items"

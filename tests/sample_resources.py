"""
Handcrafted finished resources and test doubles shared by the tests.
"""

from __future__ import annotations

import copy
from typing import Any

MODEL_ID = "model/5143a51a37203f2cf7000972"
LOGISTIC_ID = "logisticregression/5143a51a37203f2cf7000985"

MODEL_FIELDS = {
    "000000": {"name": "sepal length", "optype": "numeric", "column_number": 0,
               "summary": {"mean": 5.8, "minimum": 4.3, "maximum": 7.9}},
    "000001": {"name": "petal width", "optype": "numeric", "column_number": 1,
               "prefix": "~", "suffix": " cm", "summary": {"mean": 1.2}},
    "000002": {"name": "color", "optype": "categorical", "column_number": 2,
               "summary": {"categories": [["red", 10], ["blue", 10]]}},
    "000003": {"name": "review", "optype": "text", "column_number": 3,
               "term_analysis": {"case_sensitive": False, "token_mode": "all"},
               "summary": {"tag_cloud": [["good", 4], ["bad", 3]], "term_forms": {"good": ["goods"]}}},
    "000004": {"name": "species", "optype": "categorical", "column_number": 4,
               "summary": {"categories": [["A", 11], ["B", 9]]}},
}

# root (A 11 / B 9)
#   sepal length > 5   (A 7 / B 3)
#     color = red      (A 6)
#     color != red     (A 1 / B 3)
#   sepal length <= 5  (A 4 / B 6)
#     review contains good         (A 3 / B 1)
#     review does not contain good (A 1 / B 5)
MODEL_ROOT = {
    "id": 0, "predicate": True, "output": "A", "confidence": 0.33, "count": 20,
    "objective_summary": {"categories": [["A", 11], ["B", 9]]},
    "children": [
        {
            "id": 1, "predicate": {"operator": ">", "field": "000000", "value": 5},
            "output": "A", "confidence": 0.39, "count": 10,
            "objective_summary": {"categories": [["A", 7], ["B", 3]]},
            "children": [
                {"id": 2, "predicate": {"operator": "=", "field": "000002", "value": "red"},
                 "output": "A", "confidence": 0.61, "count": 6,
                 "objective_summary": {"categories": [["A", 6]]}},
                {"id": 3, "predicate": {"operator": "!=", "field": "000002", "value": "red"},
                 "output": "B", "confidence": 0.3, "count": 4,
                 "objective_summary": {"categories": [["A", 1], ["B", 3]]}},
            ],
        },
        {
            "id": 4, "predicate": {"operator": "<=", "field": "000000", "value": 5},
            "output": "B", "confidence": 0.31, "count": 10,
            "objective_summary": {"categories": [["A", 4], ["B", 6]]},
            "children": [
                {"id": 5, "predicate": {"operator": ">", "field": "000003", "value": 0, "term": "good"},
                 "output": "A", "confidence": 0.3, "count": 4,
                 "objective_summary": {"categories": [["A", 3], ["B", 1]]}},
                {"id": 6, "predicate": {"operator": "<=", "field": "000003", "value": 0, "term": "good"},
                 "output": "B", "confidence": 0.44, "count": 6,
                 "objective_summary": {"categories": [["A", 1], ["B", 5]]}},
            ],
        },
    ],
}

LOGISTIC_FIELDS = {
    "000000": {"name": "age", "optype": "numeric",
               "summary": {"mean": 40.0, "median": 38.0, "minimum": 18.0, "maximum": 90.0,
                           "standard_deviation": 10.0}},
    "000001": {"name": "color", "optype": "categorical",
               "summary": {"categories": [["red", 3], ["blue", 2]]}},
    "000002": {"name": "genres", "optype": "items", "item_analysis": {"separator": "$"},
               "summary": {"items": [["Action", 4], ["Adventure", 3]]}},
    "000003": {"name": "label", "optype": "categorical",
               "summary": {"categories": [["yes", 6], ["no", 4]]}},
    "000004": {"name": "review", "optype": "text",
               "term_analysis": {"case_sensitive": False, "token_mode": "all"},
               "summary": {"tag_cloud": [["good", 4], ["bad", 3]], "term_forms": {"good": ["goods"]}}},
}

# age, age missing | red, blue, color missing | Action, Adventure, genres missing
# | good, bad, review missing | bias
YES_WEIGHTS = [0.5, 0.1, 1.0, -1.0, 0.2, 0.3, 0.4, -0.5, 0.6, -0.7, 0.05, 0.25]
NO_WEIGHTS = [0.0] * 12


def model_resource(status_code: int = 5, **overrides: Any) -> dict[str, Any]:
    """A finished model resource as returned by GET model/<id>?limit=-1."""
    model = {"fields": copy.deepcopy(MODEL_FIELDS), "root": copy.deepcopy(MODEL_ROOT)}
    model.update(overrides)
    return {
        "code": 200,
        "resource": MODEL_ID,
        "object": {
            "resource": MODEL_ID,
            "status": {"code": status_code, "message": "The model has been created"},
            "objective_fields": ["000004"],
            "description": "iris-like test model",
            "locale": "es_ES",
            "model": model,
        },
    }


def logistic_resource(status_code: int = 5, **overrides: Any) -> dict[str, Any]:
    """A finished logistic regression resource."""
    logistic = {
        "fields": copy.deepcopy(LOGISTIC_FIELDS),
        "coefficients": [["yes", list(YES_WEIGHTS)], ["no", list(NO_WEIGHTS)]],
        "bias": True,
        "missing_numerics": True,
    }
    logistic.update(overrides)
    return {
        "resource": LOGISTIC_ID,
        "object": {
            "resource": LOGISTIC_ID,
            "status": {"code": status_code},
            "objective_fields": ["000003"],
            "logistic_regression": logistic,
        },
    }


class FakeConnection:
    """Returns the given responses in order (the last one repeats); records calls."""

    def __init__(self, responses: list[Any]):
        self.responses = list(responses)
        self.calls: list[tuple[str, Any]] = []

    def get(self, resource_id: str, query: Any = None) -> dict[str, Any]:
        self.calls.append((resource_id, query))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)


class ManualExecutor:
    """Executor that runs submitted jobs only when run_all() is called."""

    def __init__(self) -> None:
        self.jobs: list[Any] = []

    def submit(self, fn, *args, **kwargs):
        self.jobs.append((fn, args, kwargs))

    def run_all(self) -> None:
        jobs, self.jobs = self.jobs, []
        for fn, args, kwargs in jobs:
            fn(*args, **kwargs)


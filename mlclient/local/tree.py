"""
Decision tree rebuilt from a model resource's 'root' node.

Each node keeps its predicate, output, confidence and objective distribution.
Prediction walks from the root into the first child whose predicate holds and
stops at a leaf, or earlier when the split field is missing from the input.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any

from mlclient.client_logging import get_logger
from mlclient.core.constants import (
    LAST_PREDICTION,
    NUMERIC,
    PROBABILITY_PRECISION,
    PROPORTIONAL,
)
from mlclient.core.exceptions import MalformedResourceError
from mlclient.local.fields import FieldSet
from mlclient.local.predicate import Predicate

logger = get_logger(__name__)

WS_Z = 1.96


@dataclass
class Prediction:
    """Result of a tree prediction."""

    prediction: Any
    confidence: float | None
    probability: float | None
    distribution: list[list[Any]] = field(default_factory=list)
    count: int = 0
    path: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def ws_confidence(prediction: Any, distribution: dict[Any, int], ws_z: float = WS_Z) -> float:
    """Lower bound of the Wilson score interval for the predicted category."""
    ws_n = sum(distribution.values())
    if ws_n == 0:
        return 0.0
    ws_p = distribution.get(prediction, 0) / ws_n
    ws_z2 = ws_z * ws_z
    ws_factor = ws_z2 / ws_n
    ws_sqrt = math.sqrt((ws_p * (1 - ws_p) + ws_factor / 4) / ws_n)
    return (ws_p + ws_factor / 2 - ws_z * ws_sqrt) / (1 + ws_factor)


def _node_distribution(node: dict[str, Any]) -> list[list[Any]]:
    summary = node.get("objective_summary") or {}
    for key in ("categories", "bins", "counts"):
        if key in summary:
            return [[value, count] for value, count in summary[key]]
    return [[value, count] for value, count in node.get("distribution") or []]


class Tree:
    """A node of the decision tree and, through its children, the subtree below it."""

    def __init__(
        self,
        node: dict[str, Any],
        fields: FieldSet,
        objective_id: str | None = None,
        regression: bool | None = None,
    ):
        if not isinstance(node, dict):
            raise MalformedResourceError("Tree node must be a JSON object")
        self.fields = fields
        self.objective_id = objective_id
        self.predicate = Predicate.from_json(node.get("predicate", True))
        if not self.predicate.is_true and self.predicate.field_id not in fields:
            raise MalformedResourceError(
                f"Tree predicate references field {self.predicate.field_id} absent from the fields"
            )
        self.id = node.get("id")
        self.output = node.get("output")
        self.confidence = node.get("confidence")
        self.distribution = _node_distribution(node)
        self.count = node.get("count", sum(count for _value, count in self.distribution))
        if regression is None:
            if objective_id is not None and objective_id in fields:
                regression = fields[objective_id].optype == NUMERIC
            else:
                regression = "categories" not in (node.get("objective_summary") or {})
        self.regression = regression
        self.children = tuple(
            Tree(child, fields, objective_id, regression) for child in node.get("children") or []
        )

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def split_field(self) -> str | None:
        for child in self.children:
            if not child.predicate.is_true:
                return child.predicate.field_id
        return None

    def _select_child(self, input_data: dict[str, Any]) -> "Tree | None":
        for child in self.children:
            if child.predicate.apply(input_data, self.fields):
                return child
        return None

    def _probability(self, output: Any, distribution: list[list[Any]]) -> float | None:
        if self.regression:
            return None
        total = sum(count for _value, count in distribution)
        if not total:
            return 0.0
        count = next((c for value, c in distribution if value == output), 0)
        return round(count / total, PROBABILITY_PRECISION)

    def _leaf_prediction(self, path: list[str]) -> Prediction:
        return Prediction(
            prediction=self.output,
            confidence=self.confidence,
            probability=self._probability(self.output, self.distribution),
            distribution=[list(entry) for entry in self.distribution],
            count=self.count,
            path=path,
        )

    def predict(
        self,
        input_data: dict[str, Any],
        missing_strategy: int = LAST_PREDICTION,
    ) -> Prediction:
        """
        Predict from input keyed by field id (already normalized).

        LAST_PREDICTION stops at the deepest node reachable; PROPORTIONAL merges
        the distributions of every subtree under a split whose field is missing.
        """
        if missing_strategy == PROPORTIONAL:
            return self._predict_proportional(input_data)
        if missing_strategy != LAST_PREDICTION:
            raise ValueError(f"Unknown missing strategy: {missing_strategy}")
        path: list[str] = []
        node = self
        while node.children:
            child = node._select_child(input_data)
            if child is None:
                logger.debug("tree_missing_field_stop", node_id=node.id, field_id=node.split_field())
                break
            path.append(child.predicate.to_rule(self.fields))
            node = child
        return node._leaf_prediction(path)

    def _follows_one_branch(self, input_data: dict[str, Any]) -> bool:
        if self.split_field() in input_data:
            return True
        return any(child.predicate.accepts_missing() for child in self.children)

    def _proportional(
        self,
        input_data: dict[str, Any],
        path: list[str],
        missing_found: bool = False,
    ) -> tuple["Tree", dict[Any, int], bool]:
        """Return (last node on the unique path, distribution, whether a missing split was merged)."""
        if self.children and self._follows_one_branch(input_data):
            child = self._select_child(input_data)
            if child is not None:
                if not missing_found:
                    path.append(child.predicate.to_rule(self.fields))
                return child._proportional(input_data, path, missing_found)
        if not self.children or self._follows_one_branch(input_data):
            return self, {value: count for value, count in self.distribution}, missing_found
        merged: dict[Any, int] = {}
        for child in self.children:
            _node, distribution, _found = child._proportional(input_data, path, True)
            for value, count in distribution.items():
                merged[value] = merged.get(value, 0) + count
        return self, merged, True

    def _predict_proportional(self, input_data: dict[str, Any]) -> Prediction:
        path: list[str] = []
        node, merged, missing_found = self._proportional(input_data, path)
        if not missing_found:
            return node._leaf_prediction(path)
        total = sum(merged.values())
        if self.regression:
            distribution = [[value, merged[value]] for value in sorted(merged)]
            output = sum(value * count for value, count in distribution) / total if total else node.output
            confidence = None
        else:
            distribution = [
                [value, count]
                for value, count in sorted(merged.items(), key=lambda item: (-item[1], str(item[0])))
            ]
            output = distribution[0][0] if distribution else node.output
            confidence = round(ws_confidence(output, merged), PROBABILITY_PRECISION)
        return Prediction(
            prediction=output,
            confidence=confidence,
            probability=self._probability(output, distribution),
            distribution=distribution,
            count=total,
            path=path,
        )

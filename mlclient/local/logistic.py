"""
LocalLogisticRegression: a finished logistic regression evaluated in-process.

Per-class scores are combined linearly from the coefficient table and turned
into probabilities with a softmax across classes.
"""

from __future__ import annotations

from typing import Any

from mlclient.local.base import LocalResource
from mlclient.local.coefficients import CoefficientTable, LogisticEvaluator
from mlclient.local.fields import FieldSet


class LocalLogisticRegression(LocalResource):
    payload_key = "logistic_regression"
    resource_type = "logisticregression"
    query = "only_model=true&limit=-1"

    @property
    def evaluator(self) -> LogisticEvaluator | None:
        return self._structure

    @property
    def classes(self) -> tuple[Any, ...]:
        return self.evaluator.table.classes if self.evaluator else ()

    def _build(self, inner: dict[str, Any], objective_id: str | None) -> tuple[FieldSet, LogisticEvaluator]:
        fields = FieldSet(inner.get("fields"))
        table = CoefficientTable(
            inner.get("coefficients"),
            fields,
            objective_id,
            missing_numerics=bool(inner.get("missing_numerics", False)),
            bias=bool(inner.get("bias", True)),
        )
        evaluator = LogisticEvaluator(
            table,
            fields,
            default_numeric_value=inner.get("default_numeric_value"),
            normalize=bool(inner.get("normalize", False)),
        )
        return fields, evaluator

    def _evaluate(self, input_data: dict[str, Any]) -> dict[str, Any]:
        return self.evaluator.predict(input_data)

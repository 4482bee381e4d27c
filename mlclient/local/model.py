"""
LocalModel: a finished decision tree model evaluated in-process.

    model = LocalModel("model/5143a51a37203f2cf7000972")
    model.predict({"petal length": 3, "petal width": 1}, callback)

or, from a pre-fetched resource (ready at once):

    model = LocalModel(resource_json)
    model.predict({"petal length": 3})["prediction"]
"""

from __future__ import annotations

from typing import Any

from mlclient.core.constants import LAST_PREDICTION
from mlclient.core.exceptions import MalformedResourceError
from mlclient.local.base import LocalResource
from mlclient.local.fields import FieldSet
from mlclient.local.tree import Tree


class LocalModel(LocalResource):
    payload_key = "model"
    resource_type = "model"
    query = "limit=-1"

    @property
    def tree(self) -> Tree | None:
        return self._structure

    def _build(self, inner: dict[str, Any], objective_id: str | None) -> tuple[FieldSet, Tree]:
        fields = FieldSet(inner.get("fields"), inner.get("model_fields"))
        if "root" not in inner:
            raise MalformedResourceError("Model resource has no 'root' node")
        return fields, Tree(inner["root"], fields, objective_id)

    def _evaluate(
        self,
        input_data: dict[str, Any],
        missing_strategy: int = LAST_PREDICTION,
    ) -> dict[str, Any]:
        return self.tree.predict(input_data, missing_strategy).as_dict()

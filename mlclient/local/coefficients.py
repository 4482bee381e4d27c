"""
Logistic regression coefficients and evaluation.

The resource stores one flat weight vector per class. The vectors are
re-indexed here into per-field weight matrices (slots x classes) addressed by
field id, plus a bias vector, so evaluation never depends on JSON key order.

Flat vector layout, for non-objective fields in ascending field-id order:
    numeric      value slot (+ missing slot when missing_numerics)
    categorical  one slot per summary category, then the missing slot
    text         one slot per tag cloud term, then the missing slot
    items        one slot per summary item, then the missing slot
followed by a single bias slot.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np

from mlclient.client_logging import get_logger
from mlclient.core.constants import CATEGORICAL, ITEMS, NUMERIC, PROBABILITY_PRECISION, TEXT
from mlclient.core.exceptions import MalformedResourceError, MissingInputError, TypeMismatchError
from mlclient.local.fields import Field, FieldSet
from mlclient.local.terms import parse_items, text_tokens, unique_terms

logger = get_logger(__name__)

SUPPORTED_OPTYPES = (NUMERIC, CATEGORICAL, TEXT, ITEMS)
DEFAULT_NUMERIC_VALUES = ("mean", "median", "minimum", "maximum", "zero")


@dataclass(frozen=True)
class FieldCoefficients:
    """Weights of one field: shape (slots, n_classes); last row is the missing slot."""

    field_id: str
    optype: str
    index: Mapping[str, int]
    weights: np.ndarray

    @property
    def missing(self) -> np.ndarray:
        return self.weights[-1]


def _terms(fld: Field) -> list[str]:
    if fld.optype == CATEGORICAL:
        return fld.categories()
    if fld.optype == TEXT:
        return fld.tag_cloud()
    if fld.optype == ITEMS:
        return fld.items()
    return []


class CoefficientTable:
    """Per-field, per-class weights plus bias, built once from the resource."""

    def __init__(
        self,
        coefficients: list[Any],
        fields: FieldSet,
        objective_id: str | None,
        missing_numerics: bool = False,
        bias: bool = True,
    ):
        if not coefficients:
            raise MalformedResourceError("Logistic regression has no coefficients")
        try:
            self.classes: tuple[Any, ...] = tuple(entry[0] for entry in coefficients)
            vectors = [list(entry[1]) for entry in coefficients]
        except (TypeError, IndexError, KeyError):
            raise MalformedResourceError("Coefficients must be [class, weights] pairs") from None
        if len(set(self.classes)) != len(self.classes):
            raise MalformedResourceError("Duplicate classes in coefficients")

        layout: list[tuple[Field, list[str], int]] = []
        for field_id in fields.field_ids_sorted():
            fld = fields[field_id]
            if field_id == objective_id or fld.optype not in SUPPORTED_OPTYPES:
                continue
            terms = _terms(fld)
            if fld.optype == NUMERIC:
                slots = 2 if missing_numerics else 1
            else:
                slots = len(terms) + 1
            layout.append((fld, terms, slots))
        expected = sum(slots for _fld, _terms, slots in layout) + 1
        for cls, vector in zip(self.classes, vectors):
            if len(vector) != expected:
                raise MalformedResourceError(
                    f"Coefficients for class {cls!r} have {len(vector)} weights, expected {expected}"
                )

        matrix = np.asarray(vectors, dtype=np.float64).T  # (expected, n_classes)
        by_field: dict[str, FieldCoefficients] = {}
        offset = 0
        for fld, terms, slots in layout:
            by_field[fld.id] = FieldCoefficients(
                field_id=fld.id,
                optype=fld.optype,
                index=MappingProxyType({term: i for i, term in enumerate(terms)}),
                weights=matrix[offset:offset + slots],
            )
            offset += slots
        self.by_field: Mapping[str, FieldCoefficients] = MappingProxyType(by_field)
        self.bias = matrix[offset] if bias else np.zeros(len(self.classes))
        self.missing_numerics = missing_numerics

    def __contains__(self, field_id: object) -> bool:
        return field_id in self.by_field


class LogisticEvaluator:
    """Computes per-class probabilities from normalized input."""

    def __init__(
        self,
        table: CoefficientTable,
        fields: FieldSet,
        default_numeric_value: str | None = None,
        normalize: bool = False,
    ):
        if default_numeric_value is not None and default_numeric_value not in DEFAULT_NUMERIC_VALUES:
            raise MalformedResourceError(f"Unknown default_numeric_value: {default_numeric_value}")
        self.table = table
        self.fields = fields
        self.default_numeric_value = default_numeric_value
        self.normalize = normalize
        self._defaults: dict[str, float] = {}
        self._scales: dict[str, tuple[float, float]] = {}
        for field_id, coeffs in table.by_field.items():
            if coeffs.optype != NUMERIC:
                continue
            summary = fields[field_id].summary
            if default_numeric_value == "zero":
                self._defaults[field_id] = 0.0
            elif default_numeric_value is not None:
                if default_numeric_value not in summary:
                    raise MalformedResourceError(
                        f"Field {field_id} summary has no {default_numeric_value} for missing values"
                    )
                self._defaults[field_id] = float(summary[default_numeric_value])
            if normalize:
                self._scales[field_id] = (
                    float(summary.get("mean", 0.0)),
                    float(summary.get("standard_deviation", 0.0)),
                )

    def _numeric(self, field_id: str, value: Any) -> float | None:
        """Numeric contribution input, or None when the missing slot applies."""
        fld = self.fields[field_id]
        if value is None:
            if field_id in self._defaults:
                logger.debug("logistic_missing_numeric_default", field_id=field_id)
                value = self._defaults[field_id]
            elif self.table.missing_numerics:
                return None
            else:
                raise MissingInputError(fld.name)
        if not isinstance(value, numbers.Real):
            raise TypeMismatchError(fld.name, value)
        value = float(value)
        if field_id in self._scales:
            mean, stddev = self._scales[field_id]
            value = (value - mean) / stddev if stddev else 0.0
        return value

    def _term_counts(self, coeffs: FieldCoefficients, value: Any) -> list[tuple[str, int]]:
        fld = self.fields[coeffs.field_id]
        if value is None:
            return []
        if coeffs.optype == CATEGORICAL:
            return [(value, 1)] if value in coeffs.index else []
        if not isinstance(value, str):
            raise TypeMismatchError(fld.name, value)
        if coeffs.optype == TEXT:
            tokens = text_tokens(value, fld.term_analysis)
            return unique_terms(tokens, fld.term_forms(), list(coeffs.index))
        return unique_terms(parse_items(value, fld.item_analysis), {}, list(coeffs.index))

    def logits(self, input_data: dict[str, Any]) -> np.ndarray:
        logits = np.array(self.table.bias, dtype=np.float64)
        for field_id in sorted(self.table.by_field):
            coeffs = self.table.by_field[field_id]
            value = input_data.get(field_id)
            if coeffs.optype == NUMERIC:
                number = self._numeric(field_id, value)
                if number is None:
                    logits += coeffs.missing
                else:
                    logits += coeffs.weights[0] * number
                continue
            counts = self._term_counts(coeffs, value)
            if value is None:
                logits += coeffs.missing
            elif coeffs.optype != CATEGORICAL and not counts:
                # no known term in the text: same as missing
                logits += coeffs.missing
            for term, occurrences in counts:
                logits += coeffs.weights[coeffs.index[term]] * occurrences
        return logits

    def probabilities(self, input_data: dict[str, Any]) -> np.ndarray:
        logits = self.logits(input_data)
        exp = np.exp(logits - logits.max())
        return exp / exp.sum()

    def predict(self, input_data: dict[str, Any]) -> dict[str, Any]:
        """Return prediction, its probability and the per-class distribution."""
        probs = self.probabilities(input_data)
        best = int(np.argmax(probs))
        order = sorted(range(len(probs)), key=lambda i: -probs[i])
        return {
            "prediction": self.table.classes[best],
            "probability": round(float(probs[best]), PROBABILITY_PRECISION),
            "distribution": [
                {
                    "category": self.table.classes[i],
                    "probability": round(float(probs[i]), PROBABILITY_PRECISION),
                }
                for i in order
            ],
        }

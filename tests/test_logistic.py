"""
Tests for the logistic regression coefficient table, evaluator and local wrapper.
"""

from __future__ import annotations

import math

import pytest

from mlclient import LocalLogisticRegression
from mlclient.core.exceptions import MalformedResourceError, MissingInputError, TypeMismatchError
from sample_resources import LOGISTIC_ID, YES_WEIGHTS, logistic_resource


def _softmax_yes(logit_yes: float, logit_no: float = 0.0) -> float:
    return math.exp(logit_yes) / (math.exp(logit_yes) + math.exp(logit_no))


def test_ready_synchronously_from_finished_json():
    local = LocalLogisticRegression(logistic_resource())
    assert local.ready
    assert local.resource_id == LOGISTIC_ID
    assert local.classes == ("yes", "no")
    assert local.objective_id == "000003"


def test_table_addressed_by_field_id():
    table = LocalLogisticRegression(logistic_resource()).evaluator.table
    assert sorted(table.by_field) == ["000000", "000001", "000002", "000004"]
    assert "000003" not in table
    color = table.by_field["000001"]
    assert dict(color.index) == {"red": 0, "blue": 1}
    assert color.weights.shape == (3, 2)
    assert list(color.weights[:, 0]) == [1.0, -1.0, 0.2]
    assert list(table.bias) == [0.25, 0.0]


def test_hand_computed_reference():
    """yes = 0.25 + 0.5*2 + 1.0 (red) + 0.3 + 0.4 (items) + 0.05 (review missing) = 3.0"""
    local = LocalLogisticRegression(logistic_resource())
    result = local.predict({"age": 2, "color": "red", "genres": "Action$Adventure"})
    expected = _softmax_yes(3.0)
    assert result["prediction"] == "yes"
    assert result["probability"] == round(expected, 5)
    assert result["distribution"] == [
        {"category": "yes", "probability": round(expected, 5)},
        {"category": "no", "probability": round(1 - expected, 5)},
    ]


def test_two_class_logits_softmax():
    """Bias-only logits [2.0, 0.0] give exp(2) / (exp(2) + exp(0))."""
    yes = [0.0] * 11 + [2.0]
    local = LocalLogisticRegression(
        logistic_resource(coefficients=[["yes", yes], ["no", [0.0] * 12]])
    )
    result = local.predict({})
    assert result["prediction"] == "yes"
    assert result["probability"] == round(math.exp(2) / (math.exp(2) + 1), 5)
    assert result["probability"] == 0.8808


def test_missing_numeric_uses_missing_slot():
    """yes = 0.25 + 0.1 (age missing) - 1.0 (blue) - 0.5 (genres missing) + 0.05 = -1.1"""
    local = LocalLogisticRegression(logistic_resource())
    result = local.predict({"color": "blue"})
    assert result["prediction"] == "no"
    assert result["probability"] == round(1 - _softmax_yes(-1.1), 5)


def test_missing_numeric_without_policy_fails():
    weights = [w for i, w in enumerate(YES_WEIGHTS) if i != 1]
    local = LocalLogisticRegression(
        logistic_resource(missing_numerics=False, coefficients=[["yes", weights], ["no", [0.0] * 11]])
    )
    with pytest.raises(MissingInputError) as exc_info:
        local.predict({"color": "red"})
    assert exc_info.value.field_name == "age"
    # the instance stays usable
    assert local.predict({"age": 1, "color": "red"})["prediction"] == "yes"


def test_default_numeric_value_uses_summary():
    """age defaults to its mean (40): yes = 0.25 + 20 + 1.0 - 0.5 + 0.05"""
    local = LocalLogisticRegression(logistic_resource(default_numeric_value="mean"))
    result = local.predict({"color": "red"})
    assert result["probability"] == round(_softmax_yes(0.25 + 20 + 1.0 - 0.5 + 0.05), 5)


def test_normalize_standardizes_numeric_input():
    """age 50 with mean 40, sd 10 contributes 0.5 * 1.0"""
    local = LocalLogisticRegression(logistic_resource(normalize=True))
    result = local.predict({"age": 50, "color": "red", "genres": "Action", "review": "bad"})
    logit = 0.25 + 0.5 + 1.0 + 0.3 - 0.7
    assert result["probability"] == round(_softmax_yes(logit), 5)


def test_text_terms_and_forms():
    """'Goods, not bad' counts good (through its form) and bad once each."""
    local = LocalLogisticRegression(logistic_resource())
    result = local.predict({"age": 0, "color": "red", "genres": "Action", "review": "Goods, not bad"})
    logit = 0.25 + 1.0 + 0.3 + 0.6 - 0.7
    assert result["probability"] == round(_softmax_yes(logit), 5)


def test_unknown_category_contributes_nothing():
    local = LocalLogisticRegression(logistic_resource())
    result = local.predict({"age": 0, "color": "green", "genres": "Action", "review": "bad"})
    logit = 0.25 + 0.3 - 0.7
    assert result["prediction"] == "no"
    assert result["probability"] == round(1 - _softmax_yes(logit), 5)


def test_numeric_string_is_cast_and_bad_string_rejected():
    local = LocalLogisticRegression(logistic_resource())
    assert local.predict({"age": "2", "color": "red", "genres": "Action$Adventure"}) == local.predict(
        {"age": 2, "color": "red", "genres": "Action$Adventure"}
    )
    with pytest.raises(TypeMismatchError):
        local.predict({"age": "old"})


def test_extra_and_null_keys_ignored():
    local = LocalLogisticRegression(logistic_resource())
    base = {"age": 2, "color": "red"}
    noisy = dict(base, garbage="x", genres=None, label="yes")
    assert local.predict(noisy) == local.predict(base)


def test_deterministic_repeat():
    local = LocalLogisticRegression(logistic_resource())
    data = {"age": 3.3, "color": "blue", "genres": "Adventure", "review": "good good bad"}
    assert local.predict(data) == local.predict(data)


def test_callback_style():
    local = LocalLogisticRegression(logistic_resource())
    calls = []
    local.predict({"age": "old"}, lambda err, res: calls.append((err, res)))
    local.predict({"age": 1}, lambda err, res: calls.append((err, res)))
    assert isinstance(calls[0][0], TypeMismatchError) and calls[0][1] is None
    assert calls[1][0] is None and calls[1][1]["prediction"] in ("yes", "no")


def test_coefficient_length_mismatch_is_malformed():
    with pytest.raises(MalformedResourceError, match="expected 12"):
        LocalLogisticRegression(logistic_resource(coefficients=[["yes", [0.0] * 5], ["no", [0.0] * 12]]))


def test_missing_logistic_key_is_malformed():
    resource = logistic_resource()
    del resource["object"]["logistic_regression"]
    with pytest.raises(MalformedResourceError, match="logistic_regression"):
        LocalLogisticRegression(resource)


def test_unknown_default_numeric_value_is_malformed():
    with pytest.raises(MalformedResourceError):
        LocalLogisticRegression(logistic_resource(default_numeric_value="mode"))

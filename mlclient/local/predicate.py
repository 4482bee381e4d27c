"""
Predicates: the boolean test a tree node applies to one field's value.

Operators may carry a '*' suffix ('<=*', '=*', ...) meaning that missing values
also satisfy the predicate. '= null' and '!= null' test for absence/presence.
Predicates on text and items fields compare the number of occurrences of their
term (0/1 for items) against the value.
"""

from __future__ import annotations

import operator
from typing import Any, Callable

from mlclient.core.constants import ITEMS, TEXT
from mlclient.core.exceptions import MalformedResourceError, TypeMismatchError
from mlclient.local.fields import FieldSet
from mlclient.local.terms import item_matches, term_matches

OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "=": operator.eq,
    "!=": operator.ne,
    "in": lambda value, options: value in options,
    "!in": lambda value, options: value not in options,
}

MISSING_SUFFIX = "*"


class Predicate:
    """A single test on one field; Predicate.always() is the root's 'true'."""

    __slots__ = ("operator", "field_id", "value", "term", "missing")

    def __init__(
        self,
        op: str | None,
        field_id: str | None,
        value: Any = None,
        term: str | None = None,
    ):
        self.missing = bool(op) and op.endswith(MISSING_SUFFIX)
        self.operator = op.rstrip(MISSING_SUFFIX) if op else None
        self.field_id = field_id
        self.value = value
        self.term = term

    @classmethod
    def always(cls) -> "Predicate":
        return cls(None, None)

    @classmethod
    def from_json(cls, predicate: Any) -> "Predicate":
        if predicate is True or predicate is None:
            return cls.always()
        if not isinstance(predicate, dict) or "field" not in predicate or "operator" not in predicate:
            raise MalformedResourceError(f"Cannot parse predicate: {predicate!r}")
        op = predicate["operator"]
        if op.rstrip(MISSING_SUFFIX) not in OPERATORS:
            raise MalformedResourceError(f"Unknown predicate operator: {op}")
        return cls(op, predicate["field"], predicate.get("value"), predicate.get("term"))

    @property
    def is_true(self) -> bool:
        return self.operator is None

    @property
    def tests_missing(self) -> bool:
        return self.value is None and self.operator in ("=", "!=")

    def accepts_missing(self) -> bool:
        """True when an absent value satisfies this predicate."""
        return self.is_true or self.missing or (self.tests_missing and self.operator == "=")

    def apply(self, input_data: dict[str, Any], fields: FieldSet) -> bool:
        if self.is_true:
            return True
        value = input_data.get(self.field_id)
        if self.tests_missing:
            return (value is None) == (self.operator == "=")
        if value is None:
            return self.missing
        fld = fields[self.field_id]
        if self.term is not None:
            if not isinstance(value, str):
                raise TypeMismatchError(fld.name, value)
            if fld.optype == TEXT:
                forms = [self.term] + fld.term_forms().get(self.term, [])
                value = term_matches(value, forms, fld.term_analysis)
            elif fld.optype == ITEMS:
                value = item_matches(value, self.term, fld.item_analysis)
        try:
            return bool(OPERATORS[self.operator](value, self.value))
        except TypeError:
            raise TypeMismatchError(fld.name, value) from None

    def to_rule(self, fields: FieldSet) -> str:
        """Human-readable form, e.g. 'petal length > 2.45'."""
        if self.is_true:
            return "TRUE"
        name = fields.name(self.field_id)
        if self.tests_missing:
            return f"{name} is {'' if self.operator == '=' else 'not '}missing"
        suffix = " or missing" if self.missing else ""
        if self.term is not None:
            is_text = fields[self.field_id].optype == TEXT
            verb = "contains" if is_text else "has"
            if self.value == 0 and self.operator in ("=", "<="):
                negated = "does not contain" if is_text else "does not have"
                return f"{name} {negated} {self.term}{suffix}"
            if self.value == 0 and self.operator == ">":
                return f"{name} {verb} {self.term}{suffix}"
            return f"{name} {verb} {self.term} {self.operator} {self.value} times{suffix}"
        return f"{name} {self.operator} {self.value}{suffix}"

"""
Field descriptors and input normalization.

Builds the immutable field table of a resource once (including the
name -> id lookup) and turns caller input keyed by field name into a fresh
mapping keyed by field id with numeric values cast.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from mlclient.client_logging import get_logger
from mlclient.core.constants import NUMERIC
from mlclient.core.exceptions import MalformedResourceError, TypeMismatchError

logger = get_logger(__name__)


@dataclass(frozen=True)
class Field:
    """One field of a resource, as described by its 'fields' entry."""

    id: str
    name: str
    optype: str
    summary: Mapping[str, Any] = field(default_factory=dict)
    prefix: str | None = None
    suffix: str | None = None
    term_analysis: Mapping[str, Any] = field(default_factory=dict)
    item_analysis: Mapping[str, Any] = field(default_factory=dict)
    column_number: int | None = None

    @classmethod
    def from_json(cls, field_id: str, descriptor: dict[str, Any]) -> "Field":
        if not isinstance(descriptor, dict) or "optype" not in descriptor:
            raise MalformedResourceError(f"Field {field_id} has no optype")
        return cls(
            id=field_id,
            name=descriptor.get("name") or field_id,
            optype=descriptor["optype"],
            summary=descriptor.get("summary") or {},
            prefix=descriptor.get("prefix"),
            suffix=descriptor.get("suffix"),
            term_analysis=descriptor.get("term_analysis") or {},
            item_analysis=descriptor.get("item_analysis") or {},
            column_number=descriptor.get("column_number"),
        )

    def categories(self) -> list[str]:
        return [category for category, _count in self.summary.get("categories", [])]

    def tag_cloud(self) -> list[str]:
        return [term for term, _count in self.summary.get("tag_cloud", [])]

    def items(self) -> list[str]:
        return [item for item, _count in self.summary.get("items", [])]

    def term_forms(self) -> dict[str, list[str]]:
        return dict(self.summary.get("term_forms", {}))


class FieldSet:
    """
    Fields used by a local structure, keyed by id.

    When model_fields is given it selects the fields the structure uses; each of
    them must be present in fields, which supplies its name and summary.
    """

    def __init__(
        self,
        fields: dict[str, Any],
        model_fields: dict[str, Any] | None = None,
    ):
        if not isinstance(fields, dict):
            raise MalformedResourceError("Resource has no 'fields' mapping")
        if model_fields:
            missing = sorted(fid for fid in model_fields if fid not in fields)
            if missing:
                raise MalformedResourceError(
                    "Some fields are missing to generate a local model: "
                    f"{', '.join(missing)}. Please provide a model with the complete list of fields"
                )
            descriptors = {}
            for field_id in model_fields:
                merged = dict(model_fields[field_id] or {})
                merged["name"] = fields[field_id].get("name")
                merged["summary"] = fields[field_id].get("summary")
                merged.setdefault("optype", fields[field_id].get("optype"))
                descriptors[field_id] = merged
        else:
            descriptors = fields

        by_id = {fid: Field.from_json(fid, descriptors[fid]) for fid in sorted(descriptors)}
        names: dict[str, str] = {}
        for field_id, fld in by_id.items():
            # lowest id wins on duplicate names
            names.setdefault(fld.name, field_id)
        self.by_id: Mapping[str, Field] = MappingProxyType(by_id)
        self.name_to_id: Mapping[str, str] = MappingProxyType(names)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self.by_id

    def __getitem__(self, field_id: str) -> Field:
        return self.by_id[field_id]

    def __len__(self) -> int:
        return len(self.by_id)

    def resolve(self, key: Any) -> str | None:
        """Field id for a field name or id; None when unknown."""
        if not isinstance(key, str):
            return None
        if key in self.name_to_id:
            return self.name_to_id[key]
        if key in self.by_id:
            return key
        return None

    def field_ids_sorted(self) -> list[str]:
        return sorted(self.by_id)

    def name(self, field_id: str) -> str:
        fld = self.by_id.get(field_id)
        return fld.name if fld else field_id


def strip_affixes(value: str, fld: Field) -> str:
    """Remove the field's prefix and suffix from a textual numeric value."""
    if fld.prefix and value.startswith(fld.prefix):
        value = value[len(fld.prefix):]
    if fld.suffix and value.endswith(fld.suffix):
        value = value[: len(value) - len(fld.suffix)]
    return value


def cast(value: Any, fld: Field) -> Any:
    """
    Cast a textual value of a numeric field to float.

    Non-numeric fields keep their value as given, even when it is not a string.
    """
    if fld.optype == NUMERIC and isinstance(value, str):
        try:
            return float(strip_affixes(value, fld).strip())
        except ValueError:
            raise TypeMismatchError(fld.name, value) from None
    return value


def normalize(
    input_data: Mapping[Any, Any],
    fields: FieldSet,
    objective_id: str | None = None,
) -> dict[str, Any]:
    """
    Return a new mapping keyed by field id with cast values.

    Entries whose value is None or whose key is not a known field name (or id)
    are dropped, as is the objective field. input_data is not modified.
    """
    normalized: dict[str, Any] = {}
    dropped: list[str] = []
    for key, value in input_data.items():
        field_id = fields.resolve(key) if value is not None else None
        if field_id is None or field_id == objective_id:
            dropped.append(str(key))
            continue
        normalized[field_id] = cast(value, fields[field_id])
    if dropped:
        logger.debug("normalize_dropped_fields", fields=sorted(dropped))
    return normalized

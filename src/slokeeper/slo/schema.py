"""
Declarative schema for the ``sumologic_slo`` resource configuration.

The schema describes the flat configuration a user writes: which fields
exist, their semantic type, whether they are required or computed by the
server, their defaults and their validators. Cross-field relations
(``timezone`` for calendar windows, unique row ids, ...) are enforced by
the codec once the document has been projected into typed records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union

from slokeeper.core.errors import ValidationError
from slokeeper.slo.models import (
    COMPLIANCE_SIZES,
    ComplianceType,
    EvaluationType,
    QueryGroupType,
    QueryType,
    SignalType,
    ThresholdOp,
)
from slokeeper.slo import validators as v

AGGREGATION_PATTERN = r"^(Avg|Min|Max|Sum|p[5-9][0-9](\.[0-9]{1,3})?)$"
AGGREGATION_WINDOW_PATTERN = r"^[0-9]{1,2}(m|h)$"

MISSING_FIELD = "MissingField"
INVALID_TYPE = "InvalidType"
UNKNOWN_FIELD = "UnknownField"


class FieldType(str, Enum):
    STRING = "string"
    INT = "integer"
    BOOL = "boolean"
    FLOAT = "float"
    MAP = "mapping"
    LIST = "list"


@dataclass(frozen=True)
class Field:
    """One configuration attribute.

    ``elem`` describes the contents of a MAP or LIST: either a nested schema
    (``Mapping[str, Field]``) or a scalar ``FieldType`` for every value.
    """

    type: FieldType
    description: str
    required: bool = False
    computed: bool = False
    default: Any = None
    validators: tuple[v.Validator, ...] = ()
    elem: Union["Schema", FieldType, None] = None


Schema = Mapping[str, Field]


def _type_matches(field_type: FieldType, value: Any) -> bool:
    if field_type is FieldType.STRING:
        return isinstance(value, str)
    if field_type is FieldType.BOOL:
        return isinstance(value, bool)
    if field_type is FieldType.INT:
        return isinstance(value, int) and not isinstance(value, bool)
    if field_type is FieldType.FLOAT:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if field_type is FieldType.MAP:
        return isinstance(value, Mapping)
    return isinstance(value, (list, tuple))


QUERY_SCHEMA: Schema = {
    "row_id": Field(FieldType.STRING, "Row identifier, unique within the indicator", required=True),
    "query": Field(FieldType.STRING, "Query expression", required=True),
    "use_row_count": Field(FieldType.BOOL, "Count rows instead of using a field value", default=False),
    "field": Field(FieldType.STRING, "Column or metric the query evaluates"),
}

QUERY_GROUP_SCHEMA: Schema = {
    "query_group_type": Field(
        FieldType.STRING,
        "Role of the group in the indicator",
        required=True,
        validators=(v.StringInSlice(tuple(member.value for member in QueryGroupType)),),
    ),
    "query_group": Field(
        FieldType.LIST,
        "Ordered queries of the group",
        required=True,
        validators=(v.Cardinality(min_items=1),),
        elem=QUERY_SCHEMA,
    ),
}

COMPLIANCE_SCHEMA: Schema = {
    "type": Field(
        FieldType.STRING,
        "Compliance window type",
        required=True,
        validators=(v.Enum.of(ComplianceType),),
    ),
    "target": Field(
        FieldType.INT,
        "Attainment target percentage",
        required=True,
        validators=(v.IntRange(0, 100),),
    ),
    "timezone": Field(FieldType.STRING, "IANA time zone, required for calendar windows"),
    "size": Field(
        FieldType.STRING,
        "Rolling window size, required for rolling windows",
        validators=(v.StringInSlice(COMPLIANCE_SIZES),),
    ),
}

INDICATOR_SCHEMA: Schema = {
    "evaluation_type": Field(
        FieldType.STRING,
        "How the indicator is evaluated",
        required=True,
        validators=(v.Enum.of(EvaluationType),),
    ),
    "query_type": Field(
        FieldType.STRING,
        "Data source of the queries",
        required=True,
        validators=(v.StringInSlice(tuple(member.value for member in QueryType)),),
    ),
    "threshold": Field(FieldType.FLOAT, "Threshold compared against the aggregated value", required=True),
    "op": Field(
        FieldType.STRING,
        "Comparison operator applied to the threshold",
        required=True,
        validators=(v.StringInSlice(tuple(member.value for member in ThresholdOp)),),
    ),
    "aggregation": Field(
        FieldType.STRING,
        "Aggregation function (Avg, Min, Max, Sum or a percentile such as p95)",
        required=True,
        validators=(v.Regex.compile(AGGREGATION_PATTERN),),
    ),
    "size": Field(
        FieldType.STRING,
        "Aggregation window (1m to 1h)",
        required=True,
        validators=(v.Regex.compile(AGGREGATION_WINDOW_PATTERN),),
    ),
    "queries": Field(
        FieldType.LIST,
        "Query groups computing the indicator",
        required=True,
        validators=(v.Cardinality(min_items=1, max_items=2),),
        elem=QUERY_GROUP_SCHEMA,
    ),
}

SLO_SCHEMA: Schema = {
    "name": Field(FieldType.STRING, "SLO name", required=True),
    "description": Field(FieldType.STRING, "SLO description", required=True),
    "version": Field(FieldType.INT, "Document version", computed=True),
    "created_at": Field(FieldType.STRING, "Creation timestamp", computed=True),
    "created_by": Field(FieldType.STRING, "Creator id", computed=True),
    "modified_at": Field(FieldType.STRING, "Last modification timestamp", computed=True),
    "modified_by": Field(FieldType.STRING, "Last modifier id", computed=True),
    "parent_id": Field(FieldType.STRING, "Parent folder id; defaults to the root folder", computed=True),
    "content_type": Field(FieldType.STRING, "Always 'slo'", computed=True),
    "is_system": Field(FieldType.BOOL, "Whether the SLO is system-managed", computed=True),
    "is_mutable": Field(FieldType.BOOL, "Whether the SLO can be modified", computed=True),
    "is_locked": Field(FieldType.BOOL, "Whether the SLO is locked", default=False),
    "signal_type": Field(
        FieldType.STRING,
        "Signal measured by the SLO",
        validators=(v.Enum.of(SignalType),),
    ),
    "service": Field(FieldType.STRING, "Service the SLO belongs to", computed=True),
    "application": Field(FieldType.STRING, "Application the SLO belongs to", computed=True),
    "compliance": Field(FieldType.MAP, "Compliance window", required=True, elem=COMPLIANCE_SCHEMA),
    "indicator": Field(FieldType.MAP, "Indicator definition", required=True, elem=INDICATOR_SCHEMA),
    "post_request_map": Field(
        FieldType.MAP,
        "Free-form string map kept in state; never sent to the server",
        elem=FieldType.STRING,
    ),
}


def _check(schema: Schema, data: Mapping[str, Any], prefix: str, errors: list[ValidationError]) -> None:
    for key in data:
        if key not in schema:
            errors.append(ValidationError(f"{prefix}{key}", "unknown field", code=UNKNOWN_FIELD))

    for name, spec in schema.items():
        path = f"{prefix}{name}"
        value = data.get(name)
        if value is None:
            if spec.required:
                errors.append(ValidationError(path, "required field is missing", code=MISSING_FIELD))
            continue
        if not _type_matches(spec.type, value):
            errors.append(
                ValidationError(
                    path,
                    f"expected {spec.type.value}, got {type(value).__name__}",
                    code=INVALID_TYPE,
                )
            )
            continue
        if spec.required and spec.type is FieldType.STRING and not value:
            errors.append(ValidationError(path, "must not be empty", code=MISSING_FIELD))
            continue
        try:
            v.run_all(spec.validators, value, path)
        except ValidationError as exc:
            errors.append(exc)
            continue

        if isinstance(spec.elem, FieldType):
            for key, item in value.items():
                if not _type_matches(spec.elem, item):
                    errors.append(
                        ValidationError(
                            f"{path}.{key}",
                            f"expected {spec.elem.value}, got {type(item).__name__}",
                            code=INVALID_TYPE,
                        )
                    )
        elif spec.elem is not None and spec.type is FieldType.MAP:
            _check(spec.elem, value, f"{path}.", errors)
        elif spec.elem is not None:
            for index, item in enumerate(value):
                item_path = f"{path}[{index}]"
                if not isinstance(item, Mapping):
                    errors.append(ValidationError(item_path, "expected mapping", code=INVALID_TYPE))
                    continue
                _check(spec.elem, item, f"{item_path}.", errors)


def collect_errors(config: Mapping[str, Any], schema: Schema = SLO_SCHEMA) -> list[ValidationError]:
    """Validate ``config`` and return every violation found."""
    errors: list[ValidationError] = []
    _check(schema, config, "", errors)
    return errors


def validate_config(config: Mapping[str, Any], schema: Schema = SLO_SCHEMA) -> None:
    """Validate ``config``, raising the first violation."""
    errors = collect_errors(config, schema)
    if errors:
        raise errors[0]

"""
Translation between the flat resource configuration and ``SLO`` records.

``decode`` validates the configuration, projects it into typed records and
runs the cross-field checks the schema layer cannot express. ``encode``
writes a server document back into the resource handle, scalars first and
nested structures last.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

import structlog

from slokeeper.core.errors import StateWriteFailed, ValidationError
from slokeeper.slo.models import (
    SLO,
    SLO_CONTENT_TYPE,
    Compliance,
    ComplianceType,
    EvaluationType,
    Indicator,
    Query,
    QueryGroup,
    QueryGroupType,
    QueryType,
    SignalType,
    SloKind,
    ThresholdOp,
)
from slokeeper.slo.schema import MISSING_FIELD, SLO_SCHEMA, validate_config

if TYPE_CHECKING:
    from slokeeper.providers.base import ResourceData

logger = structlog.get_logger()

INVALID_RELATION = "InvalidRelation"


def decode(data: ResourceData, *, kind: SloKind = SloKind.CREATE) -> SLO:
    """Build an ``SLO`` from the resource handle.

    Raises:
        ValidationError: if the configuration violates the schema or a
            cross-field rule. No request should be issued in that case.
    """
    config = data.config()
    validate_config(config)

    post_request_map = config.get("post_request_map")
    if post_request_map:
        logger.debug("slo_post_request_map_not_sent", keys=sorted(post_request_map))

    signal_type = config.get("signal_type")
    slo = SLO(
        id=data.id,
        name=config["name"],
        description=config["description"],
        version=config.get("version") or 0,
        created_at=config.get("created_at"),
        created_by=config.get("created_by"),
        modified_at=config.get("modified_at"),
        modified_by=config.get("modified_by"),
        parent_id=config.get("parent_id") or "",
        content_type=SLO_CONTENT_TYPE,
        kind=kind,
        is_system=bool(config.get("is_system", False)),
        is_mutable=bool(config.get("is_mutable", True)),
        is_locked=bool(config.get("is_locked", SLO_SCHEMA["is_locked"].default)),
        signal_type=SignalType(signal_type) if signal_type else None,
        service=config.get("service") or None,
        application=config.get("application") or None,
        compliance=decode_compliance(config["compliance"]),
        indicator=decode_indicator(config["indicator"]),
    )
    check_relations(slo)
    return slo


def decode_compliance(raw: Mapping[str, Any]) -> Compliance:
    return Compliance(
        type=ComplianceType(raw["type"]),
        target=raw["target"],
        timezone=raw.get("timezone") or None,
        size=raw.get("size") or None,
    )


def decode_indicator(raw: Mapping[str, Any]) -> Indicator:
    queries = [
        QueryGroup(
            query_group_type=QueryGroupType(group["query_group_type"]),
            query_group=[
                Query(
                    row_id=item["row_id"],
                    query=item["query"],
                    use_row_count=bool(item.get("use_row_count", False)),
                    field=item.get("field") or None,
                )
                for item in group["query_group"]
            ],
        )
        for group in raw["queries"]
    ]
    return Indicator(
        evaluation_type=EvaluationType(raw["evaluation_type"]),
        query_type=QueryType(raw["query_type"]),
        threshold=float(raw["threshold"]),
        op=ThresholdOp(raw["op"]),
        aggregation=raw["aggregation"],
        size=raw["size"],
        queries=queries,
    )


def check_relations(slo: SLO) -> None:
    """Enforce cross-field rules on a decoded SLO."""
    compliance = slo.compliance
    if compliance.type is ComplianceType.ROLLING and not compliance.size:
        raise ValidationError(
            "compliance.size", "required when type is Rolling", code=MISSING_FIELD
        )
    if compliance.type is ComplianceType.CALENDAR and not compliance.timezone:
        raise ValidationError(
            "compliance.timezone", "required when type is Calendar", code=MISSING_FIELD
        )

    indicator = slo.indicator
    group_types: list[QueryGroupType] = []
    for position, group in enumerate(indicator.queries):
        if group.query_group_type in group_types:
            raise ValidationError(
                f"indicator.queries[{position}].query_group_type",
                f"query group type '{group.query_group_type.value}' appears more than once",
                code=INVALID_RELATION,
            )
        group_types.append(group.query_group_type)

    # With at most two distinct groups this leaves Threshold alone or
    # Threshold paired with one of Successful/Unsuccessful/Total.
    if (
        indicator.evaluation_type is EvaluationType.THRESHOLD
        and QueryGroupType.THRESHOLD not in group_types
    ):
        raise ValidationError(
            "indicator.queries",
            "Threshold evaluation requires a query group of type 'Threshold'",
            code=INVALID_RELATION,
        )

    seen: set[str] = set()
    for group_index, group in enumerate(indicator.queries):
        for query_index, query in enumerate(group.query_group):
            if query.row_id in seen:
                raise ValidationError(
                    f"indicator.queries[{group_index}].query_group[{query_index}].row_id",
                    f"row id '{query.row_id}' is not unique within the indicator",
                    code=INVALID_RELATION,
                )
            seen.add(query.row_id)


def encode_compliance(compliance: Compliance) -> dict[str, Any]:
    encoded: dict[str, Any] = {"type": compliance.type.value, "target": compliance.target}
    if compliance.timezone:
        encoded["timezone"] = compliance.timezone
    if compliance.size:
        encoded["size"] = compliance.size
    return encoded


def encode_indicator(indicator: Indicator) -> dict[str, Any]:
    queries = []
    for group in indicator.queries:
        rows = []
        for query in group.query_group:
            row: dict[str, Any] = {
                "row_id": query.row_id,
                "query": query.query,
                "use_row_count": query.use_row_count,
            }
            if query.field:
                row["field"] = query.field
            rows.append(row)
        queries.append({"query_group_type": group.query_group_type.value, "query_group": rows})
    return {
        "evaluation_type": indicator.evaluation_type.value,
        "query_type": indicator.query_type.value,
        "threshold": indicator.threshold,
        "op": indicator.op.value,
        "aggregation": indicator.aggregation,
        "size": indicator.size,
        "queries": queries,
    }


def _write(data: ResourceData, key: str, value: Any) -> None:
    try:
        data.set(key, value)
    except Exception as exc:
        raise StateWriteFailed(key, exc) from exc


def encode(slo: SLO, data: ResourceData) -> None:
    """Write ``slo`` back into the resource handle.

    Raises:
        StateWriteFailed: if the host rejects any value.
    """
    scalars: list[tuple[str, Any]] = [
        ("name", slo.name),
        ("description", slo.description),
        ("version", slo.version),
        ("created_at", slo.created_at),
        ("created_by", slo.created_by),
        ("modified_at", slo.modified_at),
        ("modified_by", slo.modified_by),
        ("parent_id", slo.parent_id or None),
        ("content_type", SLO_CONTENT_TYPE),
        ("is_mutable", slo.is_mutable),
        ("is_locked", slo.is_locked),
        ("is_system", slo.is_system),
        ("service", slo.service),
        ("application", slo.application),
        ("signal_type", slo.signal_type.value if slo.signal_type else None),
    ]
    for key, value in scalars:
        _write(data, key, value)

    _write(data, "compliance", encode_compliance(slo.compliance))
    _write(data, "indicator", encode_indicator(slo.indicator))

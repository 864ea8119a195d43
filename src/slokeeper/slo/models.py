"""
SLO data models.

Typed records for the Sumo Logic SLO library document. The configuration
side uses snake_case names; the server speaks camelCase JSON. ``to_payload``
and ``from_payload`` perform that single structural translation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

SLO_CONTENT_TYPE = "slo"


class SignalType(str, Enum):
    """What the SLO measures."""

    LATENCY = "Latency"
    ERROR = "Error"
    THROUGHPUT = "Throughput"
    AVAILABILITY = "Availability"
    OTHER = "Other"


class SloKind(str, Enum):
    """Document type tag sent to the server."""

    CREATE = "SlosLibrarySlo"
    UPDATE = "SlosLibrarySloUpdate"


class ComplianceType(str, Enum):
    ROLLING = "Rolling"
    CALENDAR = "Calendar"


class EvaluationType(str, Enum):
    THRESHOLD = "Threshold"
    RANGE = "Range"


class QueryType(str, Enum):
    LOGS = "Logs"
    METRICS = "Metrics"


class ThresholdOp(str, Enum):
    LESS_THAN = "LessThan"
    GREATER_THAN = "GreaterThan"
    LESS_THAN_OR_EQUAL = "LessThanOrEqual"
    GREATER_THAN_OR_EQUAL = "GreaterThanOrEqual"


class QueryGroupType(str, Enum):
    SUCCESSFUL = "Successful"
    UNSUCCESSFUL = "Unsuccessful"
    TOTAL = "Total"
    THRESHOLD = "Threshold"


# Rolling compliance window sizes accepted by the server
COMPLIANCE_SIZES = tuple(f"{days}d" for days in range(1, 15))

_KIND_VALUES = frozenset(kind.value for kind in SloKind)


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass
class Query:
    """A single row of a query group."""

    row_id: str
    query: str
    use_row_count: bool = False
    field: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _drop_none(
            {
                "rowId": self.row_id,
                "query": self.query,
                "useRowCount": self.use_row_count,
                "field": self.field,
            }
        )

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Query:
        return cls(
            row_id=data.get("rowId", ""),
            query=data.get("query", ""),
            use_row_count=bool(data.get("useRowCount", False)),
            field=data.get("field") or None,
        )


@dataclass
class QueryGroup:
    """Queries sharing a role in the indicator (successful, total, ...)."""

    query_group_type: QueryGroupType
    query_group: list[Query] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "queryGroupType": self.query_group_type.value,
            "queryGroup": [query.to_payload() for query in self.query_group],
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> QueryGroup:
        return cls(
            query_group_type=QueryGroupType(data["queryGroupType"]),
            query_group=[Query.from_payload(item) for item in data.get("queryGroup") or []],
        )


@dataclass
class Compliance:
    """Window over which SLO attainment is measured."""

    type: ComplianceType
    target: int
    timezone: str | None = None
    size: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _drop_none(
            {
                "complianceType": self.type.value,
                "target": self.target,
                "timezone": self.timezone,
                "size": self.size,
            }
        )

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Compliance:
        return cls(
            type=ComplianceType(data["complianceType"]),
            target=int(data["target"]),
            timezone=data.get("timezone") or None,
            size=data.get("size") or None,
        )


@dataclass
class Indicator:
    """Measurable quantity and the queries computing it."""

    evaluation_type: EvaluationType
    query_type: QueryType
    threshold: float
    op: ThresholdOp
    aggregation: str
    size: str
    queries: list[QueryGroup] = field(default_factory=list)

    def row_ids(self) -> list[str]:
        return [query.row_id for group in self.queries for query in group.query_group]

    def to_payload(self) -> dict[str, Any]:
        return {
            "evaluationType": self.evaluation_type.value,
            "queryType": self.query_type.value,
            "threshold": self.threshold,
            "op": self.op.value,
            "aggregation": self.aggregation,
            "size": self.size,
            "queries": [group.to_payload() for group in self.queries],
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Indicator:
        return cls(
            evaluation_type=EvaluationType(data["evaluationType"]),
            query_type=QueryType(data["queryType"]),
            threshold=float(data["threshold"]),
            op=ThresholdOp(data["op"]),
            aggregation=data["aggregation"],
            size=data["size"],
            queries=[QueryGroup.from_payload(item) for item in data.get("queries") or []],
        )


@dataclass
class SLO:
    """
    Service Level Objective as stored in the SLO library.

    ``id``, ``version``, the created/modified stamps and the ``is_system`` /
    ``is_mutable`` flags are owned by the server.
    """

    name: str
    description: str
    compliance: Compliance
    indicator: Indicator
    id: str = ""
    version: int = 0
    created_at: str | None = None
    created_by: str | None = None
    modified_at: str | None = None
    modified_by: str | None = None
    parent_id: str = ""
    content_type: str = SLO_CONTENT_TYPE
    kind: SloKind = SloKind.CREATE
    is_system: bool = False
    is_mutable: bool = True
    is_locked: bool = False
    signal_type: SignalType | None = None
    service: str | None = None
    application: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase document the server expects."""
        return _drop_none(
            {
                "id": self.id or None,
                "name": self.name,
                "description": self.description,
                "version": self.version,
                "createdAt": self.created_at,
                "createdBy": self.created_by,
                "modifiedAt": self.modified_at,
                "modifiedBy": self.modified_by,
                "parentId": self.parent_id or None,
                "contentType": self.content_type,
                "type": self.kind.value,
                "isSystem": self.is_system,
                "isMutable": self.is_mutable,
                "isLocked": self.is_locked,
                "signalType": self.signal_type.value if self.signal_type else None,
                "service": self.service,
                "application": self.application,
                "compliance": self.compliance.to_payload(),
                "indicator": self.indicator.to_payload(),
            }
        )

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> SLO:
        """Build an SLO from a server response document."""
        signal_type = data.get("signalType")
        kind = data.get("type")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            version=int(data.get("version") or 0),
            created_at=data.get("createdAt"),
            created_by=data.get("createdBy"),
            modified_at=data.get("modifiedAt"),
            modified_by=data.get("modifiedBy"),
            parent_id=data.get("parentId") or "",
            content_type=data.get("contentType") or SLO_CONTENT_TYPE,
            # responses may carry a read-side type tag; only the two request kinds are modelled
            kind=SloKind(kind) if kind in _KIND_VALUES else SloKind.CREATE,
            is_system=bool(data.get("isSystem", False)),
            is_mutable=bool(data.get("isMutable", True)),
            is_locked=bool(data.get("isLocked", False)),
            signal_type=SignalType(signal_type) if signal_type else None,
            service=data.get("service") or None,
            application=data.get("application") or None,
            compliance=Compliance.from_payload(data["compliance"]),
            indicator=Indicator.from_payload(data["indicator"]),
        )


@dataclass(frozen=True)
class Folder:
    """SLO library folder. Only ``id`` is consumed when resolving parents."""

    id: str
    name: str = ""
    description: str = ""
    parent_id: str | None = None
    content_type: str = "Folder"
    children: tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Folder:
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            parent_id=data.get("parentId"),
            content_type=data.get("contentType", "Folder"),
            children=tuple(child["id"] for child in data.get("children") or [] if "id" in child),
        )

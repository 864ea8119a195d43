"""SLO library document: models, schema, codec and API client."""

from slokeeper.slo.codec import decode, encode
from slokeeper.slo.gateway import ROOT_FOLDER_ALIAS, SloGateway
from slokeeper.slo.models import (
    SLO,
    Compliance,
    ComplianceType,
    EvaluationType,
    Folder,
    Indicator,
    Query,
    QueryGroup,
    QueryGroupType,
    QueryType,
    SignalType,
    SloKind,
    ThresholdOp,
)
from slokeeper.slo.schema import SLO_SCHEMA, collect_errors, validate_config

__all__ = [
    "SLO",
    "Compliance",
    "ComplianceType",
    "EvaluationType",
    "Folder",
    "Indicator",
    "Query",
    "QueryGroup",
    "QueryGroupType",
    "QueryType",
    "SignalType",
    "SloKind",
    "ThresholdOp",
    "SLO_SCHEMA",
    "validate_config",
    "collect_errors",
    "decode",
    "encode",
    "SloGateway",
    "ROOT_FOLDER_ALIAS",
]

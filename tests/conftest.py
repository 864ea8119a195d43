"""Root test configuration."""

import copy
import logging

import pytest

from slokeeper.logging import configure_logging

API = "https://api.test.sumologic.com/api/v1"

CHECKOUT_LATENCY = {
    "name": "checkout-latency",
    "description": "p95<300ms",
    "signal_type": "Latency",
    "compliance": {"type": "Rolling", "target": 99, "size": "7d"},
    "indicator": {
        "evaluation_type": "Threshold",
        "query_type": "Metrics",
        "threshold": 300.0,
        "op": "LessThan",
        "aggregation": "p95",
        "size": "5m",
        "queries": [
            {
                "query_group_type": "Threshold",
                "query_group": [{"row_id": "A", "query": "cpu", "use_row_count": False}],
            }
        ],
    },
}


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    configure_logging(logging.WARNING, json=False)


@pytest.fixture
def slo_config():
    """Minimal rolling-window SLO configuration."""
    return copy.deepcopy(CHECKOUT_LATENCY)


@pytest.fixture
def slo_document():
    """Factory for SLO documents as returned by the server."""

    def _make(slo_id="slo-1", **overrides):
        document = {
            "id": slo_id,
            "name": "checkout-latency",
            "description": "p95<300ms",
            "version": 1,
            "createdAt": "2024-05-01T10:00:00Z",
            "createdBy": "user-1",
            "modifiedAt": "2024-05-01T10:00:00Z",
            "modifiedBy": "user-1",
            "parentId": "root-folder",
            "contentType": "slo",
            "type": "SlosLibrarySlo",
            "isSystem": False,
            "isMutable": True,
            "isLocked": False,
            "signalType": "Latency",
            "service": "checkout",
            "application": "shop",
            "compliance": {"complianceType": "Rolling", "target": 99, "size": "7d"},
            "indicator": {
                "evaluationType": "Threshold",
                "queryType": "Metrics",
                "threshold": 300.0,
                "op": "LessThan",
                "aggregation": "p95",
                "size": "5m",
                "queries": [
                    {
                        "queryGroupType": "Threshold",
                        "queryGroup": [{"rowId": "A", "query": "cpu", "useRowCount": False}],
                    }
                ],
            },
        }
        document.update(overrides)
        return document

    return _make


@pytest.fixture
def restore_test_logging():
    """Put the quiet test logging back after a test reconfigures it."""
    yield
    configure_logging(logging.WARNING, json=False)

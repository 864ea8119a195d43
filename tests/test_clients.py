import asyncio

import httpx
import pytest
import respx
from httpx import Response
from slokeeper.clients.base import BaseHTTPClient, PermanentHTTPError, is_retryable_status
from slokeeper.core.errors import OperationCancelled, TransportError

BASE = "https://api.example.com"


@pytest.mark.asyncio
async def test_client_success():
    client = BaseHTTPClient(BASE, backoff_factor=0)

    with respx.mock:
        respx.get(f"{BASE}/things/1").mock(return_value=Response(200, json={"id": "1"}))

        data = await client._request("GET", "/things/1")

    assert data == {"id": "1"}


@pytest.mark.asyncio
async def test_client_empty_body_returns_empty_dict():
    client = BaseHTTPClient(BASE, backoff_factor=0)

    with respx.mock:
        respx.delete(f"{BASE}/things/1").mock(return_value=Response(204))

        assert await client._request("DELETE", "/things/1") == {}


@pytest.mark.asyncio
async def test_client_retry_on_503():
    client = BaseHTTPClient(BASE, max_retries=2, backoff_factor=0)

    with respx.mock:
        route = respx.get(f"{BASE}/things/1")
        route.side_effect = [
            Response(503),
            Response(200, json={"id": "1"}),
        ]

        data = await client._request("GET", "/things/1")
        assert data["id"] == "1"
        assert route.call_count == 2


@pytest.mark.asyncio
async def test_client_retries_network_errors_then_gives_up():
    client = BaseHTTPClient(BASE, max_retries=3, backoff_factor=0)

    with respx.mock:
        route = respx.get(f"{BASE}/things/1").mock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(TransportError) as exc_info:
            await client._request("GET", "/things/1")

        assert route.call_count == 3

    assert "Connection refused" in str(exc_info.value)


@pytest.mark.asyncio
async def test_client_permanent_error_no_retry():
    client = BaseHTTPClient(BASE, backoff_factor=0)

    with respx.mock:
        route = respx.get(f"{BASE}/things/1").mock(return_value=Response(404, text="nope"))

        with pytest.raises(PermanentHTTPError) as exc_info:
            await client._request("GET", "/things/1")

        assert route.call_count == 1

    assert exc_info.value.status_code == 404
    assert exc_info.value.body == "nope"


@pytest.mark.asyncio
async def test_client_non_json_body():
    client = BaseHTTPClient(BASE, backoff_factor=0)

    with respx.mock:
        respx.get(f"{BASE}/things/1").mock(return_value=Response(200, text="<html>"))

        with pytest.raises(TransportError):
            await client._request("GET", "/things/1")


@pytest.mark.asyncio
async def test_circuit_opens_after_failures():
    client = BaseHTTPClient(
        BASE,
        max_retries=1,
        backoff_factor=0,
        circuit_failure_threshold=1,
        circuit_recovery_timeout=60,
    )

    with respx.mock:
        route = respx.get(f"{BASE}/things/1").mock(return_value=Response(502))

        with pytest.raises(TransportError):
            await client._request("GET", "/things/1")
        with pytest.raises(TransportError) as exc_info:
            await client._request("GET", "/things/1")

        assert route.call_count == 1

    assert "circuit open" in str(exc_info.value)


@pytest.mark.asyncio
async def test_cancellation_surfaces_as_operation_cancelled(monkeypatch):
    client = BaseHTTPClient(BASE, backoff_factor=0)

    async def cancelled_send(*args, **kwargs):  # noqa: ANN001
        raise asyncio.CancelledError()

    monkeypatch.setattr(client, "_send", cancelled_send)

    with pytest.raises(OperationCancelled) as exc_info:
        await client._request("GET", "/things/1")

    assert isinstance(exc_info.value, asyncio.CancelledError)


@pytest.mark.asyncio
async def test_timeout_context_sees_its_own_cancellation(monkeypatch):
    client = BaseHTTPClient(BASE, backoff_factor=0)

    async def slow_send(*args, **kwargs):  # noqa: ANN001
        await asyncio.sleep(1)
        return {}

    monkeypatch.setattr(client, "_send", slow_send)

    with pytest.raises(TimeoutError):
        async with asyncio.timeout(0.05):
            await client._request("GET", "/things/1")


@pytest.mark.asyncio
async def test_cancelled_task_reports_cancelled(monkeypatch):
    client = BaseHTTPClient(BASE, backoff_factor=0)
    started = asyncio.Event()

    async def slow_send(*args, **kwargs):  # noqa: ANN001
        started.set()
        await asyncio.sleep(1)
        return {}

    monkeypatch.setattr(client, "_send", slow_send)

    task = asyncio.create_task(client._request("GET", "/things/1"))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert task.cancelled()


def test_retryable_statuses():
    assert is_retryable_status(503)
    assert is_retryable_status(429)
    assert not is_retryable_status(404)
    assert not is_retryable_status(409)

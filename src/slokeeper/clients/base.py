from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog
from circuitbreaker import CircuitBreaker, CircuitBreakerError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from slokeeper.core.errors import OperationCancelled, TransportError

logger = structlog.get_logger()

DEFAULT_USER_AGENT = "slokeeper/0.1.0"


class RetryableHTTPError(Exception):
    """HTTP errors that should be retried."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PermanentHTTPError(Exception):
    """HTTP errors that should not be retried."""

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def is_retryable_status(status_code: int) -> bool:
    """Determine if HTTP status code is retryable."""
    return status_code in (408, 429, 500, 502, 503, 504)


class BaseHTTPClient:
    """Base HTTP client with retry logic and circuit breaker.

    Transient failures (network errors, 408/429/5xx) are retried with
    exponential backoff. Once retries are exhausted, or while the circuit is
    open, callers get a ``TransportError``. Any other non-2xx response is
    raised as ``PermanentHTTPError`` on the first attempt so that callers can
    map the status code to a domain error.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        circuit_failure_threshold: int = 5,
        circuit_recovery_timeout: int = 60,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._backoff_factor = backoff_factor
        self._user_agent = user_agent
        self._breaker = CircuitBreaker(
            failure_threshold=circuit_failure_threshold,
            recovery_timeout=circuit_recovery_timeout,
            expected_exception=RetryableHTTPError,
            name=f"{type(self).__name__}:{self._base_url}",
        )
        self._guarded_send = self._breaker(self._send_with_retry)

    def _headers(self) -> dict[str, str]:
        """Override to provide custom headers."""
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }

    def _auth(self) -> httpx.Auth | tuple[str, str] | None:
        """Override to provide request authentication."""
        return None

    async def aclose(self) -> None:  # clients are opened per request
        return None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Execute HTTP request with retry and circuit breaker."""
        try:
            return await self._guarded_send(method, path, params=params, json=json, headers=headers)
        except RetryableHTTPError as exc:
            raise TransportError(
                f"{method} {path} failed after {self._max_retries} attempt(s): {exc}",
                status_code=exc.status_code,
            ) from exc
        except CircuitBreakerError as exc:
            logger.warning("http_circuit_open", method=method, path=path, base_url=self._base_url)
            raise TransportError(f"circuit open for {self._base_url}: {exc}") from exc
        except asyncio.CancelledError as exc:
            logger.warning("http_request_cancelled", method=method, path=path)
            raise OperationCancelled(f"{method} {path} cancelled") from exc

    async def _send_with_retry(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RetryableHTTPError),
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=self._backoff_factor, max=30),
            reraise=True,
        )
        return await retrying(self._send, method, path, **kwargs)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        req_headers = self._headers()
        if headers:
            req_headers.update(headers)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, auth=self._auth()) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=req_headers,
                )
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            logger.warning("http_network_error", method=method, url=url, error=str(exc))
            raise RetryableHTTPError(str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.error("http_unexpected_error", method=method, url=url, error=str(exc))
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        if is_retryable_status(response.status_code):
            logger.warning(
                "http_retryable_error",
                status=response.status_code,
                method=method,
                url=url,
            )
            raise RetryableHTTPError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        if response.is_error:
            logger.info(
                "http_permanent_error",
                status=response.status_code,
                method=method,
                url=url,
            )
            raise PermanentHTTPError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                body=response.text,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"{method} {url} returned a non-JSON body",
                status_code=response.status_code,
            ) from exc

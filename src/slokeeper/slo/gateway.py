"""
SLO library API client.

Thin wrapper over the SLO endpoints of the Sumo Logic API:

    GET    /sloLibraryFolders/{id}   - Folder lookup ("root" is the caller's root folder)
    POST   /slos?parentId={id}       - Create an SLO
    GET    /slos/{id}                - Read an SLO
    PUT    /slos/{id}                - Update an SLO
    DELETE /slos/{id}                - Delete an SLO

Transient failures are retried by the underlying HTTP client; everything
else is mapped onto the slokeeper error kinds on the first response.
"""

from __future__ import annotations

from typing import Any

import structlog

from slokeeper.clients.base import DEFAULT_USER_AGENT, BaseHTTPClient, PermanentHTTPError
from slokeeper.core.errors import (
    ConflictError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from slokeeper.slo.models import SLO, Folder

logger = structlog.get_logger()

ROOT_FOLDER_ALIAS = "root"


class SloGateway(BaseHTTPClient):
    """Sumo Logic SLO library client with retry logic and circuit breaker."""

    def __init__(
        self,
        base_url: str,
        access_id: str | None = None,
        access_key: str | None = None,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        circuit_failure_threshold: int = 5,
        circuit_recovery_timeout: int = 60,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        super().__init__(
            base_url,
            timeout=timeout,
            max_retries=max_retries,
            backoff_factor=backoff_factor,
            circuit_failure_threshold=circuit_failure_threshold,
            circuit_recovery_timeout=circuit_recovery_timeout,
            user_agent=user_agent,
        )
        self._access_id = access_id
        self._access_key = access_key

    def _auth(self) -> tuple[str, str] | None:
        if self._access_id and self._access_key:
            return (self._access_id, self._access_key)
        return None

    async def _call(
        self,
        method: str,
        path: str,
        *,
        resource: str,
        identifier: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            return await self._request(method, path, params=params, json=json)
        except PermanentHTTPError as exc:
            raise _map_status(exc, method, resource, identifier) from exc

    async def get_folder(self, id_or_alias: str = ROOT_FOLDER_ALIAS) -> Folder:
        data = await self._call(
            "GET",
            f"/sloLibraryFolders/{id_or_alias}",
            resource="SLO folder",
            identifier=id_or_alias,
        )
        try:
            return Folder.from_payload(data)
        except (KeyError, TypeError) as exc:
            raise TransportError(f"unexpected folder document for '{id_or_alias}': {exc}") from exc

    async def create_slo(self, slo: SLO, params: dict[str, str] | None = None) -> str:
        """Create ``slo`` and return the server-assigned id."""
        data = await self._call(
            "POST",
            "/slos",
            resource="SLO",
            identifier=slo.name,
            params=params,
            json=slo.to_payload(),
        )
        slo_id = data.get("id")
        if not slo_id:
            raise TransportError(f"create of SLO '{slo.name}' returned no id")
        logger.info("slo_created", slo_id=slo_id, name=slo.name, parent_id=(params or {}).get("parentId"))
        return slo_id

    async def read_slo(self, slo_id: str) -> SLO:
        data = await self._call("GET", f"/slos/{slo_id}", resource="SLO", identifier=slo_id)
        try:
            return SLO.from_payload(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise TransportError(f"unexpected SLO document for '{slo_id}': {exc}") from exc

    async def update_slo(self, slo: SLO) -> None:
        await self._call(
            "PUT",
            f"/slos/{slo.id}",
            resource="SLO",
            identifier=slo.id,
            json=slo.to_payload(),
        )
        logger.info("slo_updated", slo_id=slo.id, version=slo.version)

    async def delete_slo(self, slo_id: str) -> None:
        await self._call("DELETE", f"/slos/{slo_id}", resource="SLO", identifier=slo_id)
        logger.info("slo_deleted", slo_id=slo_id)


def _map_status(exc: PermanentHTTPError, method: str, resource: str, identifier: str) -> Exception:
    status = exc.status_code
    if status == 404:
        return NotFoundError(resource, identifier)
    if status in (409, 412):
        return ConflictError(
            f"{method} {resource} '{identifier}' conflicts with the server version",
            {"status": status, "body": exc.body[:200]},
        )
    if status in (400, 422):
        return ValidationError(
            "remote",
            f"server rejected {resource} '{identifier}': {exc.body[:200]}",
            code="RemoteValidation",
            details={"status": status},
        )
    return TransportError(
        f"{method} {resource} '{identifier}' failed: {exc}",
        status_code=status,
    )

from __future__ import annotations

from typing import Any

from slokeeper.config.settings import Settings
from slokeeper.core.errors import ConfigurationError, NotFoundError, OperationCancelled, SloKeeperError
from slokeeper.logging import bind_context, configure_logging
from slokeeper.providers.base import (
    PlanChange,
    PlanResult,
    Provider,
    ProviderHealth,
    ProviderResource,
    ProviderResourceSchema,
    ResourceData,
    ResourceLifecycle,
)
from slokeeper.providers.registry import register_provider
from slokeeper.slo.codec import decode, encode, encode_compliance, encode_indicator
from slokeeper.slo.gateway import ROOT_FOLDER_ALIAS, SloGateway
from slokeeper.slo.models import SLO, SloKind
from slokeeper.slo.schema import SLO_SCHEMA

PROVIDER_VERSION = "0.1.0"
DEFAULT_USER_AGENT = f"slokeeper-provider-sumologic/{PROVIDER_VERSION}"


class SumoLogicProvider(Provider):
    name = "sumologic"

    def __init__(
        self,
        url: str,
        access_id: str | None = None,
        access_key: str | None = None,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        root_folder_alias: str = ROOT_FOLDER_ALIAS,
        user_agent: str = DEFAULT_USER_AGENT,
        gateway: SloGateway | None = None,
    ) -> None:
        if not url:
            raise ConfigurationError("Sumo Logic API url is required")
        self._root_folder_alias = root_folder_alias
        self._gateway = gateway or SloGateway(
            url,
            access_id,
            access_key,
            timeout=timeout,
            max_retries=max_retries,
            backoff_factor=backoff_factor,
            user_agent=user_agent,
        )

    @classmethod
    def from_settings(cls, settings: Settings, *, configure_logs: bool = True) -> SumoLogicProvider:
        """Build a provider from settings, applying the log level and renderer they name."""
        if configure_logs:
            configure_logging(settings.log_level, json=settings.log_json)
        gateway = SloGateway(
            settings.api_url,
            settings.access_id,
            settings.access_key,
            timeout=settings.http_timeout,
            max_retries=settings.http_max_retries,
            backoff_factor=settings.http_retry_backoff_factor,
            circuit_failure_threshold=settings.circuit_failure_threshold,
            circuit_recovery_timeout=settings.circuit_recovery_timeout,
        )
        return cls(settings.api_url, root_folder_alias=settings.root_folder_alias, gateway=gateway)

    async def aclose(self) -> None:
        await self._gateway.aclose()

    async def health_check(self) -> ProviderHealth:
        try:
            await self._gateway.get_folder(self._root_folder_alias)
        except OperationCancelled:
            raise
        except SloKeeperError as exc:
            return ProviderHealth(status="unreachable", details=str(exc))
        return ProviderHealth(status="healthy")

    async def resources(self) -> list[ProviderResourceSchema]:
        return [SloResource.schema()]

    def slo(self) -> "SloResource":
        return SloResource(self._gateway, root_folder_alias=self._root_folder_alias)


class SloResource(ProviderResource):
    """Lifecycle of a single ``sumologic_slo`` resource.

    The host serialises calls for a given resource. ``read`` doubles as drift
    detection: an SLO deleted behind our back clears the handle id instead of
    failing, so the host plans a re-create.
    """

    RESOURCE = "sumologic_slo"

    def __init__(self, gateway: SloGateway, *, root_folder_alias: str = ROOT_FOLDER_ALIAS) -> None:
        self._gateway = gateway
        self._root_folder_alias = root_folder_alias

    @staticmethod
    def schema() -> ProviderResourceSchema:
        return ProviderResourceSchema(
            name=SloResource.RESOURCE,
            description="Sumo Logic SLO library SLO",
            attributes={name: field.description for name, field in SLO_SCHEMA.items()},
        )

    async def create(self, data: ResourceData) -> ResourceLifecycle:
        if not data.id:
            slo = decode(data, kind=SloKind.CREATE)
            if not slo.parent_id:
                root = await self._gateway.get_folder(self._root_folder_alias)
                slo.parent_id = root.id
            slo_id = await self._gateway.create_slo(slo, {"parentId": slo.parent_id})
            data.set_id(slo_id)
        return await self.read(data)

    async def read(self, data: ResourceData) -> ResourceLifecycle:
        if not data.id:
            return ResourceLifecycle.ABSENT
        log = bind_context(resource=self.RESOURCE, slo_id=data.id)
        try:
            slo = await self._gateway.read_slo(data.id)
        except NotFoundError:
            log.warning("slo_not_found_removing_from_state")
            data.set_id("")
            return ResourceLifecycle.ABSENT
        encode(slo, data)
        log.debug("slo_read", version=slo.version)
        return ResourceLifecycle.PRESENT

    async def update(self, data: ResourceData) -> ResourceLifecycle:
        slo = decode(data, kind=SloKind.UPDATE)
        await self._gateway.update_slo(slo)
        return await self.read(data)

    async def delete(self, data: ResourceData) -> ResourceLifecycle:
        log = bind_context(resource=self.RESOURCE, slo_id=data.id)
        if data.id:
            try:
                await self._gateway.delete_slo(data.id)
            except NotFoundError:
                log.info("slo_already_deleted")
        data.set_id("")
        return ResourceLifecycle.ABSENT

    async def import_state(self, data: ResourceData, slo_id: str) -> ResourceLifecycle:
        """Adopt an existing SLO by id."""
        data.set_id(slo_id)
        state = await self.read(data)
        if state is ResourceLifecycle.ABSENT:
            raise NotFoundError("SLO", slo_id)
        return state

    async def drift(self, data: ResourceData) -> PlanResult:
        """Compare the configuration with the server without touching state."""
        desired = decode(data, kind=SloKind.UPDATE)
        if not data.id:
            return PlanResult([PlanChange("create", {"name": desired.name})])
        try:
            current = await self._gateway.read_slo(data.id)
        except NotFoundError:
            return PlanResult(
                [PlanChange("create", {"name": desired.name})],
                metadata={"reason": "not_found", "id": data.id},
            )
        changes = [
            PlanChange("update", {"field": field})
            for field, (want, have) in _user_fields(desired, current, configured=data.config()).items()
            if want != have
        ]
        return PlanResult(changes, metadata={"id": data.id, "version": current.version})


def _user_fields(desired: SLO, current: SLO, *, configured: dict[str, Any]) -> dict[str, tuple[Any, Any]]:
    fields: dict[str, tuple[Any, Any]] = {
        "name": (desired.name, current.name),
        "description": (desired.description, current.description),
        "signal_type": (desired.signal_type, current.signal_type),
        "is_locked": (desired.is_locked, current.is_locked),
        "compliance": (encode_compliance(desired.compliance), encode_compliance(current.compliance)),
        "indicator": (encode_indicator(desired.indicator), encode_indicator(current.indicator)),
    }
    # Optional+computed fields only drift when the user pinned a value
    for name in ("parent_id", "service", "application"):
        if configured.get(name):
            fields[name] = (getattr(desired, name), getattr(current, name))
    return fields


def _factory(**kwargs: Any) -> SumoLogicProvider:
    return SumoLogicProvider(**kwargs)


register_provider(
    SumoLogicProvider.name,
    _factory,
    resources=(SloResource.schema(),),
    version=PROVIDER_VERSION,
    description="Sumo Logic SLO library provider",
)

__all__ = ["SumoLogicProvider", "SloResource"]

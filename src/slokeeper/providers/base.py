from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Literal, Protocol


@dataclass(frozen=True)
class ProviderResourceSchema:
    """Schema metadata describing a provider-managed resource."""

    name: str
    description: str
    attributes: dict[str, str]


@dataclass(frozen=True)
class PlanChange:
    """Represents a single change detected during planning."""

    action: Literal["create", "update", "delete"]
    details: dict[str, Any]


@dataclass(frozen=True)
class PlanResult:
    """Plan result summarising pending changes."""

    changes: list[PlanChange]
    metadata: dict[str, Any] | None = None

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


@dataclass(frozen=True)
class ProviderHealth:
    status: Literal["healthy", "degraded", "unreachable"]
    details: str | None = None


class ResourceLifecycle(str, Enum):
    """Presence of a managed resource as observed by the provider."""

    PRESENT = "present"
    ABSENT = "absent"


class ResourceData(Protocol):
    """Handle through which the host framework exposes one resource's state.

    ``config`` returns the user configuration merged with previously
    computed values; ``set`` writes a value back and may raise when the host
    rejects it.
    """

    @property
    def id(self) -> str:
        ...

    def set_id(self, value: str) -> None:
        ...

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def config(self) -> dict[str, Any]:
        ...


@dataclass
class ResourceState:
    """In-memory ``ResourceData`` for hosts that keep state as plain dicts.

    When ``attributes`` is given, writes to keys outside of it are rejected.
    """

    values: dict[str, Any] = field(default_factory=dict)
    resource_id: str = ""
    attributes: frozenset[str] | None = None

    @classmethod
    def for_schema(cls, attributes: Iterable[str], values: dict[str, Any] | None = None) -> ResourceState:
        return cls(values=dict(values or {}), attributes=frozenset(attributes))

    @property
    def id(self) -> str:
        return self.resource_id

    def set_id(self, value: str) -> None:
        self.resource_id = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if self.attributes is not None and key not in self.attributes:
            raise KeyError(f"'{key}' is not an attribute of this resource")
        if value is None:
            self.values.pop(key, None)
        else:
            self.values[key] = value

    def config(self) -> dict[str, Any]:
        return dict(self.values)


class ProviderResource(Protocol):
    """Contract for provider-managed resources."""

    def schema(self) -> ProviderResourceSchema:
        ...

    async def create(self, data: ResourceData) -> ResourceLifecycle:
        ...

    async def read(self, data: ResourceData) -> ResourceLifecycle:
        ...

    async def update(self, data: ResourceData) -> ResourceLifecycle:
        ...

    async def delete(self, data: ResourceData) -> ResourceLifecycle:
        ...

    async def drift(self, data: ResourceData) -> PlanResult:
        ...


class Provider(Protocol):
    """Minimal provider interface exposed to the host framework."""

    name: str

    async def health_check(self) -> ProviderHealth:
        ...

    async def resources(self) -> list[ProviderResourceSchema]:
        ...

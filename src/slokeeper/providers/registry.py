"""
Registry of providers and the resource types they serve.

The host looks a resource type such as ``sumologic_slo`` up here to find
which provider owns it and which configuration attributes it accepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List

from slokeeper.providers.base import ProviderResourceSchema

ProviderFactory = Callable[..., Any]


@dataclass(frozen=True)
class ProviderSpec:
    """A registered provider and the resource types it serves."""

    name: str
    factory: ProviderFactory
    resources: tuple[ProviderResourceSchema, ...] = ()
    version: str | None = None
    description: str | None = None

    def resource_names(self) -> list[str]:
        return [schema.name for schema in self.resources]


class ProviderRegistry:
    def __init__(self) -> None:
        self._providers: Dict[str, ProviderSpec] = {}
        # resource type -> owning provider name
        self._owners: Dict[str, str] = {}

    def register(
        self,
        name: str,
        factory: ProviderFactory,
        *,
        resources: Iterable[ProviderResourceSchema] = (),
        version: str | None = None,
        description: str | None = None,
    ) -> ProviderSpec:
        if not name:
            raise ValueError("Provider name is required")
        spec = ProviderSpec(
            name=name,
            factory=factory,
            resources=tuple(resources),
            version=version,
            description=description,
        )
        for resource in spec.resources:
            owner = self._owners.get(resource.name)
            if owner is not None and owner != name:
                raise ValueError(f"Resource type '{resource.name}' is already served by provider '{owner}'")

        previous = self._providers.get(name)
        if previous is not None:
            for resource_name in previous.resource_names():
                self._owners.pop(resource_name, None)
        self._providers[name] = spec
        for resource_name in spec.resource_names():
            self._owners[resource_name] = name
        return spec

    def create(self, name: str, **kwargs: Any) -> Any:
        return self._spec(name).factory(**kwargs)

    def provider_for(self, resource_type: str) -> ProviderSpec:
        owner = self._owners.get(resource_type)
        if owner is None:
            known = ", ".join(sorted(self._owners)) or "none"
            raise KeyError(f"Resource type '{resource_type}' is not registered (known: {known})")
        return self._providers[owner]

    def resource_schema(self, resource_type: str) -> ProviderResourceSchema:
        spec = self.provider_for(resource_type)
        return next(schema for schema in spec.resources if schema.name == resource_type)

    def list(self) -> List[ProviderSpec]:
        return sorted(self._providers.values(), key=lambda spec: spec.name)

    def _spec(self, name: str) -> ProviderSpec:
        spec = self._providers.get(name)
        if spec is None:
            known = ", ".join(sorted(self._providers)) or "none"
            raise KeyError(f"Provider '{name}' is not registered (known: {known})")
        return spec


provider_registry = ProviderRegistry()


def register_provider(
    name: str,
    factory: ProviderFactory,
    *,
    resources: Iterable[ProviderResourceSchema] = (),
    version: str | None = None,
    description: str | None = None,
) -> ProviderSpec:
    return provider_registry.register(
        name,
        factory,
        resources=resources,
        version=version,
        description=description,
    )


def create_provider(name: str, **kwargs: Any) -> Any:
    return provider_registry.create(name, **kwargs)


def list_providers() -> List[ProviderSpec]:
    return provider_registry.list()


def resource_schema(resource_type: str) -> ProviderResourceSchema:
    """Schema of a registered resource type, e.g. ``sumologic_slo``."""
    return provider_registry.resource_schema(resource_type)

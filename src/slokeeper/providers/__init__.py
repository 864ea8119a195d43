"""Provider utilities and built-in registrations."""

# Import built-in providers for side effects (registration)
from slokeeper.providers import sumologic as _sumologic  # noqa: F401
from slokeeper.providers.registry import (
    create_provider,
    list_providers,
    register_provider,
    resource_schema,
)

__all__ = [
    "create_provider",
    "list_providers",
    "register_provider",
    "resource_schema",
]

import pytest
from slokeeper.providers import create_provider, list_providers, resource_schema
from slokeeper.providers.base import ProviderResourceSchema
from slokeeper.providers.registry import ProviderRegistry, provider_registry
from slokeeper.providers.sumologic import SumoLogicProvider
from slokeeper.slo.schema import SLO_SCHEMA


def _schema(name: str) -> ProviderResourceSchema:
    return ProviderResourceSchema(name=name, description=name, attributes={"name": "Display name"})


def test_sumologic_is_registered():
    specs = {spec.name: spec for spec in list_providers()}

    assert specs["sumologic"].resource_names() == ["sumologic_slo"]


def test_create_sumologic_provider():
    provider = create_provider("sumologic", url="https://api.sumologic.com/api/v1", access_id="id", access_key="key")

    assert isinstance(provider, SumoLogicProvider)


def test_slo_resource_schema_is_served():
    schema = resource_schema("sumologic_slo")

    assert set(schema.attributes) == set(SLO_SCHEMA)
    assert provider_registry.provider_for("sumologic_slo").name == "sumologic"


def test_unknown_resource_type_lists_known_types():
    with pytest.raises(KeyError) as exc_info:
        resource_schema("sumologic_monitor")

    assert "sumologic_slo" in str(exc_info.value)


def test_registry_rejects_empty_name():
    registry = ProviderRegistry()

    with pytest.raises(ValueError):
        registry.register("", lambda **kwargs: None)


def test_registry_unknown_provider():
    registry = ProviderRegistry()
    registry.register("dummy", lambda **kwargs: kwargs, version="1.0")

    assert registry.create("dummy", a=1) == {"a": 1}
    with pytest.raises(KeyError) as exc_info:
        registry.create("missing")

    assert "dummy" in str(exc_info.value)


def test_resource_type_has_a_single_owner():
    registry = ProviderRegistry()
    registry.register("first", lambda **kwargs: None, resources=[_schema("shared_slo")])

    with pytest.raises(ValueError):
        registry.register("second", lambda **kwargs: None, resources=[_schema("shared_slo")])

    assert registry.provider_for("shared_slo").name == "first"


def test_reregistering_replaces_resource_types():
    registry = ProviderRegistry()
    registry.register("dummy", lambda **kwargs: None, resources=[_schema("old_slo")])
    registry.register("dummy", lambda **kwargs: None, resources=[_schema("new_slo")])

    assert registry.resource_schema("new_slo").name == "new_slo"
    with pytest.raises(KeyError):
        registry.provider_for("old_slo")

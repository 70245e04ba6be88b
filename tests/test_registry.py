"""Provider registry: add, toggle, reweight, never raises."""

from oddsagg.providers.registry import ProviderRegistry

from fakes import FakeAdapter


def _registry() -> ProviderRegistry:
    return ProviderRegistry([FakeAdapter("x", 70), FakeAdapter("y", 30)])


def _state(registry: ProviderRegistry) -> list[tuple[str, float, bool]]:
    return [(p.id, p.weight, p.enabled) for p in registry.get_providers()]


def test_update_weight_unknown_provider_is_noop():
    registry = _registry()
    before = _state(registry)
    assert registry.update_provider_weight("nonexistent", 50) is False
    assert _state(registry) == before


def test_update_weight_clamps():
    registry = _registry()
    assert registry.update_provider_weight("x", 150) is True
    assert registry.weight_of("x") == 100
    assert registry.update_provider_weight("y", -5) is True
    assert registry.weight_of("y") == 0
    assert registry.update_provider_weight("x", "abc") is False
    assert registry.update_provider_weight("x", float("nan")) is False
    assert registry.weight_of("x") == 100


def test_toggle_flips_or_sets():
    registry = _registry()
    assert registry.toggle_provider("x") is False
    assert not registry.is_enabled("x")
    assert [a.get_id() for a in registry.enabled_adapters()] == ["y"]
    assert registry.toggle_provider("x") is True
    assert registry.toggle_provider("x", True) is True
    assert registry.toggle_provider("x", False) is False
    assert registry.toggle_provider("nonexistent") is False
    assert "nonexistent" not in registry


def test_duplicate_add_is_ignored():
    registry = _registry()
    assert registry.add_provider(FakeAdapter("x", 10)) is False
    assert len(registry) == 2
    assert registry.weight_of("x") == 70
    assert registry.add_provider(FakeAdapter("z", 10)) is True
    assert [p.id for p in registry.get_providers()] == ["x", "y", "z"]


def test_enabled_adapters_is_a_copy():
    registry = _registry()
    adapters = registry.enabled_adapters()
    registry.toggle_provider("x", False)
    assert [a.get_id() for a in adapters] == ["x", "y"]
    assert registry.get_provider("missing") is None
    assert registry.weight_of("missing") == 0.0

"""Provider registry - the set of configured adapters with mutable weight/enabled."""

from __future__ import annotations

import structlog

from oddsagg.models import ProviderInfo
from oddsagg.providers.base import ProviderAdapter

log = structlog.get_logger(__name__)


class ProviderRegistry:
    """Holds adapters by id in registration order. Mutations never await, so a
    reader on the event loop never observes a half-applied change."""

    def __init__(self, adapters: list[ProviderAdapter] | None = None) -> None:
        self._adapters: dict[str, ProviderAdapter] = {}
        for adapter in adapters or []:
            self.add_provider(adapter)

    def add_provider(self, adapter: ProviderAdapter) -> bool:
        """Register an adapter. Duplicate ids are ignored (logged) and return False."""
        provider_id = adapter.get_id()
        if provider_id in self._adapters:
            log.warning("provider_duplicate", provider=provider_id)
            return False
        self._adapters[provider_id] = adapter
        log.info("provider_added", provider=provider_id, weight=adapter.get_weight(), enabled=adapter.is_enabled())
        return True

    def get_providers(self) -> list[ProviderInfo]:
        return [a.info() for a in self._adapters.values()]

    def get_provider(self, provider_id: str) -> ProviderAdapter | None:
        return self._adapters.get(provider_id)

    def toggle_provider(self, provider_id: str, enabled: bool | None = None) -> bool:
        """Flip (or set) enabled state. Returns the new state; False for unknown ids."""
        adapter = self._adapters.get(provider_id)
        if adapter is None:
            log.warning("provider_unknown", provider=provider_id, op="toggle")
            return False
        new_state = (not adapter.is_enabled()) if enabled is None else bool(enabled)
        adapter.set_enabled(new_state)
        log.info("provider_toggled", provider=provider_id, enabled=new_state)
        return new_state

    def update_provider_weight(self, provider_id: str, weight: float) -> bool:
        """Set weight clamped to [0, 100]. False (and no change) for unknown ids."""
        adapter = self._adapters.get(provider_id)
        if adapter is None:
            log.warning("provider_unknown", provider=provider_id, op="reweight")
            return False
        try:
            value = float(weight)
        except (TypeError, ValueError):
            log.warning("provider_weight_invalid", provider=provider_id, weight=repr(weight))
            return False
        if value != value:  # NaN
            return False
        applied = adapter.set_weight(value)
        log.info("provider_reweighted", provider=provider_id, weight=applied)
        return True

    def enabled_adapters(self) -> list[ProviderAdapter]:
        """Copy of the enabled adapters; a pass iterates this snapshot."""
        return [a for a in self._adapters.values() if a.is_enabled()]

    def all_adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters.values())

    def is_enabled(self, provider_id: str) -> bool:
        adapter = self._adapters.get(provider_id)
        return adapter is not None and adapter.is_enabled()

    def weight_of(self, provider_id: str) -> float:
        adapter = self._adapters.get(provider_id)
        return adapter.get_weight() if adapter is not None else 0.0

    def __len__(self) -> int:
        return len(self._adapters)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._adapters

"""Build adapters from [[providers]] config tables."""

from __future__ import annotations

import structlog

from oddsagg.config.settings import ProviderSettings
from oddsagg.providers.base import ProviderAdapter
from oddsagg.providers.static import StaticFallbackProvider
from oddsagg.providers.walapp import WALAPP_ODDS_URL, WalAppAdapter
from oddsagg.providers.wurlus import WURLUS_ODDS_URL, WurlusAdapter
from oddsagg.storage.kv import KeyValueStore

log = structlog.get_logger(__name__)

_DEFAULT_URLS = {"wurlus": WURLUS_ODDS_URL, "walapp": WALAPP_ODDS_URL}


def build_adapter(ps: ProviderSettings, store: KeyValueStore | None = None) -> ProviderAdapter | None:
    """Return the adapter for one provider table, or None for an unknown kind."""
    common = dict(
        store=store,
        timeout_sec=ps.timeout_sec,
        cache_ttl_sec=ps.cache_ttl_sec,
        stale_after_sec=ps.stale_after_sec,
    )
    if ps.kind == "wurlus":
        return WurlusAdapter(
            ps.id, ps.name, ps.weight, ps.enabled,
            base_url=ps.base_url or _DEFAULT_URLS["wurlus"], api_key=ps.api_key, **common,
        )
    if ps.kind == "walapp":
        return WalAppAdapter(
            ps.id, ps.name, ps.weight, ps.enabled,
            base_url=ps.base_url or _DEFAULT_URLS["walapp"], api_key=ps.api_key, **common,
        )
    if ps.kind == "static":
        return StaticFallbackProvider(ps.id, ps.name, ps.weight, ps.enabled, path=ps.path, **common)
    log.warning("provider_kind_unknown", provider=ps.id, kind=ps.kind)
    return None


def build_adapters(providers: list[ProviderSettings], store: KeyValueStore | None = None) -> list[ProviderAdapter]:
    adapters = []
    for ps in providers:
        if not ps.id:
            log.warning("provider_missing_id", kind=ps.kind)
            continue
        adapter = build_adapter(ps, store)
        if adapter is not None:
            adapters.append(adapter)
    return adapters

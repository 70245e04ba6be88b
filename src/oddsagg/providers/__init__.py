"""Provider adapters (one per upstream source) and the provider registry."""

from oddsagg.providers.base import FetchResult, HttpProviderAdapter, ProviderAdapter
from oddsagg.providers.registry import ProviderRegistry
from oddsagg.providers.static import StaticFallbackProvider
from oddsagg.providers.walapp import WalAppAdapter
from oddsagg.providers.wurlus import WurlusAdapter

__all__ = [
    "FetchResult",
    "HttpProviderAdapter",
    "ProviderAdapter",
    "ProviderRegistry",
    "StaticFallbackProvider",
    "WalAppAdapter",
    "WurlusAdapter",
]

"""Key-value persistence for provider response caches."""

from oddsagg.storage.kv import DuckDBKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = ["DuckDBKeyValueStore", "KeyValueStore", "MemoryKeyValueStore"]

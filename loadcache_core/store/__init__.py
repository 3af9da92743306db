"""Store module - Bounded LRU storage for caching."""

from loadcache_core.store.lru import (
    LRUStore,
    StoreConfig,
    StoreStats,
)

__all__ = [
    "LRUStore",
    "StoreConfig",
    "StoreStats",
]

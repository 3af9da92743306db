"""Cache module - Loading cache and entry management.

This module provides the coalescing cache interface and entry types.
"""

from loadcache_core.cache.entry import (
    CacheEntry,
    EntryMetadata,
    EvictedEntry,
)
from loadcache_core.cache.loader import (
    Loader,
    LoadRequest,
    PendingLoads,
)
from loadcache_core.cache.cache import (
    LoadingCache,
    CacheConfig,
    CacheStats,
)

__all__ = [
    "CacheEntry",
    "EntryMetadata",
    "EvictedEntry",
    "Loader",
    "LoadRequest",
    "PendingLoads",
    "LoadingCache",
    "CacheConfig",
    "CacheStats",
]

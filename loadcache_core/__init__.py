"""LoadCache - Coalescing In-Memory Loading Cache.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A bounded LRU cache that fills misses through an asynchronous loader:
- At most one loader call in flight per key
- Every concurrent caller receives the same value or exception
- Least-recently-used eviction with optional max age
- Eviction and expiry listeners
- Cache statistics

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        LoadCache System                         │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │LoadingCache │  │PendingLoads │  │ LoadRequest │   CACHE     │
    │  │ get/set     │  │  waiters    │  │  key+args   │   LAYER     │
    │  └──────┬──────┘  └─────────────┘  └─────────────┘             │
    │         │                                                       │
    │  ┌──────┴────────────────────────────────────────┐             │
    │  │              LRUStore                          │   STORAGE   │
    │  │   OrderedDict of CacheEntry, max_size/max_age  │   LAYER     │
    │  └───────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    import asyncio
    from loadcache_core import LoadingCache

    async def fetch_user(user_id):
        return await db.users.get(user_id)

    async def main():
        users = LoadingCache(load=fetch_user, max_size=1000, max_age=300)
        users.on_evict(lambda entry: print("evicted", entry.key))

        # Both calls share one fetch_user("1")
        a, b = await asyncio.gather(users.get("1"), users.get("1"))
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

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
from loadcache_core.store.lru import (
    LRUStore,
    StoreConfig,
    StoreStats,
)

__all__ = [
    # Cache
    "LoadingCache",
    "CacheConfig",
    "CacheStats",
    "CacheEntry",
    "EntryMetadata",
    "EvictedEntry",
    # Loading
    "Loader",
    "LoadRequest",
    "PendingLoads",
    # Storage
    "LRUStore",
    "StoreConfig",
    "StoreStats",
]

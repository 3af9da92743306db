"""LoadCache Cache - Coalescing Loading Cache.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence

from loadcache_core.cache.entry import EvictedEntry
from loadcache_core.cache.loader import Loader, LoadRequest, PendingLoads, resolve
from loadcache_core.store.lru import Listener, LRUStore, StoreConfig

logger = logging.getLogger(__name__)

Completion = Callable[[Optional[BaseException], Any], None]

_MISSING = object()


@dataclass
class CacheConfig:
    """Cache configuration.

    Attributes:
        load: Loader called as load(key, *load_args)
        max_size: Maximum entries, None for unbounded
        max_age: Seconds before an untouched entry expires
        name: Cache name used in logs
    """

    load: Optional[Loader] = None
    max_size: Optional[int] = None
    max_age: Optional[float] = None
    name: str = "cache"


@dataclass
class CacheStats:
    """Cache statistics.

    Attributes:
        hits: Gets answered from the store
        misses: Gets that started a load
        coalesced: Gets that joined an in-flight load
        loads: Loader invocations that completed
        load_errors: Loader invocations that failed
        sets: Explicit set calls
        evictions: Entries dropped for capacity
        expirations: Entries dropped for age
        entry_count: Current entry count
        started_at: When cache was created
    """

    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    loads: int = 0
    load_errors: int = 0
    sets: int = 0
    evictions: int = 0
    expirations: int = 0
    entry_count: int = 0
    started_at: Optional[datetime] = None

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses + self.coalesced
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset statistics."""
        self.hits = 0
        self.misses = 0
        self.coalesced = 0
        self.loads = 0
        self.load_errors = 0
        self.sets = 0
        self.evictions = 0
        self.expirations = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "coalesced": self.coalesced,
            "loads": self.loads,
            "load_errors": self.load_errors,
            "sets": self.sets,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "entry_count": self.entry_count,
            "hit_rate": self.hit_rate,
        }


class LoadingCache:
    """LRU cache that fills misses through an asynchronous loader.

    Concurrent gets for the same missing key share one loader call. The
    first caller starts the load, later callers queue behind it, and all
    of them receive the same value or exception in the order they asked.
    Hits are also delivered after yielding to the event loop, so a get
    never completes inside the caller's own turn.

    Removing or clearing keys never cancels a load that is already
    running; its result still lands in the store when it finishes.

    Example:
        async def fetch_user(user_id):
            return await db.users.get(user_id)

        users = LoadingCache(load=fetch_user, max_size=1000, max_age=300)
        user = await users.get("42")

        # Extra loader arguments follow the key
        report = LoadingCache(load=lambda key, fmt: render(key, fmt))
        await report.get("q3", load_args=["pdf"])
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        load: Optional[Loader] = None,
        max_size: Optional[int] = None,
        max_age: Optional[float] = None,
        name: Optional[str] = None,
    ):
        """Initialize cache.

        Args:
            config: Cache configuration
            load: Overrides config.load
            max_size: Overrides config.max_size
            max_age: Overrides config.max_age
            name: Overrides config.name

        Raises:
            ValueError: If no loader is configured or limits are invalid
            TypeError: If the loader is not callable
        """
        overrides = {"load": load, "max_size": max_size, "max_age": max_age, "name": name}
        self.config = replace(
            config or CacheConfig(),
            **{k: v for k, v in overrides.items() if v is not None},
        )

        if self.config.load is None:
            raise ValueError("Missing required `load` option")
        if not callable(self.config.load):
            raise TypeError(f"`load` must be callable, got {type(self.config.load).__name__}")

        self._load = self.config.load
        self._store = LRUStore(
            StoreConfig(max_size=self.config.max_size, max_age=self.config.max_age)
        )
        self._pending = PendingLoads()
        self._stats = CacheStats(started_at=datetime.now())
        self._listeners: Dict[str, List[Listener]] = {"evict": [], "expire": []}

        self._store.on_evict(self._handle_evict)
        self._store.on_expire(self._handle_expire)

    @property
    def length(self) -> int:
        return self._store.length

    @property
    def keys(self) -> List[Hashable]:
        """Cached keys, least recently used first."""
        return self._store.keys

    @property
    def pending_keys(self) -> List[Hashable]:
        """Keys with a load in flight."""
        return self._pending.keys

    def is_loading(self, key: Hashable) -> bool:
        return self._pending.is_pending(key)

    def set(self, key: Hashable, value: Any) -> Any:
        """Store a value directly.

        A load already in flight for the key is left alone and its
        result will replace this value when it completes.

        Returns:
            The stored value
        """
        self._stats.sets += 1
        return self._store.set(key, value)

    def get(self, key: Hashable, load_args: Sequence[Any] = ()) -> "asyncio.Future[Any]":
        """Get a value, loading it on a miss.

        The request is registered before this method returns, so the
        order of ``get`` calls is the order results are delivered in.
        Must be called with a running event loop.

        Args:
            key: Cache key
            load_args: Extra positional arguments for the loader

        Returns:
            Future resolving to the cached or loaded value, or raising
            whatever the loader raised for this key

        Raises:
            TypeError: If load_args is not a list or tuple
        """
        return self._request(key, load_args)

    def get_callback(
        self,
        key: Hashable,
        callback: Completion,
        load_args: Sequence[Any] = (),
    ) -> None:
        """Get a value and report it through ``callback(error, value)``.

        The callback runs exactly once, on a later event loop turn, with
        ``error`` set to None on success. Requires a running event loop.

        Raises:
            TypeError: If load_args is not a list or tuple
        """
        waiter = self._request(key, load_args)

        def _deliver(future: "asyncio.Future[Any]") -> None:
            if future.cancelled():
                callback(asyncio.CancelledError(), None)
            elif future.exception() is not None:
                callback(future.exception(), None)
            else:
                callback(None, future.result())

        waiter.add_done_callback(_deliver)

    def peek(self, key: Hashable, default: Any = None) -> Any:
        """Read a cached value without promotion or loading."""
        return self._store.peek(key, default)

    def remove(self, key: Hashable) -> bool:
        """Drop a cached key. In-flight loads for it keep running."""
        return self._store.remove(key)

    def clear(self) -> int:
        """Drop every cached key. In-flight loads keep running.

        Returns:
            Number of entries cleared
        """
        count = self._store.clear()
        if count:
            logger.debug(f"Cache {self.config.name} cleared {count} entries")
        return count

    def on_evict(self, listener: Listener) -> "LoadingCache":
        """Register a listener for capacity evictions.

        Args:
            listener: Function(EvictedEntry)

        Returns:
            Self for chaining
        """
        self._listeners["evict"].append(listener)
        return self

    def on_expire(self, listener: Listener) -> "LoadingCache":
        """Register a listener for age expirations.

        Args:
            listener: Function(EvictedEntry)

        Returns:
            Self for chaining
        """
        self._listeners["expire"].append(listener)
        return self

    def remove_listener(self, listener: Listener) -> bool:
        found = False
        for listeners in self._listeners.values():
            while listener in listeners:
                listeners.remove(listener)
                found = True
        return found

    def get_stats(self) -> CacheStats:
        """Get cache statistics.

        Returns:
            CacheStats instance
        """
        self._stats.entry_count = self._store.length
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats.reset()

    def _request(self, key: Hashable, load_args: Sequence[Any]) -> "asyncio.Future[Any]":
        """Register a get and return the future it will complete."""
        request = LoadRequest.build(key, load_args)
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()

        if self._pending.is_pending(key):
            self._pending.join(key, waiter)
            self._stats.coalesced += 1
            return waiter

        value = self._store.get(key, _MISSING)
        if value is not _MISSING:
            self._stats.hits += 1
            loop.call_soon(resolve, [waiter], None, value)
            return waiter

        self._stats.misses += 1
        self._pending.start(key, waiter)
        logger.debug(f"Cache {self.config.name} loading {key!r}")
        try:
            load = request.invoke(self._load)
        except BaseException:
            self._pending.detach(key)
            waiter.cancel()
            raise
        self._pending.attach(key, load)
        load.add_done_callback(lambda future: self._finish_load(key, future))
        return waiter

    def _finish_load(self, key: Hashable, load: "asyncio.Future[Any]") -> None:
        if load.cancelled():
            error: Optional[BaseException] = asyncio.CancelledError()
        else:
            error = load.exception()

        value = None
        if error is None:
            value = load.result()
            self._store.set(key, value)
            self._stats.loads += 1
        else:
            self._stats.load_errors += 1
            logger.warning(f"Cache {self.config.name} failed to load {key!r}: {error!r}")

        waiters = self._pending.detach(key)
        completed = resolve(waiters, error, value)
        logger.debug(
            f"Cache {self.config.name} loaded {key!r} for {completed}/{len(waiters)} waiters"
        )

    def _handle_evict(self, entry: EvictedEntry) -> None:
        self._stats.evictions += 1
        self._emit("evict", entry)

    def _handle_expire(self, entry: EvictedEntry) -> None:
        self._stats.expirations += 1
        self._emit("expire", entry)

    def _emit(self, event: str, payload: EvictedEntry) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(payload)
            except Exception as e:
                logger.error(f"Cache {self.config.name} {event} listener failed: {e}")

    def __contains__(self, key: Hashable) -> bool:
        """Check if key is cached, without promotion."""
        return key in self._store

    def __len__(self) -> int:
        return self._store.length

    def __repr__(self) -> str:
        return (
            f"LoadingCache(name={self.config.name!r}, entries={self._store.length}, "
            f"pending={len(self._pending)})"
        )


__all__ = ["LoadingCache", "CacheConfig", "CacheStats", "Completion"]

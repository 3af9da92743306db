"""LoadCache LRU Store - Bounded In-Memory Storage.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Hashable, List, Optional

from loadcache_core.cache.entry import CacheEntry, EvictedEntry

logger = logging.getLogger(__name__)

Listener = Callable[[EvictedEntry], None]

_MISSING = object()


@dataclass
class StoreConfig:
    """LRU store configuration.

    Attributes:
        max_size: Maximum entries, None for unbounded
        max_age: Seconds an untouched entry stays readable, None to disable
    """

    max_size: Optional[int] = None
    max_age: Optional[float] = None

    def validate(self) -> None:
        """Reject capacities and ages that cannot be honoured."""
        if self.max_size is not None:
            if isinstance(self.max_size, bool) or not isinstance(self.max_size, int):
                raise ValueError(f"max_size must be an int, got {self.max_size!r}")
            if self.max_size <= 0:
                raise ValueError(f"max_size must be positive, got {self.max_size}")
        if self.max_age is not None:
            if isinstance(self.max_age, bool) or not isinstance(self.max_age, (int, float)):
                raise ValueError(f"max_age must be a number, got {self.max_age!r}")
            if self.max_age <= 0:
                raise ValueError(f"max_age must be positive, got {self.max_age}")


@dataclass
class StoreStats:
    """LRU store statistics.

    Attributes:
        reads: Number of get operations
        writes: Number of set operations
        deletes: Number of removed keys
        evictions: Entries dropped for capacity
        expirations: Entries dropped for age
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    evictions: int = 0
    expirations: int = 0

    def reset(self) -> None:
        """Reset statistics."""
        self.reads = 0
        self.writes = 0
        self.deletes = 0
        self.evictions = 0
        self.expirations = 0


class LRUStore:
    """Fixed-capacity ordered map with least-recently-used eviction.

    Entries live in an OrderedDict ordered oldest to newest, so promotion
    is ``move_to_end`` and the eviction victim is always the first key.

    Example:
        store = LRUStore(StoreConfig(max_size=2))
        store.on_evict(lambda e: print("evicted", e.key))
        store.set("a", 1)
        store.set("b", 2)
        store.set("c", 3)   # evicts "a"
        store.keys          # ["b", "c"]
    """

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        max_size: Optional[int] = None,
        max_age: Optional[float] = None,
    ):
        """Initialize store.

        Args:
            config: Store configuration
            max_size: Overrides config.max_size
            max_age: Overrides config.max_age
        """
        overrides = {"max_size": max_size, "max_age": max_age}
        self.config = replace(
            config or StoreConfig(),
            **{k: v for k, v in overrides.items() if v is not None},
        )
        self.config.validate()

        self._entries: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()
        self._stats = StoreStats()
        self._listeners: Dict[str, List[Listener]] = {"evict": [], "expire": []}

    @property
    def max_size(self) -> Optional[int]:
        return self.config.max_size

    @property
    def max_age(self) -> Optional[float]:
        return self.config.max_age

    @property
    def length(self) -> int:
        """Number of stored entries, expired ones included until observed."""
        return len(self._entries)

    @property
    def keys(self) -> List[Hashable]:
        """Keys ordered from least to most recently used."""
        return list(self._entries.keys())

    def set(self, key: Hashable, value: Any) -> Any:
        """Insert or overwrite a value and promote it.

        Args:
            key: Cache key
            value: Value to store

        Returns:
            The stored value
        """
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = CacheEntry(key=key, value=value)
        else:
            entry.update_value(value)
            self._entries.move_to_end(key)
        self._stats.writes += 1

        if self.config.max_size is not None:
            while len(self._entries) > self.config.max_size:
                self._evict_oldest()

        return value

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Read a value and promote it to most recently used.

        Args:
            key: Cache key
            default: Returned when the key is absent or expired

        Returns:
            Stored value or default
        """
        self._stats.reads += 1
        entry = self._lookup(key)
        if entry is None:
            return default

        entry.touch()
        self._entries.move_to_end(key)
        return entry.value

    def peek(self, key: Hashable, default: Any = None) -> Any:
        """Read a value without touching the LRU order.

        Args:
            key: Cache key
            default: Returned when the key is absent or expired

        Returns:
            Stored value or default
        """
        entry = self._entries.get(key)
        if entry is None or entry.is_expired(self.config.max_age):
            return default
        return entry.value

    def remove(self, key: Hashable) -> bool:
        """Delete a key if present.

        Args:
            key: Cache key

        Returns:
            True if an entry was removed
        """
        if self._entries.pop(key, _MISSING) is _MISSING:
            return False
        self._stats.deletes += 1
        return True

    def clear(self) -> int:
        """Remove every entry without notifying eviction listeners.

        Returns:
            Number of entries cleared
        """
        count = len(self._entries)
        self._entries.clear()
        self._stats.deletes += count
        return count

    def on_evict(self, listener: Listener) -> "LRUStore":
        """Register a capacity eviction listener.

        Args:
            listener: Function(EvictedEntry)

        Returns:
            Self for chaining
        """
        self._listeners["evict"].append(listener)
        return self

    def on_expire(self, listener: Listener) -> "LRUStore":
        """Register an age expiry listener.

        Args:
            listener: Function(EvictedEntry)

        Returns:
            Self for chaining
        """
        self._listeners["expire"].append(listener)
        return self

    def remove_listener(self, listener: Listener) -> bool:
        """Unregister a listener from every event.

        Returns:
            True if the listener was registered
        """
        found = False
        for listeners in self._listeners.values():
            while listener in listeners:
                listeners.remove(listener)
                found = True
        return found

    def get_stats(self) -> StoreStats:
        """Get store statistics."""
        return self._stats

    def _lookup(self, key: Hashable) -> Optional[CacheEntry]:
        """Find a live entry, dropping it if it has aged out."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.config.max_age):
            del self._entries[key]
            self._stats.expirations += 1
            logger.debug(f"Entry {key!r} expired after {self.config.max_age}s")
            self._emit("expire", entry.evicted())
            return None
        return entry

    def _evict_oldest(self) -> None:
        _, entry = self._entries.popitem(last=False)
        self._stats.evictions += 1
        logger.debug(f"Evicted {entry.key!r} (max_size={self.config.max_size})")
        self._emit("evict", entry.evicted())

    def _emit(self, event: str, payload: EvictedEntry) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(payload)
            except Exception as e:
                logger.error(f"{event} listener failed for {payload.key!r}: {e}")

    def __contains__(self, key: Hashable) -> bool:
        """Check key presence without promotion."""
        return self.peek(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"LRUStore(entries={len(self._entries)}, max_size={self.config.max_size}, "
            f"max_age={self.config.max_age})"
        )


__all__ = ["LRUStore", "StoreConfig", "StoreStats", "Listener"]

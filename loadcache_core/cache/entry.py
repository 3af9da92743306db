"""LoadCache Entry - Cache Entry with Access Tracking.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, NamedTuple, Optional


class EvictedEntry(NamedTuple):
    """Payload delivered to eviction and expiry listeners."""

    key: Hashable
    value: Any


@dataclass
class EntryMetadata:
    """Metadata for a cache entry.

    Timestamps come from ``time.monotonic`` so wall clock changes never
    expire or resurrect an entry.

    Attributes:
        created_at: When entry was first stored
        accessed_at: Last get/set of the entry
        access_count: Number of promoting reads
    """

    created_at: float = field(default_factory=time.monotonic)
    accessed_at: float = field(default_factory=time.monotonic)
    access_count: int = 0

    def touch(self) -> None:
        """Update access time and count."""
        self.accessed_at = time.monotonic()
        self.access_count += 1

    @property
    def idle_seconds(self) -> float:
        """Get time since last access."""
        return time.monotonic() - self.accessed_at


@dataclass
class CacheEntry:
    """A cache entry with value and access metadata.

    Attributes:
        key: Cache key
        value: Cached value
        metadata: Entry metadata
    """

    key: Hashable
    value: Any
    metadata: EntryMetadata = field(default_factory=EntryMetadata)

    def is_expired(self, max_age: Optional[float]) -> bool:
        """Check whether the entry has outlived ``max_age`` seconds."""
        if max_age is None:
            return False
        return self.metadata.idle_seconds > max_age

    def touch(self) -> None:
        """Update access time."""
        self.metadata.touch()

    def update_value(self, value: Any) -> None:
        """Replace the value and refresh the access time.

        Args:
            value: New value
        """
        self.value = value
        self.metadata.accessed_at = time.monotonic()

    def evicted(self) -> EvictedEntry:
        """Build the listener payload for this entry."""
        return EvictedEntry(self.key, self.value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation
        """
        return {
            "key": self.key,
            "value": self.value,
            "metadata": {
                "created_at": self.metadata.created_at,
                "accessed_at": self.metadata.accessed_at,
                "access_count": self.metadata.access_count,
            },
        }

    def __repr__(self) -> str:
        return (
            f"CacheEntry(key={self.key!r}, "
            f"idle={self.metadata.idle_seconds:.1f}s)"
        )


__all__ = ["CacheEntry", "EntryMetadata", "EvictedEntry"]

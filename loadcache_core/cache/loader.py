"""LoadCache Loader - Load Requests and the Pending-Load Registry.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Optional, Tuple, Union

Loader = Callable[..., Union[Awaitable[Any], Any]]


@dataclass(frozen=True)
class LoadRequest:
    """A single call to the loader.

    Attributes:
        key: Cache key being loaded
        args: Extra positional arguments passed after the key
    """

    key: Hashable
    args: Tuple[Any, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, key: Hashable, load_args: Any = ()) -> "LoadRequest":
        """Validate caller supplied load arguments.

        Raises:
            TypeError: If load_args is not a list or tuple
        """
        if load_args is None:
            load_args = ()
        if not isinstance(load_args, (list, tuple)):
            raise TypeError(
                f"load_args must be a list or tuple, got {type(load_args).__name__}"
            )
        return cls(key=key, args=tuple(load_args))

    def invoke(self, loader: Loader) -> "asyncio.Future[Any]":
        """Call the loader and wrap its outcome in a future.

        Synchronous loaders and loaders that raise before returning an
        awaitable are folded into the same future, so the caller has a
        single completion path.
        """
        loop = asyncio.get_running_loop()
        try:
            result = loader(self.key, *self.args)
        except Exception as e:
            future = loop.create_future()
            future.set_exception(e)
            return future

        if inspect.isawaitable(result):
            return asyncio.ensure_future(result)

        future = loop.create_future()
        future.set_result(result)
        return future


class PendingLoads:
    """Registry of in-flight loads and the futures waiting on them.

    A key is present exactly while its load runs. The load future is held
    here so the running task stays referenced until it completes.
    ``detach`` removes the whole waiter list in one step so waiters that
    re-enter the cache see an empty slot and start a fresh load.
    """

    def __init__(self) -> None:
        self._waiters: Dict[Hashable, List["asyncio.Future[Any]"]] = {}
        self._loads: Dict[Hashable, "asyncio.Future[Any]"] = {}

    def is_pending(self, key: Hashable) -> bool:
        return key in self._waiters

    def start(self, key: Hashable, waiter: "asyncio.Future[Any]") -> None:
        """Register a new load with its first waiter."""
        if key in self._waiters:
            raise KeyError(f"Load already pending for {key!r}")
        self._waiters[key] = [waiter]

    def attach(self, key: Hashable, load: "asyncio.Future[Any]") -> None:
        """Record the running load for a registered key."""
        if key not in self._waiters:
            raise KeyError(f"No load registered for {key!r}")
        self._loads[key] = load

    def load_for(self, key: Hashable) -> Optional["asyncio.Future[Any]"]:
        return self._loads.get(key)

    def join(self, key: Hashable, waiter: "asyncio.Future[Any]") -> None:
        """Queue a waiter behind the pending load for key."""
        self._waiters[key].append(waiter)

    def detach(self, key: Hashable) -> List["asyncio.Future[Any]"]:
        """Remove and return every waiter for key, in registration order."""
        self._loads.pop(key, None)
        return self._waiters.pop(key, [])

    def waiter_count(self, key: Hashable) -> int:
        return len(self._waiters.get(key, ()))

    @property
    def keys(self) -> List[Hashable]:
        return list(self._waiters.keys())

    def __len__(self) -> int:
        return len(self._waiters)

    def __contains__(self, key: Hashable) -> bool:
        return self.is_pending(key)


def resolve(
    waiters: List["asyncio.Future[Any]"],
    error: Optional[BaseException],
    value: Any,
) -> int:
    """Complete waiters in order, skipping ones whose caller gave up.

    Returns:
        Number of waiters completed
    """
    completed = 0
    for waiter in waiters:
        if waiter.done():
            continue
        if isinstance(error, asyncio.CancelledError):
            waiter.cancel()
        elif error is not None:
            waiter.set_exception(error)
        else:
            waiter.set_result(value)
        completed += 1
    return completed


__all__ = ["Loader", "LoadRequest", "PendingLoads", "resolve"]

"""Query cache shared by every checkout component.

An explicit, injectable store: the composition root creates one per
session and ``clear()`` tears it down on logout.  Keys are tuples whose
first element names the *family* (``("cart", signature, hint)``,
``("available_coupons",)``), so a whole family can be marked stale at
once.

Rules:
- at most one in-flight load per key; concurrent readers attach to it
- a fresh entry is served as is; a stale one is served immediately while
  a single background refresh runs
- ``set`` is an immediate overwrite; a load that *started* before the
  latest ``set`` of its key is discarded instead of overwriting it
- writes to different keys are unordered, the last one wins
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

CacheKey = tuple[Hashable, ...]
Loader = Callable[[], Awaitable[Any]]

DEFAULT_FRESH_FOR = 300.0


@dataclass
class CacheEntry:
    value: Any
    written_at: float
    fresh_for: float
    stale: bool = False

    def is_fresh(self, now: float) -> bool:
        return not self.stale and now - self.written_at < self.fresh_for


class QueryCache:

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._versions: dict[CacheKey, int] = {}
        self._in_flight: dict[CacheKey, asyncio.Task] = {}

    # --- Reads ----------------------------------------------------------------

    def get(self, key: CacheKey) -> Any | None:
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def entry(self, key: CacheKey) -> CacheEntry | None:
        return self._entries.get(key)

    def is_fresh(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_fresh(self._clock())

    def is_loading(self, key: CacheKey) -> bool:
        return key in self._in_flight

    def keys(self, family: str | None = None, loading: bool = False) -> list[CacheKey]:
        """Cached keys of *family*; with *loading*, keys only in flight too."""
        found = list(self._entries)
        if loading:
            found += [k for k in self._in_flight if k not in self._entries]
        return [k for k in found if family is None or k[0] == family]

    # --- Writes ---------------------------------------------------------------

    def set(self, key: CacheKey, value: Any, fresh_for: float = DEFAULT_FRESH_FOR) -> None:
        """Overwrite *key* now; older in-flight loads of it are discarded."""
        self._versions[key] = self._versions.get(key, 0) + 1
        self._entries[key] = CacheEntry(value, self._clock(), fresh_for)

    def mark_stale(self, family: str) -> list[CacheKey]:
        """Flag every entry of *family* for revalidation; values are kept."""
        marked = []
        for key, entry in self._entries.items():
            if key[0] == family:
                entry.stale = True
                marked.append(key)
        return marked

    def drop(self, key: CacheKey) -> None:
        """Forget *key*; a load of it still in flight will not be cached."""
        self._versions[key] = self._versions.get(key, 0) + 1
        self._entries.pop(key, None)
        self._in_flight.pop(key, None)

    def clear(self) -> None:
        """Forget everything; late responses of in-flight loads are ignored."""
        for key in list(self._versions):
            self._versions[key] += 1
        for key in self._in_flight:
            self._versions[key] = self._versions.get(key, 0) + 1
        self._entries.clear()

    # --- Loads ----------------------------------------------------------------

    async def fetch(
        self, key: CacheKey, loader: Loader, fresh_for: float = DEFAULT_FRESH_FOR
    ) -> Any:
        """Return the cached value for *key*, loading it when missing."""
        entry = self._entries.get(key)
        if entry is not None:
            if not entry.is_fresh(self._clock()):
                self.refresh(key, loader, fresh_for)
            return entry.value

        task = self._start(key, loader, fresh_for)
        return await asyncio.shield(task)

    def refresh(
        self, key: CacheKey, loader: Loader, fresh_for: float = DEFAULT_FRESH_FOR
    ) -> asyncio.Task:
        """Start (or join) a background load of *key*."""
        return self._start(key, loader, fresh_for)

    async def drain(self) -> None:
        """Wait until no load is in flight.  Failures are already logged."""
        while self._in_flight:
            await asyncio.gather(*self._in_flight.values(), return_exceptions=True)

    # --- Internal helpers -----------------------------------------------------

    def _start(self, key: CacheKey, loader: Loader, fresh_for: float) -> asyncio.Task:
        task = self._in_flight.get(key)
        if task is None:
            started_at = self._versions.get(key, 0)
            task = asyncio.get_running_loop().create_task(
                self._load(key, loader, fresh_for, started_at)
            )
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._finish(key, done))
        return task

    async def _load(
        self, key: CacheKey, loader: Loader, fresh_for: float, started_at: int
    ) -> Any:
        value = await loader()
        if self._versions.get(key, 0) == started_at:
            self.set(key, value, fresh_for)
        else:
            logger.debug("Discarding outdated load of %s", key)
        return value

    def _finish(self, key: CacheKey, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Load of %s failed: %s", key, exc)

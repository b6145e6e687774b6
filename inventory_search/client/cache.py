"""
Result cache for inventory queries.

Entries hold a shared asyncio future for the upstream call, so callers asking
for the same key while the call is in flight all await the one execution.
Expiry is lazy: stale entries are swept on every lookup, no timer runs.
Failed outcomes are dropped as soon as they resolve so the next caller goes
back upstream.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from ..config import get_config
from ..data.models import SearchQuery
from ..logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Components are JSON-encoded before joining, so raw control characters never
# appear inside them.
FIELD_SEP = "\x1f"
BRANCH_SEP = "\x1e"
NO_SORT = "nosort"


# ---------- key derivation ----------

def search_cache_key(query: SearchQuery) -> str:
    """Stable key for a search query.

    Criteria is trimmed and lower-cased; branches are trimmed, upper-cased,
    de-duplicated and sorted, so equivalent queries share one key.
    """
    criteria = json.dumps(query.criteria.strip().lower())
    branches = BRANCH_SEP.join(
        json.dumps(branch) for branch in sorted({b.strip().upper() for b in query.branches if b.strip()})
    )
    available = "1" if query.only_available else "0"
    sort = json.dumps(query.sort.to_param()) if query.sort else NO_SORT
    parts = [criteria, query.by.value, branches, available, f"p{query.page}", f"s{query.size}", sort]
    return FIELD_SEP.join(parts)


def peak_cache_key(part_number: str) -> str:
    return FIELD_SEP.join(["peak", json.dumps(part_number.strip().upper())])


# ---------- cache ----------

@dataclass
class CacheEntry(Generic[T]):
    key: str
    expiry: float
    handle: "asyncio.Future[T]"


class ResultCache(Generic[T]):
    """TTL + capacity bounded cache of in-flight or resolved results.

    Args:
        name: Label used in log lines.
        ttl_seconds: Lifetime of an entry from its creation. Defaults to config.
        max_entries: Capacity. Defaults to config.
        is_failure: Predicate marking a resolved value as a failure to drop.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: Optional[float] = None,
        max_entries: Optional[int] = None,
        is_failure: Optional[Callable[[T], bool]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        config = get_config()
        self.name = name
        self.ttl_seconds = config.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_entries = config.cache_max_entries if max_entries is None else max_entries
        if self.max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._is_failure = is_failure or (lambda result: False)
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def keys(self) -> List[str]:
        return list(self._entries)

    def get_or_create(self, key: str, loader: Callable[[], Awaitable[T]]) -> "asyncio.Future[T]":
        """Return the shared handle for `key`, calling `loader` only on a miss.

        A hit neither calls upstream nor extends the entry's expiry. Must be
        called with a running event loop.
        """
        now = self._clock()
        self._sweep(now)

        entry = self._entries.get(key)
        if entry is not None:
            logger.debug(f"[{self.name}] cache hit {key!r}")
            return entry.handle

        logger.debug(f"[{self.name}] cache miss {key!r}")
        handle = asyncio.ensure_future(loader())
        entry = CacheEntry(key=key, expiry=now + self.ttl_seconds, handle=handle)
        self._entries[key] = entry
        handle.add_done_callback(lambda fut: self._on_done(entry, fut))
        self._enforce_capacity()
        return handle

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry and cancel calls nobody can reach any more."""
        for entry in self._entries.values():
            if not entry.handle.done():
                entry.handle.cancel()
        self._entries.clear()

    # ---------- internals ----------

    def _sweep(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expiry <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"[{self.name}] expired {len(expired)} entries")

    def _enforce_capacity(self) -> None:
        while len(self._entries) > self.max_entries:
            victim = min(self._entries.values(), key=lambda e: e.expiry)
            del self._entries[victim.key]
            logger.debug(f"[{self.name}] evicted {victim.key!r} (capacity {self.max_entries})")

    def _on_done(self, entry: CacheEntry[T], fut: "asyncio.Future[T]") -> None:
        if fut.cancelled():
            failed = True
        elif fut.exception() is not None:
            failed = True
        else:
            failed = self._is_failure(fut.result())

        # the key may already hold a newer entry after expiry or eviction
        if failed and self._entries.get(entry.key) is entry:
            del self._entries[entry.key]
            logger.debug(f"[{self.name}] dropped failed entry {entry.key!r}")

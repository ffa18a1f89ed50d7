"""
Postboard Backend: Time-Based Response Cache
==============================================

What:  A small in-memory TTL cache shared by the services of one app instance.
How:   Entries expire `ttl` seconds after they were written. When the cache
       is full, the oldest entry is evicted first. Keys are namespaced by the
       caller (e.g. "user:5:posts") so related entries can be dropped with
       `invalidate_prefix`.
Who:   Created in the FastAPI lifespan, stored on `app.state.cache`, passed
       into UserService and PostService, cleared on shutdown.

Scope:
    Single-process only. Each uvicorn worker holds its own cache, so a
    write in one worker is only visible to other workers after their TTL.
"""

import logging
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class TTLCache:
    """
    In-process key/value cache with per-entry expiry and a size cap.

    Entries are kept in insertion order; `set` moves a key to the end and
    evicts from the front once `max_entries` is exceeded. Expired entries
    are dropped lazily on read, or in bulk by purge_expired().

    Lifecycle:
        Created by init_state() in app.main, shared by all services of one
        application, cleared by the lifespan on shutdown.

    Args:
        ttl:         Seconds an entry stays valid.
        max_entries: Capacity; the oldest entry is evicted beyond it.
        clock:       Monotonic time source, replaceable in tests.
    """

    def __init__(
        self,
        ttl: float = 300.0,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key, _MISSING)
        if entry is _MISSING:
            self.misses += 1
            return default
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl:
            del self._entries[key]
            self.misses += 1
            return default
        self.hits += 1
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), value)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache evicted %s", evicted)

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return len(self._entries)

    async def remember(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for `key`, computing and storing it on a miss."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug("Cache hit for key: %s", key)
            return value
        logger.debug("Cache miss for key: %s", key)
        value = await factory()
        self.set(key, value)
        return value

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: Optional[str] = None) -> int:
        """Drop every key starting with `prefix` (everything when None)."""
        if prefix is None:
            count = len(self._entries)
            self._entries.clear()
            return count
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [
            key for key, (stored_at, _) in self._entries.items()
            if now - stored_at >= self.ttl
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

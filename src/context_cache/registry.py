"""Process-wide registry of explicitly created provider cache resources."""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from cachetools import TTLCache

import constants
from log import get_logger

logger = get_logger(__name__)


class CacheKeyRegistry:
    """Maps cache fingerprints to remote cache resource names.

    Entries expire on the local clock before the remote resource does, so an
    expired resource is never referenced. The registry is bounded: expired
    entries are dropped first and then the least recently used ones.

    All reads and writes are serialized by one lock. Callers that need an
    atomic check-then-create for one key hold locked(key) around the whole
    sequence, which keeps concurrent negotiations from creating duplicate
    remote resources.
    """

    def __init__(
        self,
        max_entries: int = constants.DEFAULT_CACHE_REGISTRY_MAX_ENTRIES,
        ttl_seconds: float = constants.EXPLICIT_CACHE_TTL_SECONDS
        * constants.EXPLICIT_CACHE_CLIENT_TTL_RATIO,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create an empty registry.

        Parameters:
            max_entries (int): Maximum number of entries kept.
            ttl_seconds (float): Local lifetime of stored resource names.
            clock (Callable[[], float]): Monotonic time source in seconds.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._entries: TTLCache[str, str] = TTLCache(
            maxsize=max_entries, ttl=ttl_seconds, timer=clock
        )
        self._lock = asyncio.Lock()
        self._key_locks: dict[str, asyncio.Lock] = {}
        self._key_lock_users: dict[str, int] = {}

    async def get(self, key: str) -> Optional[str]:
        """Return the resource name stored for a key, None if absent or expired."""
        async with self._lock:
            self._entries.expire()
            resource_name = self._entries.get(key)
            if resource_name is not None:
                logger.debug("Cache registry hit for %s", key)
            return resource_name

    async def set(self, key: str, resource_name: str) -> None:
        """Store a resource name for a key, restarting its lifetime."""
        async with self._lock:
            self._entries[key] = resource_name

    async def delete(self, key: str) -> None:
        """Remove a key; removing an unknown key is a no-op."""
        async with self._lock:
            self._entries.pop(key, None)

    @asynccontextmanager
    async def locked(self, key: str) -> AsyncIterator[None]:
        """Hold the lock of a single key.

        Locks of different keys do not block each other. A key lock is
        dropped once nobody holds or waits for it.
        """
        lock = self._key_locks.setdefault(key, asyncio.Lock())
        self._key_lock_users[key] = self._key_lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._key_lock_users[key] -= 1
            if self._key_lock_users[key] == 0:
                del self._key_lock_users[key]
                del self._key_locks[key]

    def __len__(self) -> int:
        """Return the number of stored entries not yet purged."""
        return len(self._entries)

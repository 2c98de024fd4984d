"""
cache.py – TTL caches with a single ``get_or_fetch(key, ttl, loader)`` contract.

One cache instance is created per process and passed by reference to the
components that need it (filer directory, fact store). Entries older than the
caller-supplied TTL are reloaded.

Concurrent callers asking for the same cold key share one in-flight load:
the loader runs once and every waiter receives its result.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

import diskcache

from fundamental_ratios.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and the monotonic-ish wall time it was inserted."""

    value: T
    inserted_at: float


class TTLCache:
    """
    In-memory key → (value, inserted_at) cache.

    Parameters
    ----------
    clock:
        Wall-clock time source in seconds (injectable for tests).
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._lock = threading.Lock()
        self._key_locks: dict[str, threading.Lock] = {}

    # storage hooks, overridden by DiskTTLCache
    def _read(self, key: str) -> CacheEntry[Any] | None:
        return self._entries.get(key)

    def _write(self, key: str, entry: CacheEntry[Any], ttl: float) -> None:
        self._entries[key] = entry

    def _is_fresh(self, entry: CacheEntry[Any] | None, ttl: float) -> bool:
        return entry is not None and self._clock() - entry.inserted_at < ttl

    def _key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock

    def get_or_fetch(self, key: str, ttl: float, loader: Callable[[], T]) -> T:
        """
        Return the cached value for ``key`` if younger than ``ttl`` seconds,
        otherwise call ``loader`` once, store and return its result.

        Exceptions raised by ``loader`` propagate and nothing is stored.
        """
        with self._lock:
            entry = self._read(key)
        if self._is_fresh(entry, ttl):
            logger.debug("Cache hit: %s", key)
            return entry.value  # type: ignore[union-attr]

        with self._key_lock(key):
            # another caller may have loaded it while we waited
            with self._lock:
                entry = self._read(key)
            if self._is_fresh(entry, ttl):
                logger.debug("Cache hit after wait: %s", key)
                return entry.value  # type: ignore[union-attr]

            value = loader()
            with self._lock:
                self._write(key, CacheEntry(value=value, inserted_at=self._clock()), ttl)
            logger.debug("Cache populated: %s", key)
            return value

    def invalidate(self, key: str) -> None:
        """Drop a single entry."""
        with self._lock:
            self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._read(key) is not None

    def close(self) -> None:
        """Release resources (no-op for the in-memory cache)."""

    def __enter__(self) -> "TTLCache":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class DiskTTLCache(TTLCache):
    """
    TTL cache persisted with ``diskcache`` so entries survive process restarts.

    Entries are also given a diskcache ``expire`` equal to the TTL so stale
    data is evicted from disk.

    Parameters
    ----------
    cache_dir:
        Root directory for cache data.
    size_limit_gb:
        Maximum cache size in gigabytes.
    """

    def __init__(
        self,
        cache_dir: Path,
        size_limit_gb: float = 5.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock=clock)
        self._disk = diskcache.Cache(
            str(cache_dir),
            size_limit=int(size_limit_gb * 1024 ** 3),
        )

    def _read(self, key: str) -> CacheEntry[Any] | None:
        return self._disk.get(key)

    def _write(self, key: str, entry: CacheEntry[Any], ttl: float) -> None:
        self._disk.set(key, entry, expire=ttl)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._disk.delete(key)

    def close(self) -> None:
        """Close the underlying cache file handles."""
        self._disk.close()

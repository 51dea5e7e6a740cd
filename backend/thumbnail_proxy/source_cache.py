"""
Source Cache
源图缓存

Bounded in-memory LRU store mapping a hash of the source URL to its raw bytes.

Features:
- Strict LRU eviction, a hit promotes the entry to most-recently-used
- Thread-safe lookup/insert with a single Lock (never held across I/O)
- Single-flight fetching: concurrent misses for one URL share one fetch,
  misses for different keys fetch concurrently
- The source URL is stored with the bytes and checked on every hit
"""

import asyncio
import hashlib
import logging
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from .errors import FetchError, InvalidCapacity

logger = logging.getLogger(__name__)

FetchFunc = Callable[[str], Awaitable[bytes]]


def canonicalize_url(url: str) -> str:
    """
    Strip whitespace and lowercase the scheme and host.

    Raises:
        FetchError: the URL cannot be parsed (e.g. an unterminated IPv6 host)
    """
    url = url.strip()
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise FetchError(f"Invalid URL: {e}") from e
    return urlunsplit(parts._replace(scheme=parts.scheme.lower(), netloc=parts.netloc.lower()))


def url_to_key(url: str) -> int:
    """64-bit cache key for a source URL."""
    digest = hashlib.blake2b(canonicalize_url(url).encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big")


@dataclass(frozen=True)
class CacheEntry:
    """
    Cached source image
    缓存条目
    """
    url: str      # Canonical source URL
    data: bytes   # Raw source bytes


class SourceCache:
    """
    LRU cache of source image bytes.

    Usage:
        cache = SourceCache(capacity=1024)
        data = await cache.get_or_fetch(url, fetcher.fetch)
    """

    def __init__(self, capacity: int):
        """
        Args:
            capacity: Maximum number of entries (must be positive)
        """
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
            raise InvalidCapacity(f"cache capacity must be a positive integer, got {capacity!r}")

        self._capacity = capacity
        self._store: "OrderedDict[int, CacheEntry]" = OrderedDict()
        self._lock = Lock()
        # In-flight fetches are keyed by canonical URL so colliding keys never share bytes
        self._inflight: Dict[str, "asyncio.Task[bytes]"] = {}

        self._hits = 0
        self._misses = 0
        self._fetches = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def lookup(self, key: int) -> Optional[CacheEntry]:
        """
        Get an entry by key and promote it to most-recently-used.

        Returns:
            The complete entry, or None
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is not None:
                self._store.move_to_end(key)
            return entry

    def insert(self, key: int, entry: CacheEntry) -> None:
        """Insert or refresh an entry, evicting the least-recently-used on overflow."""
        with self._lock:
            self._store[key] = entry
            self._store.move_to_end(key)

            while len(self._store) > self._capacity:
                evicted_key, evicted = self._store.popitem(last=False)
                self._evictions += 1
                logger.debug(f"[SourceCache] LRU evicted {evicted_key:016x}: {evicted.url[:50]}")

    def contains(self, key: int) -> bool:
        """Membership test that does not count as a use."""
        with self._lock:
            return key in self._store

    def is_cached(self, url: str) -> bool:
        """True if the bytes for this exact URL are stored. Does not count as a use."""
        canonical = canonicalize_url(url)
        with self._lock:
            entry = self._store.get(url_to_key(canonical))
        return entry is not None and entry.url == canonical

    async def get_or_fetch(self, url: str, fetch: FetchFunc) -> bytes:
        """
        Return cached bytes for `url`, fetching them on a miss.

        Args:
            url: Source URL
            fetch: Async callable returning the bytes for a URL

        Returns:
            Source bytes (identical for every caller of the same URL)

        Raises:
            Whatever `fetch` raises; nothing is cached in that case.
        """
        canonical = canonicalize_url(url)
        key = url_to_key(canonical)

        entry = self.lookup(key)
        if entry is not None and entry.url == canonical:
            self._hits += 1
            logger.debug(f"[SourceCache] Hit {key:016x}")
            return entry.data

        if entry is not None:
            logger.warning(f"[SourceCache] Key collision on {key:016x}, refetching {canonical[:60]}")

        self._misses += 1
        task = self._inflight.get(canonical)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_insert(key, canonical, url, fetch))
            task.add_done_callback(self._fetch_done)
            self._inflight[canonical] = task
        else:
            logger.debug(f"[SourceCache] Joining in-flight fetch {key:016x}")

        # Cancelling one waiter must not cancel the fetch other waiters share
        return await asyncio.shield(task)

    async def _fetch_and_insert(self, key: int, canonical: str, url: str, fetch: FetchFunc) -> bytes:
        try:
            self._fetches += 1
            logger.info(f"[SourceCache] Miss {key:016x}, fetching {url[:80]}")
            data = bytes(await fetch(url))
            self.insert(key, CacheEntry(url=canonical, data=data))
            logger.debug(f"[SourceCache] Put {key:016x} ({len(data)} bytes)")
            return data
        finally:
            self._inflight.pop(canonical, None)

    @staticmethod
    def _fetch_done(task: "asyncio.Task[bytes]") -> None:
        # Mark the exception retrieved when every waiter was cancelled
        if not task.cancelled():
            task.exception()

    def clear(self) -> int:
        """
        Remove all entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._store)
            self._store.clear()
        logger.info(f"[SourceCache] Cleared all {count} entries")
        return count

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total_size = sum(len(entry.data) for entry in self._store.values())
            return {
                "total_entries": len(self._store),
                "capacity": self._capacity,
                "total_size_bytes": total_size,
                "total_size_mb": round(total_size / (1024 * 1024), 2),
                "hits": self._hits,
                "misses": self._misses,
                "fetches": self._fetches,
                "evictions": self._evictions,
                "in_flight": len(self._inflight),
            }

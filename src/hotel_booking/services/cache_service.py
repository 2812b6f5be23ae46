"""In-process TTL cache for room listings, search results and availability.

Reads and writes never raise to their caller: internal faults are logged
and degrade to a miss or a skipped write. Errors from ``delete`` and the
invalidation operations propagate, so the write path can report them.
"""

import asyncio
import json
import logging
import threading
import time
from collections.abc import Callable, Collection, Iterable
from datetime import date
from typing import Any

from cachetools import TLRUCache

from hotel_booking.config import settings
from hotel_booking.entities import CacheEntryEntity

from .cache_keys import (
    ROOM_CACHE_PREFIXES,
    CacheKey,
    availability_key,
    room_page_key,
    total_count_key,
)

logger = logging.getLogger(__name__)


def _entry_expiry(_key: str, entry: CacheEntryEntity, _now: float) -> float:
    return entry.expires_at


class CacheService:
    """Process-wide key/value cache with per-entry TTL and targeted invalidation.

    Entries live in a ``cachetools.TLRUCache`` whose time-to-use comes from
    each entry's own TTL, so every value can have a different lifetime.
    Expired entries are evicted on writes and misses, and ``sweep()`` (run
    periodically by the app) evicts the ones nobody touches. When full, the
    cache evicts entries to stay within ``max_entries``. One lock
    scoped to the instance guards every operation, so the cache is safe
    under concurrent requests in threads or tasks.

    Keys may be structured keys from ``cache_keys`` or plain strings.
    Structured keys contribute their room ids to the entry's tags; callers
    can add more tags with ``room_ids`` when the rooms are only known after
    computing the value.

    A computation that may race with invalidation takes a ``write_mark()``
    before reading the stores and passes it as ``since`` when caching the
    result. The write is skipped if any tagged room was invalidated after
    the mark, so an in-flight computation cannot put back what a booking
    just invalidated.

    Example:
        ```python
        from hotel_booking.services import CacheService
        from hotel_booking.services.cache_keys import availability_key

        cache = CacheService.create()
        key = availability_key(["R2", "R1"], "2025-01-01", "2025-01-05")
        cache.set(key, {"R1": True, "R2": False}, ttl=120)
        cache.get(key)                    # {"R1": True, "R2": False}
        cache.invalidate_by_room_id("R1")  # 1
        ```
    """

    def __init__(
        self,
        default_ttl: float | None = None,
        availability_ttl: float | None = None,
        room_page_ttl: float | None = None,
        search_ttl: float | None = None,
        count_ttl: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            default_ttl: TTL in seconds when ``set`` gets none. Defaults to settings.
            availability_ttl: TTL for availability maps. Defaults to settings.
            room_page_ttl: TTL for listing pages. Defaults to settings.
            search_ttl: TTL for search result pages. Defaults to settings.
            count_ttl: TTL for listing totals. Defaults to settings.
            max_entries: Size bound of the cache. Defaults to settings.
            clock: Monotonic clock in seconds (injectable for tests).
        """
        self._clock = clock
        self._entries: TLRUCache = TLRUCache(
            maxsize=max_entries or settings.cache_max_entries,
            ttu=_entry_expiry,
            timer=clock,
        )
        self._lock = threading.RLock()
        self._default_ttl = default_ttl or settings.cache_default_ttl
        self._availability_ttl = availability_ttl or settings.cache_availability_ttl
        self._room_page_ttl = room_page_ttl or settings.cache_room_page_ttl
        self._search_ttl = search_ttl or settings.cache_search_ttl
        self._count_ttl = count_ttl or settings.cache_count_ttl
        self._hits = 0
        self._misses = 0

        # Invalidation sequence: per-room and cache-wide high-water marks
        self._sequence = 0
        self._room_invalidated_at: dict[str, int] = {}
        self._all_invalidated_at = 0

    @classmethod
    def create(cls, clock: Callable[[], float] = time.monotonic) -> "CacheService":
        """Factory method to create a CacheService with TTLs from settings."""
        return cls(clock=clock)

    @staticmethod
    def _storage_key(key: CacheKey | str) -> str:
        return key if isinstance(key, str) else key.render()

    # Core operations

    def get(self, key: CacheKey | str) -> Any | None:
        """Return the cached value, or None if absent or expired.

        A miss also evicts whatever has expired, this entry included.
        """
        try:
            storage_key = self._storage_key(key)
            with self._lock:
                entry = self._entries.get(storage_key)
                if entry is None:
                    self._misses += 1
                    self._entries.expire()
                    return None
                self._hits += 1
            logger.debug("Cache hit: %s", storage_key)
            return entry.value
        except Exception:
            logger.exception("Cache fault on get; treating as miss")
            return None

    def set(
        self,
        key: CacheKey | str,
        value: Any,
        ttl: float | None = None,
        room_ids: Iterable[str] = (),
        since: int | None = None,
    ) -> bool:
        """Store ``value`` under ``key``, replacing any entry and its expiry.

        Args:
            key: Structured cache key or raw string
            value: Result to memoize
            ttl: Lifetime in seconds. Defaults to the cache's default TTL.
            room_ids: Extra rooms the value depends on
            since: Write mark taken before the value was computed. The write
                is skipped if a tagged room was invalidated after it.

        Returns:
            True if the value was stored
        """
        try:
            storage_key = self._storage_key(key)
            tags = frozenset(room_ids)
            if not isinstance(key, str):
                tags |= key.room_ids
            lifetime = ttl if ttl is not None else self._default_ttl
            with self._lock:
                if self._invalidated_since(tags, since):
                    logger.debug("Skipped stale write: %s", storage_key)
                    return False
                self._entries[storage_key] = CacheEntryEntity(
                    key=storage_key,
                    value=value,
                    stored_at=self._clock(),
                    ttl=lifetime,
                    room_ids=tags,
                )
            logger.debug("Cached: %s (TTL: %ss)", storage_key, lifetime)
            return True
        except Exception:
            logger.exception("Cache fault on set; value not cached")
            return False

    def delete(self, key: CacheKey | str) -> bool:
        """Remove an entry.

        Returns:
            True if a live entry existed, False otherwise
        """
        storage_key = self._storage_key(key)
        with self._lock:
            deleted = self._entries.pop(storage_key, None) is not None
        if deleted:
            logger.debug("Cache deleted: %s", storage_key)
        return deleted

    def clear(self) -> int:
        """Remove every entry. Not for the request path.

        Returns:
            Number of live entries removed
        """
        with self._lock:
            self._entries.expire()
            count = len(self._entries)
            self._entries.clear()
            self._all_invalidated_at = self._next_sequence()
            self._hits = 0
            self._misses = 0
        logger.info("Cache cleared (%d entries)", count)
        return count

    # Invalidation

    def write_mark(self) -> int:
        """Current invalidation sequence number, to pass as ``set(since=...)``."""
        with self._lock:
            return self._sequence

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def _invalidated_since(self, tags: frozenset[str], since: int | None) -> bool:
        if since is None:
            return False
        if self._all_invalidated_at > since:
            return True
        return any(self._room_invalidated_at.get(room_id, 0) > since for room_id in tags)

    def _live_entries(self) -> list[CacheEntryEntity]:
        entries = []
        for storage_key in list(self._entries):
            entry = self._entries.get(storage_key)
            if entry is not None:
                entries.append(entry)
        return entries

    def _delete_matching(self, predicate: Callable[[CacheEntryEntity], bool]) -> int:
        doomed = [entry.key for entry in self._live_entries() if predicate(entry)]
        for storage_key in doomed:
            del self._entries[storage_key]
        return len(doomed)

    def invalidate_by_prefix(self, prefix: str) -> int:
        """Delete every entry whose storage key starts with ``prefix``."""
        with self._lock:
            self._all_invalidated_at = self._next_sequence()
            count = self._delete_matching(lambda entry: entry.key.startswith(prefix))
        logger.info("Invalidated %d cache entries with prefix %r", count, prefix)
        return count

    def invalidate_by_room_id(self, room_id: str) -> int:
        """Delete every entry that depends on ``room_id``.

        Matches the entry's room-id tags exactly, never key substrings.
        """
        with self._lock:
            self._room_invalidated_at[room_id] = self._next_sequence()
            count = self._delete_matching(lambda entry: room_id in entry.room_ids)
        logger.info("Invalidated %d cache entries for room %s", count, room_id)
        return count

    def invalidate_room_caches(self) -> int:
        """Drop all listing, count, search and availability entries."""
        with self._lock:
            self._all_invalidated_at = self._next_sequence()
            count = self._delete_matching(lambda entry: entry.key.startswith(ROOM_CACHE_PREFIXES))
        logger.info("Invalidated %d room cache entries", count)
        return count

    # Expiry

    def sweep(self) -> int:
        """Evict every expired entry.

        Returns:
            Number of entries evicted
        """
        with self._lock:
            count = len(self._entries.expire())
        if count:
            logger.debug("Swept %d expired cache entries", count)
        return count

    async def sweep_forever(self, interval: float) -> None:
        """Run ``sweep`` every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            self.sweep()

    # Introspection

    def stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with size, keys, memory estimate, hits and misses
        """
        with self._lock:
            self._entries.expire()
            entries = self._live_entries()
            hits, misses = self._hits, self._misses
        return {
            "size": len(entries),
            "keys": [entry.key for entry in entries],
            "memory_usage": self._estimate_memory(entries),
            "hits": hits,
            "misses": misses,
        }

    @staticmethod
    def _estimate_memory(entries: list[CacheEntryEntity]) -> int | None:
        """Approximate bytes held, two bytes per character of key and JSON value."""
        try:
            size = 0
            for entry in entries:
                size += len(entry.key) * 2
                size += len(json.dumps(entry.value, default=repr)) * 2
            return size
        except Exception:
            logger.warning("Could not estimate cache memory usage", exc_info=True)
            return None

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    # Typed helpers

    def cache_availability(
        self,
        room_ids: Collection[str],
        check_in: date | str,
        check_out: date | str,
        results: dict[str, bool],
        since: int | None = None,
    ) -> bool:
        """Cache an availability map for a room set and stay."""
        return self.set(
            availability_key(room_ids, check_in, check_out),
            results,
            self._availability_ttl,
            since=since,
        )

    def get_cached_availability(
        self,
        room_ids: Collection[str],
        check_in: date | str,
        check_out: date | str,
    ) -> dict[str, bool] | None:
        return self.get(availability_key(room_ids, check_in, check_out))

    def cache_room_page(
        self,
        page: int,
        limit: int,
        value: Any,
        room_ids: Iterable[str] = (),
        has_search_criteria: bool = False,
        since: int | None = None,
    ) -> bool:
        """Cache one listing page, tagged with the rooms it shows."""
        return self.set(
            room_page_key(page, limit, has_search_criteria),
            value,
            self._room_page_ttl,
            room_ids,
            since=since,
        )

    def get_cached_room_page(self, page: int, limit: int, has_search_criteria: bool = False) -> Any | None:
        return self.get(room_page_key(page, limit, has_search_criteria))

    def cache_total_count(self, count: int, has_search_criteria: bool = False, since: int | None = None) -> bool:
        return self.set(total_count_key(has_search_criteria), count, self._count_ttl, since=since)

    def get_cached_total_count(self, has_search_criteria: bool = False) -> int | None:
        return self.get(total_count_key(has_search_criteria))

    def cache_search_results(
        self,
        key: CacheKey,
        value: Any,
        room_ids: Iterable[str],
        since: int | None = None,
    ) -> bool:
        """Cache a search result page, tagged with every candidate room."""
        return self.set(key, value, self._search_ttl, room_ids, since=since)

    def get_cached_search_results(self, key: CacheKey) -> Any | None:
        return self.get(key)

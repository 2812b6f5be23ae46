"""Cache entry domain entity."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a value held by the availability cache.

    The cache evicts an entry once ``ttl`` seconds have passed since
    ``stored_at``.

    Attributes:
        key: Storage key (string form of a structured cache key)
        value: The memoized result
        stored_at: Clock reading when the entry was written (seconds)
        ttl: Lifetime in seconds
        room_ids: Rooms this entry depends on, used by room invalidation
    """

    key: str
    value: Any
    stored_at: float
    ttl: float
    room_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def expires_at(self) -> float:
        """Clock reading at which the entry becomes stale."""
        return self.stored_at + self.ttl


@dataclass(frozen=True)
class InvalidationResult:
    """Outcome of a room-scoped invalidation triggered by a write."""

    room_id: str
    removed: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

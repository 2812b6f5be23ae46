"""Cache key builders for consistent namespacing.

Keys are small frozen dataclasses. Each carries a ``kind`` (also its string
prefix), its structured fields, and the set of room ids it depends on. The
string form from ``render()`` is only used as the storage key; invalidation
works on ``room_ids`` so that room "R1" never matches a key for "R10".
"""

import base64
import json
from dataclasses import dataclass
from datetime import date
from typing import Literal

ListingMode = Literal["browse", "search"]

AVAILABILITY_PREFIX = "availability:"
ROOM_PAGE_PREFIX = "rooms:"
COUNT_PREFIX = "count:"
SEARCH_PREFIX = "search:"

ROOM_CACHE_PREFIXES = (ROOM_PAGE_PREFIX, COUNT_PREFIX, SEARCH_PREFIX, AVAILABILITY_PREFIX)


def _day(value: date | str) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


@dataclass(frozen=True)
class AvailabilityKey:
    """Availability map for a set of rooms over one stay."""

    room_ids: frozenset[str]
    check_in: str
    check_out: str
    kind: str = "availability"

    @classmethod
    def of(cls, room_ids, check_in: date | str, check_out: date | str) -> "AvailabilityKey":
        return cls(frozenset(room_ids), _day(check_in), _day(check_out))

    def render(self) -> str:
        ids = ",".join(sorted(self.room_ids))
        return f"{AVAILABILITY_PREFIX}{ids}:{self.check_in}:{self.check_out}"


@dataclass(frozen=True)
class RoomPageKey:
    """One page of the room listing."""

    page: int
    limit: int
    mode: ListingMode = "browse"
    kind: str = "rooms"

    @property
    def room_ids(self) -> frozenset[str]:
        # Page contents are only known after the fetch; entries are tagged then.
        return frozenset()

    def render(self) -> str:
        return f"{ROOM_PAGE_PREFIX}{self.mode}:{self.page}:{self.limit}"


@dataclass(frozen=True)
class TotalCountKey:
    """Total number of rooms for a listing mode."""

    mode: ListingMode = "browse"
    kind: str = "count"

    @property
    def room_ids(self) -> frozenset[str]:
        return frozenset()

    def render(self) -> str:
        return f"{COUNT_PREFIX}{self.mode}"


@dataclass(frozen=True)
class SearchKey:
    """One page of search results for a set of criteria."""

    criteria: str
    page: int
    limit: int
    kind: str = "search"

    @classmethod
    def of(
        cls,
        destination_city: str | None,
        check_in: date | str | None,
        check_out: date | str | None,
        guest_count: int | None,
        room_count: int | None,
        page: int,
        limit: int,
    ) -> "SearchKey":
        """Encode the criteria as sorted-field JSON so equal queries share a key."""
        criteria = json.dumps(
            {
                "destinationCity": destination_city,
                "checkInDate": _day(check_in) if check_in is not None else None,
                "checkOutDate": _day(check_out) if check_out is not None else None,
                "guestCount": guest_count,
                "roomCount": room_count,
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return cls(criteria, page, limit)

    @property
    def room_ids(self) -> frozenset[str]:
        return frozenset()

    def render(self) -> str:
        encoded = base64.b64encode(self.criteria.encode()).decode()
        return f"{SEARCH_PREFIX}{encoded}:{self.page}:{self.limit}"


CacheKey = AvailabilityKey | RoomPageKey | TotalCountKey | SearchKey


def availability_key(room_ids, check_in: date | str, check_out: date | str) -> AvailabilityKey:
    """Build cache key for a room availability map."""
    return AvailabilityKey.of(room_ids, check_in, check_out)


def room_page_key(page: int, limit: int, has_search_criteria: bool = False) -> RoomPageKey:
    """Build cache key for a page of the room listing."""
    return RoomPageKey(page, limit, "search" if has_search_criteria else "browse")


def total_count_key(has_search_criteria: bool = False) -> TotalCountKey:
    """Build cache key for the room listing total."""
    return TotalCountKey("search" if has_search_criteria else "browse")

"""Search query and result entities.

Room search reports its outcome as one of three values so callers can tell
them apart without exceptions:

- ``RoomSearchPage``: success, possibly with zero rooms
- ``ValidationFailure``: the query itself is invalid
- ``ResolutionFailure``: the stores failed and no answer could be computed
"""

import math
from dataclasses import dataclass
from datetime import date

from .booking import BookingEntity
from .room import RoomEntity


@dataclass(frozen=True)
class SearchQuery:
    """A transient room search request.

    Fields are optional so missing values reach validation instead of
    failing at construction.
    """

    destination_city: str | None
    check_in: date | None
    check_out: date | None
    guest_count: int | None = None
    room_count: int | None = None
    page: int = 1
    limit: int = 10


@dataclass(frozen=True)
class Pagination:
    """Pagination metadata for a page of results."""

    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> "Pagination":
        """Derive page counts and navigation flags from a total."""
        total_pages = math.ceil(total_count / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            limit=limit,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


@dataclass(frozen=True)
class AvailableRoom:
    """A room free for the requested stay, with computed pricing."""

    room: RoomEntity
    nights: int
    price_per_night: float
    total_price: float


@dataclass(frozen=True)
class RoomSearchPage:
    """One page of available rooms.

    ``degraded`` is set when the booking check failed and every candidate
    was withheld; such pages are never cached.
    """

    rooms: tuple[AvailableRoom, ...]
    pagination: Pagination
    degraded: bool = False


@dataclass(frozen=True)
class RoomListingPage:
    """One page of the browse listing (no dates, no pricing)."""

    rooms: tuple[RoomEntity, ...]
    pagination: Pagination


@dataclass(frozen=True)
class RoomBookingsPage:
    """One page of a room's booking history, newest first."""

    bookings: tuple[BookingEntity, ...]
    pagination: Pagination


@dataclass(frozen=True)
class ValidationFailure:
    """A search query rejected before any store access."""

    field: str
    message: str


@dataclass(frozen=True)
class ResolutionFailure:
    """The stores could not produce candidate rooms."""

    message: str


SearchOutcome = RoomSearchPage | ValidationFailure | ResolutionFailure

"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .booking import ACTIVE_STATUSES, BookingEntity, BookingStatus
from .cache_entry import CacheEntryEntity, InvalidationResult
from .room import RoomEntity
from .search import (
    AvailableRoom,
    Pagination,
    ResolutionFailure,
    RoomBookingsPage,
    RoomListingPage,
    RoomSearchPage,
    SearchOutcome,
    SearchQuery,
    ValidationFailure,
)

__all__ = [
    "ACTIVE_STATUSES",
    "AvailableRoom",
    "BookingEntity",
    "BookingStatus",
    "CacheEntryEntity",
    "InvalidationResult",
    "Pagination",
    "ResolutionFailure",
    "RoomBookingsPage",
    "RoomEntity",
    "RoomListingPage",
    "RoomSearchPage",
    "SearchOutcome",
    "SearchQuery",
    "ValidationFailure",
]

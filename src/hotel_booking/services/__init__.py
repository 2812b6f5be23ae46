"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from hotel_booking.services import CacheService, RoomSearchService

    cache = CacheService.create()
    search = RoomSearchService(room_store=rooms, booking_store=bookings, cache=cache)
    ```
"""

from .booking_service import BookingService
from .cache_service import CacheService
from .room_search_service import RoomSearchService
from .room_service import RoomService

__all__ = [
    "BookingService",
    "CacheService",
    "RoomSearchService",
    "RoomService",
]

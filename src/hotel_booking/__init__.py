"""Hotel Booking - room search with cached availability and booking management.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (RoomStore, BookingStore)
    - repositories: Data access implementations (Redis, in-memory)
    - services: Business logic (cache, room search, rooms, bookings)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from hotel_booking.repositories import InMemoryBookingRepository, InMemoryRoomRepository
    from hotel_booking.services import CacheService, RoomSearchService

    cache = CacheService.create()
    search = RoomSearchService(
        room_store=InMemoryRoomRepository(rooms),
        booking_store=InMemoryBookingRepository(),
        cache=cache,
    )
    ```

For HTTP API:
    ```python
    from hotel_booking.api.app import app
    ```
"""

from hotel_booking.config import get_redis_client, settings
from hotel_booking.dto import CreateBookingRequest, SearchRoomsRequest
from hotel_booking.entities import (
    BookingEntity,
    BookingStatus,
    ResolutionFailure,
    RoomEntity,
    RoomSearchPage,
    SearchQuery,
    ValidationFailure,
)
from hotel_booking.handlers import BookingHandler, CacheHandler, RoomHandler
from hotel_booking.protocols import BookingStore, RoomStore
from hotel_booking.repositories import (
    InMemoryBookingRepository,
    InMemoryRoomRepository,
    RedisBookingRepository,
    RedisRoomRepository,
)
from hotel_booking.services import BookingService, CacheService, RoomSearchService, RoomService

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "BookingStore",
    "RoomStore",
    # Services (business logic)
    "BookingService",
    "CacheService",
    "RoomSearchService",
    "RoomService",
    # Handlers (HTTP)
    "BookingHandler",
    "CacheHandler",
    "RoomHandler",
    # Repositories (data access)
    "InMemoryBookingRepository",
    "InMemoryRoomRepository",
    "RedisBookingRepository",
    "RedisRoomRepository",
    # Entities (domain models)
    "BookingEntity",
    "BookingStatus",
    "ResolutionFailure",
    "RoomEntity",
    "RoomSearchPage",
    "SearchQuery",
    "ValidationFailure",
    # DTOs (API contracts)
    "CreateBookingRequest",
    "SearchRoomsRequest",
]

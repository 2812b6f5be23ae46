"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Stores, cache, services and handlers built once in the lifespan
    - Dependency functions retrieve from request.app.state
    - The cache is one explicit instance per app, no module global
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status

from hotel_booking.config import get_redis_client, settings
from hotel_booking.handlers import BookingHandler, CacheHandler, RoomHandler
from hotel_booking.protocols import BookingStore, RoomStore
from hotel_booking.repositories import (
    InMemoryBookingRepository,
    InMemoryRoomRepository,
    RedisBookingRepository,
    RedisRoomRepository,
)
from hotel_booking.services import BookingService, CacheService, RoomSearchService, RoomService

logger = logging.getLogger(__name__)


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return value


def get_room_handler(request: Request) -> RoomHandler:
    """Dependency injection for RoomHandler from app.state."""
    return _from_state(request, "room_handler")


def get_booking_handler(request: Request) -> BookingHandler:
    """Dependency injection for BookingHandler from app.state."""
    return _from_state(request, "booking_handler")


def get_cache_handler(request: Request) -> CacheHandler:
    """Dependency injection for CacheHandler from app.state."""
    return _from_state(request, "cache_handler")


def get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Identify the caller from the ``X-User-Id`` header.

    Token verification happens upstream; this service trusts the header.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User ID not found in request",
        )
    return x_user_id.strip()


def create_lifespan(
    room_store: RoomStore | None = None,
    booking_store: BookingStore | None = None,
    cache: CacheService | None = None,
):
    """Build the lifespan context manager for the FastAPI app.

    Stores default to Redis or in-memory depending on ``STORE_BACKEND``;
    passing them in (as tests do) skips that choice.

    Args:
        room_store: Room store override
        booking_store: Booking store override
        cache: Cache instance override

    Returns:
        An async context manager factory suitable for ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        redis_client = None
        rooms, bookings = room_store, booking_store
        if rooms is None or bookings is None:
            if settings.uses_redis:
                redis_client = get_redis_client()
                rooms = rooms or RedisRoomRepository.create(redis_client)
                bookings = bookings or RedisBookingRepository.create(redis_client)
            else:
                rooms = rooms or InMemoryRoomRepository()
                bookings = bookings or InMemoryBookingRepository()

        cache_service = cache or CacheService.create()
        search_service = RoomSearchService(room_store=rooms, booking_store=bookings, cache=cache_service)
        room_service = RoomService(room_store=rooms, cache=cache_service)
        booking_service = BookingService(room_store=rooms, booking_store=bookings, cache=cache_service)

        app.state.cache_service = cache_service
        app.state.room_handler = RoomHandler(search_service=search_service, room_service=room_service)
        app.state.booking_handler = BookingHandler(booking_service=booking_service)
        app.state.cache_handler = CacheHandler(cache=cache_service, room_store=rooms)

        sweeper = asyncio.create_task(cache_service.sweep_forever(settings.cache_sweep_interval))
        logger.info("Hotel booking service initialized (store backend: %s)", type(rooms).__name__)

        yield

        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        if redis_client is not None:
            await redis_client.aclose()

        del app.state.cache_handler
        del app.state.booking_handler
        del app.state.room_handler
        del app.state.cache_service
        logger.info("Hotel booking service shut down")

    return lifespan


# Type aliases for cleaner dependency injection
RoomHandlerDep = Annotated[RoomHandler, Depends(get_room_handler)]
BookingHandlerDep = Annotated[BookingHandler, Depends(get_booking_handler)]
CacheHandlerDep = Annotated[CacheHandler, Depends(get_cache_handler)]
UserIdDep = Annotated[str, Depends(get_user_id)]

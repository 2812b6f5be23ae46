"""FastAPI application exposing room search, the room catalogue and bookings."""

from typing import Annotated, Any

from fastapi import FastAPI, Query, status
from fastapi.middleware.cors import CORSMiddleware

from hotel_booking.api.dependencies import (
    BookingHandlerDep,
    CacheHandlerDep,
    RoomHandlerDep,
    UserIdDep,
    create_lifespan,
)
from hotel_booking.config import settings
from hotel_booking.dto import (
    BookingListResponse,
    BookingResponse,
    CacheStatsResponse,
    CreateBookingRequest,
    HealthCheckResponse,
    RoomAvailabilityRequest,
    RoomBookingsResponse,
    RoomDetailResponse,
    RoomListResponse,
    RoomSearchResponse,
    RoomUpdateRequest,
    SearchRoomsRequest,
)
from hotel_booking.entities import BookingStatus
from hotel_booking.protocols import BookingStore, RoomStore
from hotel_booking.services import CacheService


def create_app(
    room_store: RoomStore | None = None,
    booking_store: BookingStore | None = None,
    cache: CacheService | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        room_store: Room store override (defaults from settings)
        booking_store: Booking store override (defaults from settings)
        cache: Cache instance override

    Returns:
        The configured FastAPI app
    """
    app = FastAPI(
        title="Hotel Booking API",
        description="Room search with cached availability, and booking management",
        version="0.1.0",
        lifespan=create_lifespan(room_store, booking_store, cache),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Hotel Booking API",
            "version": "0.1.0",
            "endpoints": {
                "search": "/rooms/search",
                "rooms": "/rooms",
                "bookings": "/bookings",
                "cache": "/cache/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: CacheHandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.post("/rooms/search", response_model=RoomSearchResponse)
    async def search_rooms(request: SearchRoomsRequest, handler: RoomHandlerDep) -> RoomSearchResponse:
        """Search rooms free for a stay."""
        return await handler.search_rooms(request)

    @app.get("/rooms", response_model=RoomListResponse)
    async def list_rooms(
        handler: RoomHandlerDep,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int, Query(ge=1, le=settings.max_page_size)] = settings.default_page_size,
    ) -> RoomListResponse:
        """Browse rooms open for booking."""
        return await handler.list_rooms(page, limit)

    @app.get("/rooms/{room_id}", response_model=RoomDetailResponse)
    async def get_room(room_id: str, handler: RoomHandlerDep) -> RoomDetailResponse:
        """Get one room."""
        return await handler.get_room(room_id)

    @app.patch("/rooms/{room_id}", response_model=RoomDetailResponse)
    async def update_room(room_id: str, request: RoomUpdateRequest, handler: RoomHandlerDep) -> RoomDetailResponse:
        """Update a room's details."""
        return await handler.update_room(room_id, request)

    @app.get("/rooms/{room_id}/bookings", response_model=RoomBookingsResponse)
    async def list_room_bookings(
        room_id: str,
        handler: BookingHandlerDep,
        status: BookingStatus | None = None,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int, Query(ge=1, le=settings.max_page_size)] = 20,
    ) -> RoomBookingsResponse:
        """A room's booking history, newest first."""
        return await handler.list_room_bookings(room_id, status, page, limit)

    @app.patch("/rooms/{room_id}/availability", response_model=RoomDetailResponse)
    async def set_room_availability(
        room_id: str,
        request: RoomAvailabilityRequest,
        handler: RoomHandlerDep,
    ) -> RoomDetailResponse:
        """Open or close a room for booking."""
        return await handler.set_room_availability(room_id, request)

    @app.post("/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
    async def create_booking(
        request: CreateBookingRequest,
        user_id: UserIdDep,
        handler: BookingHandlerDep,
    ) -> BookingResponse:
        """Create a booking for the caller."""
        return await handler.create_booking(user_id, request)

    @app.get("/bookings", response_model=BookingListResponse)
    async def list_bookings(user_id: UserIdDep, handler: BookingHandlerDep) -> BookingListResponse:
        """The caller's booking history, newest first."""
        return await handler.list_bookings(user_id)

    @app.get("/bookings/{booking_id}", response_model=BookingResponse)
    async def get_booking(booking_id: str, user_id: UserIdDep, handler: BookingHandlerDep) -> BookingResponse:
        """Get one of the caller's bookings."""
        return await handler.get_booking(user_id, booking_id)

    @app.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
    async def cancel_booking(booking_id: str, user_id: UserIdDep, handler: BookingHandlerDep) -> BookingResponse:
        """Cancel one of the caller's bookings."""
        return await handler.cancel_booking(user_id, booking_id)

    @app.get("/cache/stats", response_model=CacheStatsResponse)
    async def cache_stats(handler: CacheHandlerDep) -> CacheStatsResponse:
        """Get cache statistics."""
        return await handler.get_stats()

    @app.delete("/cache", response_model=dict[str, Any])
    async def clear_cache(handler: CacheHandlerDep) -> dict[str, Any]:
        """Clear all entries from the cache."""
        return await handler.clear_cache()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hotel_booking.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )

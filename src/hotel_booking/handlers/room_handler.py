"""HTTP handlers for room search and the room catalogue.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

from dataclasses import asdict

from fastapi import HTTPException, status

from hotel_booking.dto import (
    PaginationResponse,
    RoomAvailabilityRequest,
    RoomDetailResponse,
    RoomListResponse,
    RoomSearchResponse,
    RoomSummary,
    RoomUpdateRequest,
    SearchRoomsRequest,
)
from hotel_booking.entities import (
    AvailableRoom,
    Pagination,
    ResolutionFailure,
    RoomEntity,
    SearchQuery,
    ValidationFailure,
)
from hotel_booking.exceptions import HotelBookingError
from hotel_booking.services import RoomSearchService, RoomService

from .errors import to_http_exception


def _pagination(pagination: Pagination) -> PaginationResponse:
    return PaginationResponse(**asdict(pagination))


def _room_summary(room: RoomEntity) -> RoomSummary:
    return RoomSummary(
        id=room.id,
        title=room.name,
        subtitle=room.subtitle,
        description=room.description,
        image=room.cover_image,
        price=room.price,
        amenities=list(room.amenities),
        room_type=room.room_type,
        capacity=room.capacity,
        max_occupancy=room.max_occupancy or room.capacity,
        bed_type=room.bed_type,
        room_number=room.room_number,
        hotel_id=room.hotel_id,
    )


def _available_room_summary(item: AvailableRoom) -> RoomSummary:
    summary = _room_summary(item.room)
    return summary.model_copy(
        update={
            "price": item.total_price,
            "price_per_night": item.price_per_night,
            "nights": item.nights,
        }
    )


class RoomHandler:
    """HTTP handlers for room operations.

    Search outcomes map to status codes as follows:
    - ValidationFailure: 400 with the offending field
    - ResolutionFailure: 503, the client should retry
    - RoomSearchPage: 200, ``data`` may be empty
    """

    def __init__(self, search_service: RoomSearchService, room_service: RoomService) -> None:
        self._search = search_service
        self._rooms = room_service

    async def search_rooms(self, request: SearchRoomsRequest) -> RoomSearchResponse:
        """Handle POST /rooms/search requests."""
        query = SearchQuery(
            destination_city=request.destination_city,
            check_in=request.check_in_date,
            check_out=request.check_out_date,
            guest_count=request.guest_count,
            room_count=request.room_count,
            page=request.page,
            limit=request.limit,
        )
        outcome = await self._search.search_available_rooms(query)

        if isinstance(outcome, ValidationFailure):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"field": outcome.field, "message": outcome.message},
            )
        if isinstance(outcome, ResolutionFailure):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=outcome.message,
            )

        return RoomSearchResponse(
            data=[_available_room_summary(item) for item in outcome.rooms],
            pagination=_pagination(outcome.pagination),
            search_criteria={
                "destination_city": request.destination_city,
                "check_in_date": request.check_in_date,
                "check_out_date": request.check_out_date,
                "guest_count": request.guest_count,
                "room_count": request.room_count,
            },
            degraded=outcome.degraded,
        )

    async def list_rooms(self, page: int, limit: int) -> RoomListResponse:
        """Handle GET /rooms requests."""
        try:
            listing = await self._rooms.list_rooms(page, limit)
        except HotelBookingError as e:
            raise to_http_exception(e) from e
        return RoomListResponse(
            data=[_room_summary(room) for room in listing.rooms],
            pagination=_pagination(listing.pagination),
        )

    async def get_room(self, room_id: str) -> RoomDetailResponse:
        """Handle GET /rooms/{room_id} requests."""
        try:
            room = await self._rooms.get_room(room_id)
        except HotelBookingError as e:
            raise to_http_exception(e) from e
        return RoomDetailResponse(data=asdict(room))

    async def set_room_availability(self, room_id: str, request: RoomAvailabilityRequest) -> RoomDetailResponse:
        """Handle PATCH /rooms/{room_id}/availability requests."""
        try:
            room = await self._rooms.set_room_availability(room_id, request.available)
        except HotelBookingError as e:
            raise to_http_exception(e) from e
        return RoomDetailResponse(data=asdict(room))

    async def update_room(self, room_id: str, request: RoomUpdateRequest) -> RoomDetailResponse:
        """Handle PATCH /rooms/{room_id} requests."""
        try:
            room = await self._rooms.update_room(room_id, request.model_dump(exclude_unset=True))
        except HotelBookingError as e:
            raise to_http_exception(e) from e
        return RoomDetailResponse(data=asdict(room))

"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import CreateBookingRequest, RoomAvailabilityRequest, RoomUpdateRequest, SearchRoomsRequest
from .responses import (
    BookingItem,
    BookingListResponse,
    BookingResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    PaginationResponse,
    RoomBookingsResponse,
    RoomDetailResponse,
    RoomListResponse,
    RoomSearchResponse,
    RoomSummary,
)

__all__ = [
    "SearchRoomsRequest",
    "CreateBookingRequest",
    "RoomAvailabilityRequest",
    "RoomUpdateRequest",
    "BookingItem",
    "BookingListResponse",
    "BookingResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
    "PaginationResponse",
    "RoomBookingsResponse",
    "RoomDetailResponse",
    "RoomListResponse",
    "RoomSearchResponse",
    "RoomSummary",
]

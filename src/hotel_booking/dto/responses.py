"""Response DTOs for API endpoints."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


class PaginationResponse(BaseModel):
    """Pagination metadata shared by paged responses."""

    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_count: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    has_next_page: bool
    has_prev_page: bool


class RoomSummary(BaseModel):
    """A room as shown in listings and search results."""

    id: str
    title: str
    subtitle: str
    description: str
    image: str
    price: float = Field(..., description="Total for the stay in search results, nightly in listings")
    price_per_night: float | None = None
    nights: int | None = None
    amenities: list[str] = Field(default_factory=list)
    room_type: str
    capacity: int
    max_occupancy: int
    bed_type: str | None = None
    room_number: str | None = None
    hotel_id: str | None = None


class RoomSearchResponse(BaseModel):
    """Response DTO for room search."""

    success: bool = True
    data: list[RoomSummary]
    pagination: PaginationResponse
    search_criteria: dict[str, Any]
    degraded: bool = Field(
        False,
        description="True when bookings could not be checked and every room was withheld",
    )


class RoomListResponse(BaseModel):
    """Response DTO for the browse listing."""

    success: bool = True
    data: list[RoomSummary]
    pagination: PaginationResponse


class RoomDetailResponse(BaseModel):
    """Response DTO for a single room."""

    success: bool = True
    data: dict[str, Any]


class BookingItem(BaseModel):
    """A booking as returned to its owner."""

    id: str
    user_id: str
    room_id: str
    room_name: str | None = None
    check_in_date: date
    check_out_date: date
    guest_count: int
    guest_information: dict[str, Any] = Field(default_factory=dict)
    total_amount: float | None = None
    price_per_night: float | None = None
    confirmation_number: str | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    cancelled_at: datetime | None = None


class BookingResponse(BaseModel):
    """Response DTO for single-booking operations."""

    success: bool = True
    message: str
    data: BookingItem


class BookingListResponse(BaseModel):
    """Response DTO for a user's booking history."""

    success: bool = True
    data: list[BookingItem]


class RoomBookingsResponse(BaseModel):
    """Response DTO for a room's booking history."""

    success: bool = True
    data: list[BookingItem]
    pagination: PaginationResponse


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    size: int = Field(..., description="Number of live and not-yet-swept entries", ge=0)
    keys: list[str] = Field(default_factory=list)
    memory_usage: int | None = Field(None, description="Approximate bytes held, if it could be estimated")
    hits: int = Field(0, ge=0)
    misses: int = Field(0, ge=0)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    store_healthy: bool = Field(..., description="Whether the room store is reachable")

"""Request DTOs for API endpoints."""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


class SearchRoomsRequest(BaseModel):
    """Request DTO for room search.

    Date and destination checks happen in the search service so that a
    missing or inverted date comes back as a field-level validation error.
    """

    destination_city: str | None = Field(None, description="City to search in")
    check_in_date: date | None = Field(None, description="First night of the stay")
    check_out_date: date | None = Field(None, description="Departure day")
    guest_count: int | None = Field(None, description="Number of guests")
    room_count: int | None = Field(None, description="Number of rooms wanted")
    page: int = Field(1, description="1-based page number")
    limit: int = Field(10, description="Rooms per page")


class CreateBookingRequest(BaseModel):
    """Request DTO for creating a booking."""

    room_id: str = Field(..., description="Room to reserve", min_length=1)
    room_name: str | None = Field(None, description="Display name of the room")
    check_in_date: date | None = Field(None, description="First night of the stay")
    check_out_date: date | None = Field(None, description="Departure day")
    guest_count: int = Field(1, description="Number of guests")
    guest_information: dict[str, Any] | None = Field(
        None,
        description="Lead guest contact details (name, email, phone, ...)",
    )
    total_amount: float | None = Field(None, description="Quoted total price", ge=0.0)
    price_per_night: float | None = Field(None, description="Quoted nightly price", ge=0.0)


class RoomAvailabilityRequest(BaseModel):
    """Request DTO for opening or closing a room."""

    available: bool = Field(True, description="Whether the room can be booked")


class RoomUpdateRequest(BaseModel):
    """Request DTO for updating room details.

    Only the fields present in the body are changed.
    """

    name: str | None = Field(None, description="Display name")
    room_type: str | None = Field(None, description="Category such as 'standard' or 'suite'")
    price: float | None = Field(None, description="Nightly price")
    capacity: int | None = Field(None, description="Maximum number of guests")
    max_occupancy: int | None = Field(None, description="Hard occupancy limit")
    description: str | None = Field(None, description="Free-text description")
    bed_type: str | None = Field(None, description="Bed configuration")
    amenities: list[str] | None = Field(None, description="Amenity labels")
    images: list[str] | None = Field(None, description="Image URLs, cover image first")

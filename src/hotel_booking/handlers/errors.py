"""Mapping from application errors to HTTP errors."""

from fastapi import HTTPException, status

from hotel_booking.exceptions import (
    BookingValidationError,
    ConflictError,
    ForbiddenError,
    HotelBookingError,
    NotFoundError,
    RoomValidationError,
    StoreError,
)

_STATUS_CODES: dict[type[HotelBookingError], int] = {
    BookingValidationError: status.HTTP_400_BAD_REQUEST,
    RoomValidationError: status.HTTP_400_BAD_REQUEST,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(error: HotelBookingError) -> HTTPException:
    """Build the HTTPException for an application error (500 if unmapped)."""
    code = _STATUS_CODES.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=code, detail=str(error))

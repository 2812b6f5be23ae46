"""HTTP handlers for bookings."""

from dataclasses import asdict

from hotel_booking.dto import (
    BookingItem,
    BookingListResponse,
    BookingResponse,
    CreateBookingRequest,
    PaginationResponse,
    RoomBookingsResponse,
)
from hotel_booking.entities import BookingEntity, BookingStatus
from hotel_booking.exceptions import HotelBookingError
from hotel_booking.services import BookingService

from .errors import to_http_exception


def _booking_item(booking: BookingEntity) -> BookingItem:
    return BookingItem(
        id=booking.id,
        user_id=booking.user_id,
        room_id=booking.room_id,
        room_name=booking.room_name,
        check_in_date=booking.check_in,
        check_out_date=booking.check_out,
        guest_count=booking.guest_count,
        guest_information=booking.guest_information,
        total_amount=booking.total_amount,
        price_per_night=booking.price_per_night,
        confirmation_number=booking.confirmation_number,
        status=booking.status.value,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
        cancelled_at=booking.cancelled_at,
    )


class BookingHandler:
    """HTTP handlers for booking operations.

    The caller's identity arrives as a user id resolved by the API layer.
    """

    def __init__(self, booking_service: BookingService) -> None:
        self._bookings = booking_service

    async def create_booking(self, user_id: str, request: CreateBookingRequest) -> BookingResponse:
        """Handle POST /bookings requests."""
        try:
            booking = await self._bookings.create_booking(
                user_id=user_id,
                room_id=request.room_id,
                check_in=request.check_in_date,
                check_out=request.check_out_date,
                guest_information=request.guest_information,
                guest_count=request.guest_count,
                room_name=request.room_name,
                total_amount=request.total_amount,
                price_per_night=request.price_per_night,
            )
        except HotelBookingError as e:
            raise to_http_exception(e) from e
        return BookingResponse(message="Booking created successfully", data=_booking_item(booking))

    async def list_bookings(self, user_id: str) -> BookingListResponse:
        """Handle GET /bookings requests."""
        try:
            bookings = await self._bookings.list_user_bookings(user_id)
        except HotelBookingError as e:
            raise to_http_exception(e) from e
        return BookingListResponse(data=[_booking_item(booking) for booking in bookings])

    async def get_booking(self, user_id: str, booking_id: str) -> BookingResponse:
        """Handle GET /bookings/{booking_id} requests."""
        try:
            booking = await self._bookings.get_booking(user_id, booking_id)
        except HotelBookingError as e:
            raise to_http_exception(e) from e
        return BookingResponse(message="Booking found", data=_booking_item(booking))

    async def cancel_booking(self, user_id: str, booking_id: str) -> BookingResponse:
        """Handle POST /bookings/{booking_id}/cancel requests."""
        try:
            booking = await self._bookings.cancel_booking(user_id, booking_id)
        except HotelBookingError as e:
            raise to_http_exception(e) from e
        return BookingResponse(message="Booking cancelled successfully", data=_booking_item(booking))

    async def list_room_bookings(
        self,
        room_id: str,
        status: BookingStatus | None,
        page: int,
        limit: int,
    ) -> RoomBookingsResponse:
        """Handle GET /rooms/{room_id}/bookings requests."""
        try:
            history = await self._bookings.list_room_bookings(room_id, status, page, limit)
        except HotelBookingError as e:
            raise to_http_exception(e) from e
        return RoomBookingsResponse(
            data=[_booking_item(booking) for booking in history.bookings],
            pagination=PaginationResponse(**asdict(history.pagination)),
        )

"""Booking storage protocol."""

from collections.abc import Collection, Sequence
from typing import Protocol, runtime_checkable

from hotel_booking.entities import BookingEntity, BookingStatus


@runtime_checkable
class BookingStore(Protocol):
    """Protocol for booking storage backends."""

    async def query_bookings_for_rooms(
        self,
        room_ids: Sequence[str],
        statuses: Collection[BookingStatus],
    ) -> list[BookingEntity]:
        """Fetch every booking for the given rooms with one of ``statuses``.

        Callers keep ``room_ids`` within the store's "IN" cardinality limit.
        """
        ...

    async def get_booking(self, booking_id: str) -> BookingEntity | None:
        """Fetch a booking, or None if it does not exist."""
        ...

    async def create_booking(self, booking: BookingEntity) -> str:
        """Insert a booking.

        Returns:
            The new booking id
        """
        ...

    async def update_booking(self, booking: BookingEntity) -> None:
        """Replace a stored booking (matched by ``booking.id``)."""
        ...

    async def list_bookings_for_user(self, user_id: str) -> list[BookingEntity]:
        """Fetch every booking made by a user, in no particular order."""
        ...

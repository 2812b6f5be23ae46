"""Booking creation, cancellation and lookup.

Creating or cancelling a booking changes which rooms are free, so both
fire a write event that drops every cache entry depending on the room.
"""

import asyncio
import logging
import secrets
import string
from collections import defaultdict
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any

from hotel_booking.entities import (
    ACTIVE_STATUSES,
    BookingEntity,
    BookingStatus,
    InvalidationResult,
    Pagination,
    RoomBookingsPage,
)
from hotel_booking.exceptions import (
    BookingValidationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from hotel_booking.protocols import BookingStore, RoomStore

from .cache_service import CacheService
from .room_search_service import count_nights, dates_overlap, validate_stay

logger = logging.getLogger(__name__)

_CONFIRMATION_ALPHABET = string.ascii_uppercase + string.digits


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(bookings: list[BookingEntity]) -> list[BookingEntity]:
    return sorted(
        bookings,
        key=lambda b: b.created_at.timestamp() if b.created_at else 0.0,
        reverse=True,
    )


def generate_confirmation_number(now: datetime) -> str:
    """``HB`` + last six digits of the millisecond timestamp + four random characters."""
    timestamp = str(int(now.timestamp() * 1000))[-6:]
    suffix = "".join(secrets.choice(_CONFIRMATION_ALPHABET) for _ in range(4))
    return f"HB{timestamp}{suffix}"


class BookingService:
    """Owns booking writes and the cache invalidation they trigger.

    Creation re-checks for overlapping active bookings while holding a
    per-room lock, so two concurrent requests in this process cannot both
    book the same dates.
    """

    def __init__(
        self,
        room_store: RoomStore,
        booking_store: BookingStore,
        cache: CacheService,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._rooms = room_store
        self._bookings = booking_store
        self._cache = cache
        self._today = today
        self._now = now
        self._room_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def create_booking(
        self,
        user_id: str,
        room_id: str,
        check_in: date | None,
        check_out: date | None,
        guest_information: dict[str, Any] | None,
        guest_count: int = 1,
        room_name: str | None = None,
        total_amount: float | None = None,
        price_per_night: float | None = None,
    ) -> BookingEntity:
        """Create a confirmed booking.

        Args:
            user_id: The booking owner
            room_id: Room to reserve
            check_in: First night of the stay
            check_out: Departure day (not a night of the stay)
            guest_information: Contact details of the lead guest
            guest_count: Number of guests
            room_name: Display name, defaults to the room's name
            total_amount: Quoted total, defaults to nights * nightly price
            price_per_night: Quoted nightly price, defaults to the room's price

        Returns:
            The stored booking, with its id and confirmation number

        Raises:
            BookingValidationError: Missing fields or invalid dates
            NotFoundError: The room does not exist
            ConflictError: An active booking overlaps the stay
        """
        if not room_id or not guest_information:
            raise BookingValidationError("Missing required booking information")
        failure = validate_stay(check_in, check_out, self._today())
        if failure is not None:
            raise BookingValidationError(failure.message)
        if guest_count < 1:
            raise BookingValidationError("Guest count must be at least 1")

        room = await self._rooms.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room not found: {room_id}")
        if guest_count > room.capacity:
            raise BookingValidationError(f"Room {room_id} holds at most {room.capacity} guests")

        async with self._room_locks[room_id]:
            existing = await self._bookings.query_bookings_for_rooms([room_id], ACTIVE_STATUSES)
            if any(dates_overlap(b.check_in, b.check_out, check_in, check_out) for b in existing):
                raise ConflictError("Room is not available for the selected dates")

            now = self._now()
            nightly = price_per_night if price_per_night is not None else room.price
            booking = BookingEntity(
                user_id=user_id,
                room_id=room_id,
                check_in=check_in,
                check_out=check_out,
                status=BookingStatus.CONFIRMED,
                room_name=room_name or room.name,
                guest_count=guest_count,
                guest_information=dict(guest_information),
                total_amount=total_amount if total_amount is not None else nightly * count_nights(check_in, check_out),
                price_per_night=nightly,
                confirmation_number=generate_confirmation_number(now),
                created_at=now,
                updated_at=now,
            )
            booking_id = await self._bookings.create_booking(booking)

        booking = replace(booking, id=booking_id)
        logger.info("Booking %s created for room %s (%s)", booking_id, room_id, booking.confirmation_number)

        result = self.on_booking_created(room_id)
        if not result.ok:
            logger.warning("Cache invalidation failed after creating booking %s: %s", booking_id, result.error)
        return booking

    async def cancel_booking(self, user_id: str, booking_id: str) -> BookingEntity:
        """Cancel one of the caller's bookings.

        Raises:
            NotFoundError: The booking does not exist
            ForbiddenError: The booking belongs to someone else
            BookingValidationError: The booking is already cancelled
        """
        booking = await self._bookings.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking not found: {booking_id}")
        if booking.user_id != user_id:
            raise ForbiddenError("Not authorized to cancel this booking")
        if booking.status is BookingStatus.CANCELLED:
            raise BookingValidationError("Booking is already cancelled")

        now = self._now()
        cancelled = replace(booking, status=BookingStatus.CANCELLED, cancelled_at=now, updated_at=now)
        await self._bookings.update_booking(cancelled)
        logger.info("Booking %s cancelled", booking_id)

        result = self.on_booking_cancelled(booking.room_id)
        if not result.ok:
            logger.warning("Cache invalidation failed after cancelling booking %s: %s", booking_id, result.error)
        return cancelled

    async def get_booking(self, user_id: str, booking_id: str) -> BookingEntity:
        """Fetch one of the caller's bookings.

        Raises:
            NotFoundError: The booking does not exist
            ForbiddenError: The booking belongs to someone else
        """
        booking = await self._bookings.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking not found: {booking_id}")
        if booking.user_id != user_id:
            raise ForbiddenError("Not authorized to view this booking")
        return booking

    async def list_user_bookings(self, user_id: str) -> list[BookingEntity]:
        """The caller's bookings, most recently created first.

        Bookings stored without a room name get the room's current name.
        """
        bookings = await self._bookings.list_bookings_for_user(user_id)
        missing = {booking.room_id for booking in bookings if not booking.room_name}
        if missing:
            names = {room.id: room.name for room in await self._rooms.get_rooms_by_ids(sorted(missing))}
            bookings = [
                replace(booking, room_name=names[booking.room_id])
                if not booking.room_name and booking.room_id in names
                else booking
                for booking in bookings
            ]
        return _newest_first(bookings)

    async def list_room_bookings(
        self,
        room_id: str,
        status: BookingStatus | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> RoomBookingsPage:
        """One page of a room's bookings, most recently created first.

        Args:
            room_id: Room whose history to list
            status: Only bookings in this status. None lists every status.
            page: 1-based page number
            limit: Bookings per page

        Raises:
            NotFoundError: The room does not exist
        """
        if await self._rooms.get_room(room_id) is None:
            raise NotFoundError(f"Room not found: {room_id}")

        statuses = {status} if status is not None else set(BookingStatus)
        bookings = _newest_first(await self._bookings.query_bookings_for_rooms([room_id], statuses))
        offset = (page - 1) * limit
        return RoomBookingsPage(
            bookings=tuple(bookings[offset : offset + limit]),
            pagination=Pagination.build(page, limit, len(bookings)),
        )

    def on_booking_created(self, room_id: str) -> InvalidationResult:
        """Write event: a booking now occupies dates on ``room_id``."""
        return self._invalidate_room(room_id)

    def on_booking_cancelled(self, room_id: str) -> InvalidationResult:
        """Write event: dates on ``room_id`` were released."""
        return self._invalidate_room(room_id)

    def _invalidate_room(self, room_id: str) -> InvalidationResult:
        try:
            removed = self._cache.invalidate_by_room_id(room_id)
        except Exception as e:
            return InvalidationResult(room_id=room_id, error=str(e))
        return InvalidationResult(room_id=room_id, removed=removed)

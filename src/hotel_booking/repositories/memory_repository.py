"""In-memory implementations of RoomStore and BookingStore.

Used by the test suite and for local runs with ``STORE_BACKEND=memory``.
Both satisfy their protocols through structural typing.
"""

import uuid
from collections.abc import Collection, Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from hotel_booking.entities import BookingEntity, BookingStatus, RoomEntity
from hotel_booking.exceptions import NotFoundError


class InMemoryRoomRepository:
    """Room store backed by an insertion-ordered dict."""

    def __init__(self, rooms: Iterable[RoomEntity] = ()) -> None:
        self._rooms: dict[str, RoomEntity] = {}
        for room in rooms:
            self.add_room(room)

    def add_room(self, room: RoomEntity) -> str:
        """Insert or replace a room, assigning an id when it has none."""
        room_id = room.id or uuid.uuid4().hex
        self._rooms[room_id] = replace(room, id=room_id)
        return room_id

    async def query_available_rooms(
        self,
        min_capacity: int | None,
        page: int,
        page_size: int,
    ) -> tuple[list[RoomEntity], int]:
        matching = [
            room
            for room in self._rooms.values()
            if room.available and (min_capacity is None or room.capacity >= min_capacity)
        ]
        offset = (page - 1) * page_size
        return matching[offset : offset + page_size], len(matching)

    async def get_rooms_by_ids(self, room_ids: Sequence[str]) -> list[RoomEntity]:
        return [self._rooms[room_id] for room_id in room_ids if room_id in self._rooms]

    async def get_room(self, room_id: str) -> RoomEntity | None:
        return self._rooms.get(room_id)

    async def set_room_available(self, room_id: str, available: bool) -> bool:
        room = self._rooms.get(room_id)
        if room is None:
            return False
        self._rooms[room_id] = replace(room, available=available)
        return True

    async def update_room(self, room_id: str, changes: Mapping[str, Any]) -> RoomEntity | None:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        self._rooms[room_id] = replace(room, **changes)
        return self._rooms[room_id]

    async def health_check(self) -> bool:
        return True


class InMemoryBookingRepository:
    """Booking store backed by a dict keyed by booking id."""

    def __init__(self, bookings: Iterable[BookingEntity] = ()) -> None:
        self._bookings: dict[str, BookingEntity] = {}
        for booking in bookings:
            self._insert(booking)

    def _insert(self, booking: BookingEntity) -> str:
        booking_id = booking.id or uuid.uuid4().hex
        self._bookings[booking_id] = replace(booking, id=booking_id)
        return booking_id

    async def query_bookings_for_rooms(
        self,
        room_ids: Sequence[str],
        statuses: Collection[BookingStatus],
    ) -> list[BookingEntity]:
        wanted = set(room_ids)
        return [
            booking
            for booking in self._bookings.values()
            if booking.room_id in wanted and booking.status in statuses
        ]

    async def get_booking(self, booking_id: str) -> BookingEntity | None:
        return self._bookings.get(booking_id)

    async def create_booking(self, booking: BookingEntity) -> str:
        return self._insert(booking)

    async def update_booking(self, booking: BookingEntity) -> None:
        if booking.id is None or booking.id not in self._bookings:
            raise NotFoundError(f"Booking not found: {booking.id}")
        self._bookings[booking.id] = booking

    async def list_bookings_for_user(self, user_id: str) -> list[BookingEntity]:
        return [booking for booking in self._bookings.values() if booking.user_id == user_id]

"""Redis implementations of RoomStore and BookingStore.

Rooms and bookings are stored as JSON documents with the field names the
web client uses (``checkInDate``, ``roomId``, ...). Layout, under a
configurable namespace:

- ``{ns}:room:{id}``: room document
- ``{ns}:rooms``: sorted set of room ids scored by insertion sequence
- ``{ns}:booking:{id}``: booking document
- ``{ns}:room_bookings:{room_id}``: set of booking ids per room
- ``{ns}:user_bookings:{user_id}``: set of booking ids per user

Redis cannot filter on document fields, so availability and capacity are
applied in process after fetching the index.
"""

import functools
import json
import uuid
from collections.abc import Collection, Mapping, Sequence
from dataclasses import replace
from datetime import date, datetime
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from hotel_booking.config import get_redis_client
from hotel_booking.entities import BookingEntity, BookingStatus, RoomEntity
from hotel_booking.exceptions import NotFoundError, StoreError


def _store_errors(func):
    """Re-raise Redis failures as StoreError."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except RedisError as e:
            raise StoreError(f"Redis {func.__name__} failed: {e}") from e

    return wrapper


def room_to_document(room: RoomEntity) -> dict[str, Any]:
    return {
        "name": room.name,
        "type": room.room_type,
        "price": room.price,
        "capacity": room.capacity,
        "maxOccupancy": room.max_occupancy,
        "available": room.available,
        "description": room.description,
        "bedType": room.bed_type,
        "roomNumber": room.room_number,
        "hotelId": room.hotel_id,
        "amenities": list(room.amenities),
        "images": list(room.images),
    }


def room_from_document(room_id: str, doc: dict[str, Any]) -> RoomEntity:
    return RoomEntity(
        id=room_id,
        name=doc.get("name") or doc.get("title") or "",
        room_type=doc.get("type") or "standard",
        price=float(doc.get("price", 0)),
        capacity=int(doc.get("capacity", 1)),
        available=bool(doc.get("available", True)),
        max_occupancy=doc.get("maxOccupancy"),
        description=doc.get("description") or "",
        bed_type=doc.get("bedType"),
        room_number=doc.get("roomNumber"),
        hotel_id=doc.get("hotelId"),
        amenities=tuple(doc.get("amenities") or ()),
        images=tuple(doc.get("images") or ()),
    )


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def booking_to_document(booking: BookingEntity) -> dict[str, Any]:
    return {
        "userId": booking.user_id,
        "roomId": booking.room_id,
        "roomName": booking.room_name,
        "checkInDate": booking.check_in.isoformat(),
        "checkOutDate": booking.check_out.isoformat(),
        "guestCount": booking.guest_count,
        "guestInformation": booking.guest_information,
        "totalAmount": booking.total_amount,
        "pricePerNight": booking.price_per_night,
        "confirmationNumber": booking.confirmation_number,
        "status": booking.status.value,
        "createdAt": _iso(booking.created_at),
        "updatedAt": _iso(booking.updated_at),
        "cancelledAt": _iso(booking.cancelled_at),
    }


def booking_from_document(booking_id: str, doc: dict[str, Any]) -> BookingEntity:
    return BookingEntity(
        id=booking_id,
        user_id=doc["userId"],
        room_id=doc["roomId"],
        check_in=date.fromisoformat(doc["checkInDate"][:10]),
        check_out=date.fromisoformat(doc["checkOutDate"][:10]),
        status=BookingStatus(doc.get("status", BookingStatus.CONFIRMED.value)),
        room_name=doc.get("roomName"),
        guest_count=int(doc.get("guestCount") or 1),
        guest_information=doc.get("guestInformation") or {},
        total_amount=doc.get("totalAmount"),
        price_per_night=doc.get("pricePerNight"),
        confirmation_number=doc.get("confirmationNumber"),
        created_at=_parse_datetime(doc.get("createdAt")),
        updated_at=_parse_datetime(doc.get("updatedAt")),
        cancelled_at=_parse_datetime(doc.get("cancelledAt")),
    )


class RedisRoomRepository:
    """Redis implementation of the RoomStore protocol."""

    def __init__(self, redis_client: redis.Redis | None = None, namespace: str = "hotel") -> None:
        """Initialize the repository.

        Args:
            redis_client: asyncio Redis client with ``decode_responses=True``.
                If None, creates default.
            namespace: Key prefix shared with RedisBookingRepository.
        """
        self._client = redis_client or get_redis_client()
        self._ns = namespace

    @classmethod
    def create(cls, redis_client: redis.Redis | None = None, namespace: str = "hotel") -> "RedisRoomRepository":
        """Factory method to create RedisRoomRepository with defaults."""
        return cls(redis_client=redis_client, namespace=namespace)

    def _room_key(self, room_id: str) -> str:
        return f"{self._ns}:room:{room_id}"

    @property
    def _index_key(self) -> str:
        return f"{self._ns}:rooms"

    async def _load(self, room_ids: Sequence[str]) -> list[RoomEntity]:
        if not room_ids:
            return []
        docs = await self._client.mget([self._room_key(room_id) for room_id in room_ids])
        return [
            room_from_document(room_id, json.loads(doc))
            for room_id, doc in zip(room_ids, docs)
            if doc is not None
        ]

    @_store_errors
    async def add_room(self, room: RoomEntity) -> str:
        """Insert or replace a room, keeping its original position in the index."""
        room_id = room.id or uuid.uuid4().hex
        sequence = await self._client.incr(f"{self._index_key}:seq")
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.set(self._room_key(room_id), json.dumps(room_to_document(room)))
            pipe.zadd(self._index_key, {room_id: sequence}, nx=True)
            await pipe.execute()
        return room_id

    @_store_errors
    async def query_available_rooms(
        self,
        min_capacity: int | None,
        page: int,
        page_size: int,
    ) -> tuple[list[RoomEntity], int]:
        room_ids = await self._client.zrange(self._index_key, 0, -1)
        matching = [
            room
            for room in await self._load(room_ids)
            if room.available and (min_capacity is None or room.capacity >= min_capacity)
        ]
        offset = (page - 1) * page_size
        return matching[offset : offset + page_size], len(matching)

    @_store_errors
    async def get_rooms_by_ids(self, room_ids: Sequence[str]) -> list[RoomEntity]:
        return await self._load(list(room_ids))

    @_store_errors
    async def get_room(self, room_id: str) -> RoomEntity | None:
        rooms = await self._load([room_id])
        return rooms[0] if rooms else None

    @_store_errors
    async def set_room_available(self, room_id: str, available: bool) -> bool:
        raw = await self._client.get(self._room_key(room_id))
        if raw is None:
            return False
        doc = json.loads(raw)
        doc["available"] = available
        await self._client.set(self._room_key(room_id), json.dumps(doc))
        return True

    @_store_errors
    async def update_room(self, room_id: str, changes: Mapping[str, Any]) -> RoomEntity | None:
        raw = await self._client.get(self._room_key(room_id))
        if raw is None:
            return None
        doc = json.loads(raw)
        room = replace(room_from_document(room_id, doc), **changes)
        doc.update(room_to_document(room))
        await self._client.set(self._room_key(room_id), json.dumps(doc))
        return room

    async def health_check(self) -> bool:
        """Check if Redis is accessible."""
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client


class RedisBookingRepository:
    """Redis implementation of the BookingStore protocol."""

    def __init__(self, redis_client: redis.Redis | None = None, namespace: str = "hotel") -> None:
        self._client = redis_client or get_redis_client()
        self._ns = namespace

    @classmethod
    def create(cls, redis_client: redis.Redis | None = None, namespace: str = "hotel") -> "RedisBookingRepository":
        """Factory method to create RedisBookingRepository with defaults."""
        return cls(redis_client=redis_client, namespace=namespace)

    def _booking_key(self, booking_id: str) -> str:
        return f"{self._ns}:booking:{booking_id}"

    async def _load(self, booking_ids: Sequence[str]) -> list[BookingEntity]:
        if not booking_ids:
            return []
        docs = await self._client.mget([self._booking_key(booking_id) for booking_id in booking_ids])
        return [
            booking_from_document(booking_id, json.loads(doc))
            for booking_id, doc in zip(booking_ids, docs)
            if doc is not None
        ]

    @_store_errors
    async def query_bookings_for_rooms(
        self,
        room_ids: Sequence[str],
        statuses: Collection[BookingStatus],
    ) -> list[BookingEntity]:
        booking_ids: list[str] = []
        for room_id in room_ids:
            booking_ids.extend(sorted(await self._client.smembers(f"{self._ns}:room_bookings:{room_id}")))
        return [booking for booking in await self._load(booking_ids) if booking.status in statuses]

    @_store_errors
    async def get_booking(self, booking_id: str) -> BookingEntity | None:
        bookings = await self._load([booking_id])
        return bookings[0] if bookings else None

    @_store_errors
    async def create_booking(self, booking: BookingEntity) -> str:
        booking_id = booking.id or uuid.uuid4().hex
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.set(self._booking_key(booking_id), json.dumps(booking_to_document(booking)))
            pipe.sadd(f"{self._ns}:room_bookings:{booking.room_id}", booking_id)
            pipe.sadd(f"{self._ns}:user_bookings:{booking.user_id}", booking_id)
            await pipe.execute()
        return booking_id

    @_store_errors
    async def update_booking(self, booking: BookingEntity) -> None:
        if booking.id is None or not await self._client.exists(self._booking_key(booking.id)):
            raise NotFoundError(f"Booking not found: {booking.id}")
        await self._client.set(self._booking_key(booking.id), json.dumps(booking_to_document(booking)))

    @_store_errors
    async def list_bookings_for_user(self, user_id: str) -> list[BookingEntity]:
        booking_ids = sorted(await self._client.smembers(f"{self._ns}:user_bookings:{user_id}"))
        return await self._load(booking_ids)

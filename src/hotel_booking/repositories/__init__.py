"""Repository layer for data access.

This layer holds the room and booking stores behind the protocols in
``hotel_booking.protocols``. Any class implementing the required methods
satisfies the protocol; no inheritance is involved.
"""

from hotel_booking.protocols import BookingStore, RoomStore

from .memory_repository import InMemoryBookingRepository, InMemoryRoomRepository
from .redis_repository import RedisBookingRepository, RedisRoomRepository

__all__ = [
    "BookingStore",
    "RoomStore",
    "InMemoryBookingRepository",
    "InMemoryRoomRepository",
    "RedisBookingRepository",
    "RedisRoomRepository",
]

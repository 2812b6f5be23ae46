"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .booking_handler import BookingHandler
from .cache_handler import CacheHandler
from .room_handler import RoomHandler

__all__ = [
    "BookingHandler",
    "CacheHandler",
    "RoomHandler",
]

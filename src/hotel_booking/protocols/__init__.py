"""Protocol interfaces for swappable implementations.

Services depend on these protocols, never on a concrete store, so the
document database can be swapped (Redis, in-memory, ...) and tests can
use simple fakes.
"""

from .booking_store import BookingStore
from .room_store import RoomStore

__all__ = [
    "BookingStore",
    "RoomStore",
]

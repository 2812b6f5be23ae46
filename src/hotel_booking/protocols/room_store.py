"""Room storage protocol.

Defines the narrow read interface room search needs from the document
store, plus the writes used by room administration.

Implementations can include:
- Redis (default)
- In-memory (tests, local runs)
- Any document database with equality filters and offset pagination
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from hotel_booking.entities import RoomEntity


@runtime_checkable
class RoomStore(Protocol):
    """Protocol for room storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.

    Example:
        ```python
        from hotel_booking.protocols import RoomStore

        store: RoomStore = RedisRoomRepository.create()
        store: RoomStore = InMemoryRoomRepository()
        ```
    """

    async def query_available_rooms(
        self,
        min_capacity: int | None,
        page: int,
        page_size: int,
    ) -> tuple[list[RoomEntity], int]:
        """Fetch one page of rooms open for booking.

        Args:
            min_capacity: Minimum guest capacity, or None for no filter.
                Stores that cannot filter on capacity may ignore it.
            page: 1-based page number
            page_size: Rooms per page

        Returns:
            Tuple of (rooms on the page in store order, total matching rooms)
        """
        ...

    async def get_rooms_by_ids(self, room_ids: Sequence[str]) -> list[RoomEntity]:
        """Fetch rooms by id, skipping ids that do not exist."""
        ...

    async def get_room(self, room_id: str) -> RoomEntity | None:
        """Fetch a single room, or None if it does not exist."""
        ...

    async def set_room_available(self, room_id: str, available: bool) -> bool:
        """Open or close a room for booking.

        Returns:
            True if the room exists and was updated, False otherwise
        """
        ...

    async def update_room(self, room_id: str, changes: Mapping[str, Any]) -> RoomEntity | None:
        """Apply field changes to a room.

        Args:
            room_id: Room to update
            changes: New values keyed by ``RoomEntity`` field name

        Returns:
            The updated room, or None if it does not exist
        """
        ...

    async def health_check(self) -> bool:
        """Check if the store is reachable."""
        ...

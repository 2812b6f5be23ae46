"""Room catalogue: browse listing, details, updates and availability toggling."""

import logging
from collections.abc import Mapping
from typing import Any

from hotel_booking.entities import Pagination, RoomEntity, RoomListingPage
from hotel_booking.exceptions import NotFoundError, RoomValidationError
from hotel_booking.protocols import RoomStore

from .cache_service import CacheService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "room_type",
        "price",
        "capacity",
        "max_occupancy",
        "description",
        "bed_type",
        "amenities",
        "images",
    }
)


class RoomService:
    """Reads and administers rooms, keeping the cache consistent."""

    def __init__(self, room_store: RoomStore, cache: CacheService) -> None:
        self._rooms = room_store
        self._cache = cache

    async def list_rooms(self, page: int, limit: int) -> RoomListingPage:
        """Return one page of rooms open for booking.

        The page is cached and tagged with the rooms it shows. The total
        count is cached separately so page numbers stay stable while a
        user pages through the listing.

        Raises:
            StoreError: If the room store fails
        """
        cached = self._cache.get_cached_room_page(page, limit)
        if cached is not None:
            return cached

        mark = self._cache.write_mark()
        rooms, total_count = await self._rooms.query_available_rooms(None, page, limit)

        cached_total = self._cache.get_cached_total_count()
        if cached_total is None:
            self._cache.cache_total_count(total_count, since=mark)
        else:
            total_count = cached_total

        listing = RoomListingPage(
            rooms=tuple(rooms),
            pagination=Pagination.build(page, limit, total_count),
        )
        self._cache.cache_room_page(page, limit, listing, room_ids=[room.id for room in rooms], since=mark)
        logger.info("Returning %d rooms for page %d", len(rooms), page)
        return listing

    async def get_room(self, room_id: str) -> RoomEntity:
        """Fetch one room.

        Raises:
            NotFoundError: If the room does not exist
        """
        room = await self._rooms.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room not found: {room_id}")
        return room

    async def set_room_availability(self, room_id: str, available: bool) -> RoomEntity:
        """Open or close a room and drop every cached room result.

        Raises:
            NotFoundError: If the room does not exist
        """
        if not await self._rooms.set_room_available(room_id, available):
            raise NotFoundError(f"Room not found: {room_id}")
        self._cache.invalidate_room_caches()
        logger.info("Room %s marked %s", room_id, "available" if available else "unavailable")
        return await self.get_room(room_id)

    async def update_room(self, room_id: str, changes: Mapping[str, Any]) -> RoomEntity:
        """Update a room's details and drop every cached room result.

        Unknown fields are ignored. Changing ``capacity`` without giving
        ``max_occupancy`` moves the occupancy limit along with it.

        Raises:
            RoomValidationError: No updatable field given, or a bad value
            NotFoundError: If the room does not exist
        """
        updates = {name: value for name, value in changes.items() if name in UPDATABLE_FIELDS}
        if not updates:
            raise RoomValidationError("No valid fields to update")
        if "price" in updates and (updates["price"] is None or updates["price"] <= 0):
            raise RoomValidationError("Price must be greater than 0")
        if "capacity" in updates:
            if updates["capacity"] is None or updates["capacity"] < 1:
                raise RoomValidationError("Capacity must be at least 1")
            updates.setdefault("max_occupancy", updates["capacity"])
        for name in ("amenities", "images"):
            if name in updates:
                updates[name] = tuple(updates[name] or ())

        room = await self._rooms.update_room(room_id, updates)
        if room is None:
            raise NotFoundError(f"Room not found: {room_id}")
        self._cache.invalidate_room_caches()
        logger.info("Room %s updated (%s)", room_id, ", ".join(sorted(updates)))
        return room

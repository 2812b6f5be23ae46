"""Room availability resolution for date-range searches.

A search fetches one page of candidate rooms, loads every active booking
for those rooms in batched queries, drops rooms whose bookings overlap the
requested stay and prices the rest. Results and intermediate availability
maps are memoized in the CacheService.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Callable, Iterator, Sequence
from datetime import date, timedelta

from hotel_booking.config import settings
from hotel_booking.entities import (
    ACTIVE_STATUSES,
    AvailableRoom,
    BookingEntity,
    Pagination,
    ResolutionFailure,
    RoomSearchPage,
    SearchOutcome,
    SearchQuery,
    ValidationFailure,
)
from hotel_booking.protocols import BookingStore, RoomStore

from .cache_keys import SearchKey
from .cache_service import CacheService

logger = logging.getLogger(__name__)


def dates_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Whether two half-open ranges ``[start, end)`` share at least one day.

    A stay ending on day X and another starting on day X do not overlap.
    """
    return start1 < end2 and end1 > start2


def count_nights(check_in: date, check_out: date) -> int:
    """Number of nights in a stay, rounding partial days up."""
    return math.ceil((check_out - check_in) / timedelta(days=1))


def validate_stay(check_in: date | None, check_out: date | None, today: date) -> ValidationFailure | None:
    """Check a stay's dates: both present, not in the past, check-out after check-in."""
    if check_in is None:
        return ValidationFailure("check_in_date", "Check-in date is required")
    if check_out is None:
        return ValidationFailure("check_out_date", "Check-out date is required")
    if check_in < today:
        return ValidationFailure("check_in_date", "Check-in date cannot be in the past")
    if check_out <= check_in:
        return ValidationFailure("check_out_date", "Check-out date must be after check-in date")
    return None


def validate_query(query: SearchQuery, today: date, max_page_size: int) -> ValidationFailure | None:
    """Reject a search query before any store access.

    Returns:
        ValidationFailure naming the offending field, or None if valid
    """
    if not query.destination_city or not query.destination_city.strip():
        return ValidationFailure("destination_city", "Destination city is required")
    failure = validate_stay(query.check_in, query.check_out, today)
    if failure is not None:
        return failure
    if query.guest_count is not None and query.guest_count < 1:
        return ValidationFailure("guest_count", "Guest count must be at least 1")
    if query.page < 1:
        return ValidationFailure("page", "Page must be at least 1")
    if not 1 <= query.limit <= max_page_size:
        return ValidationFailure("limit", f"Limit must be between 1 and {max_page_size}")
    return None


def _chunks(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class RoomSearchService:
    """Resolves which rooms are free for a stay.

    Depends on the RoomStore and BookingStore protocols and on an explicitly
    injected CacheService instance.

    Example:
        ```python
        service = RoomSearchService(
            room_store=InMemoryRoomRepository(rooms),
            booking_store=InMemoryBookingRepository(),
            cache=CacheService.create(),
        )
        outcome = await service.search_available_rooms(query)
        if isinstance(outcome, RoomSearchPage):
            ...
        ```
    """

    def __init__(
        self,
        room_store: RoomStore,
        booking_store: BookingStore,
        cache: CacheService,
        chunk_size: int | None = None,
        max_page_size: int | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the search service.

        Args:
            room_store: Candidate room source (required).
            booking_store: Booking source for conflict checks (required).
            cache: Shared cache instance (required).
            chunk_size: Max room ids per booking query. Defaults to settings.
            max_page_size: Largest accepted page size. Defaults to settings.
            today: Returns the current date (injectable for tests).
        """
        self._rooms = room_store
        self._bookings = booking_store
        self._cache = cache
        self._chunk_size = chunk_size or settings.booking_query_chunk_size
        self._max_page_size = max_page_size or settings.max_page_size
        self._today = today

    async def search_available_rooms(self, query: SearchQuery) -> SearchOutcome:
        """Find the rooms on one page that are free for the requested stay.

        Business logic:
        1. Validate the query
        2. Return the cached page for identical criteria if present
        3. Fetch a page of candidate rooms and filter by capacity
        4. Batch-check bookings for conflicts (fail closed on error)
        5. Price the available rooms and build pagination metadata
        6. Cache the page, tagged with every candidate room

        Args:
            query: The search criteria and pagination

        Returns:
            RoomSearchPage on success (possibly empty), ValidationFailure for a
            bad query, ResolutionFailure if candidate rooms could not be fetched
        """
        failure = validate_query(query, self._today(), self._max_page_size)
        if failure is not None:
            logger.info("Rejected room search: %s", failure.message)
            return failure

        key = SearchKey.of(
            query.destination_city,
            query.check_in,
            query.check_out,
            query.guest_count,
            query.room_count,
            query.page,
            query.limit,
        )
        cached = self._cache.get_cached_search_results(key)
        if cached is not None:
            return cached

        mark = self._cache.write_mark()
        try:
            rooms, total_count = await self._rooms.query_available_rooms(
                query.guest_count, query.page, query.limit
            )
        except Exception:
            logger.exception("Failed to fetch candidate rooms for page %d", query.page)
            return ResolutionFailure("Failed to search available rooms")

        # Stores that cannot filter on capacity natively return everything
        candidates = [
            room for room in rooms if query.guest_count is None or room.capacity >= query.guest_count
        ]
        logger.debug("%d of %d rooms passed capacity filter", len(candidates), len(rooms))

        availability, degraded = await self._check_availability(
            [room.id for room in candidates], query.check_in, query.check_out, since=mark
        )

        nights = count_nights(query.check_in, query.check_out)
        available = tuple(
            AvailableRoom(
                room=room,
                nights=nights,
                price_per_night=room.price,
                total_price=room.price * nights,
            )
            for room in candidates
            if availability.get(room.id, False)
        )

        result = RoomSearchPage(
            rooms=available,
            pagination=Pagination.build(query.page, query.limit, total_count),
            degraded=degraded,
        )
        if not degraded:
            self._cache.cache_search_results(key, result, [room.id for room in rooms], since=mark)

        logger.info("Returning %d available rooms for page %d", len(available), query.page)
        return result

    async def check_batch_room_availability(
        self,
        room_ids: Sequence[str],
        check_in: date,
        check_out: date,
    ) -> dict[str, bool]:
        """Map each room id to whether it is free for ``[check_in, check_out)``.

        If the booking store fails, every room maps to False.
        """
        results, _ = await self._check_availability(
            room_ids, check_in, check_out, since=self._cache.write_mark()
        )
        return results

    async def _check_availability(
        self,
        room_ids: Sequence[str],
        check_in: date,
        check_out: date,
        since: int | None = None,
    ) -> tuple[dict[str, bool], bool]:
        """Availability map plus a flag telling whether it is a fail-closed fallback.

        ``since`` is the cache write mark taken before the stores were read.
        """
        if not room_ids:
            return {}, False

        cached = self._cache.get_cached_availability(room_ids, check_in, check_out)
        if cached is not None:
            return dict(cached), False

        try:
            bookings: list[BookingEntity] = []
            for chunk in _chunks(list(room_ids), self._chunk_size):
                bookings.extend(await self._bookings.query_bookings_for_rooms(chunk, ACTIVE_STATUSES))
        except Exception:
            logger.exception(
                "Batch availability check failed; treating %d rooms as unavailable", len(room_ids)
            )
            return {room_id: False for room_id in room_ids}, True

        by_room: dict[str, list[BookingEntity]] = defaultdict(list)
        for booking in bookings:
            if booking.is_active:
                by_room[booking.room_id].append(booking)

        results = {
            room_id: not any(
                dates_overlap(booking.check_in, booking.check_out, check_in, check_out)
                for booking in by_room.get(room_id, ())
            )
            for room_id in room_ids
        }
        self._cache.cache_availability(room_ids, check_in, check_out, results, since=since)
        return results, False

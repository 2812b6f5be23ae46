"""
Tests for room availability resolution.
"""

import asyncio
from datetime import date

import pytest
from conftest import TODAY, CountingBookingRepository, make_booking, make_room

from hotel_booking.entities import (
    BookingStatus,
    ResolutionFailure,
    RoomSearchPage,
    SearchQuery,
    ValidationFailure,
)
from hotel_booking.exceptions import StoreError
from hotel_booking.repositories import InMemoryRoomRepository
from hotel_booking.services import BookingService, RoomSearchService
from hotel_booking.services.room_search_service import count_nights, dates_overlap, validate_query


def query(check_in=date(2025, 6, 5), check_out=date(2025, 6, 8), **kwargs) -> SearchQuery:
    kwargs.setdefault("destination_city", "Lisbon")
    return SearchQuery(check_in=check_in, check_out=check_out, **kwargs)


def ids(page: RoomSearchPage) -> list[str]:
    return [item.room.id for item in page.rooms]


class PausingBookingRepository(CountingBookingRepository):
    """Holds its first query open after reading, until released."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def query_bookings_for_rooms(self, room_ids, statuses):
        result = await super().query_bookings_for_rooms(room_ids, statuses)
        if not self.entered.is_set():
            self.entered.set()
            await self.release.wait()
        return result


# Pure helpers


def test_adjacent_stays_do_not_overlap():
    """Test a checkout on day X and a check-in on day X do not conflict."""
    assert not dates_overlap(date(2025, 6, 1), date(2025, 6, 5), date(2025, 6, 5), date(2025, 6, 8))
    assert not dates_overlap(date(2025, 6, 8), date(2025, 6, 10), date(2025, 6, 5), date(2025, 6, 8))


def test_one_shared_night_overlaps():
    assert dates_overlap(date(2025, 6, 1), date(2025, 6, 5), date(2025, 6, 4), date(2025, 6, 8))
    assert dates_overlap(date(2025, 6, 1), date(2025, 6, 10), date(2025, 6, 4), date(2025, 6, 5))


def test_count_nights():
    """Test three nights between Jan 1 and Jan 4."""
    assert count_nights(date(2025, 1, 1), date(2025, 1, 4)) == 3
    assert count_nights(date(2025, 1, 1), date(2025, 1, 2)) == 1


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"destination_city": None}, "destination_city"),
        ({"destination_city": "  "}, "destination_city"),
        ({"check_in": None}, "check_in_date"),
        ({"check_out": None}, "check_out_date"),
        ({"check_in": date(2025, 4, 30)}, "check_in_date"),
        ({"check_out": date(2025, 6, 5)}, "check_out_date"),
        ({"check_out": date(2025, 6, 1)}, "check_out_date"),
        ({"guest_count": 0}, "guest_count"),
        ({"page": 0}, "page"),
        ({"limit": 51}, "limit"),
    ],
)
def test_validate_query_rejects(overrides, field):
    failure = validate_query(query(**overrides), TODAY, max_page_size=50)
    assert isinstance(failure, ValidationFailure)
    assert failure.field == field


def test_validate_query_accepts_check_in_today():
    assert validate_query(query(check_in=TODAY, check_out=date(2025, 5, 2)), TODAY, 50) is None


# Search


@pytest.mark.asyncio
async def test_invalid_query_never_touches_stores(search_service, room_store, booking_store):
    outcome = await search_service.search_available_rooms(query(check_in=date(2025, 1, 1)))
    assert isinstance(outcome, ValidationFailure)
    assert room_store.query_calls == 0
    assert booking_store.batches == []


@pytest.mark.asyncio
async def test_returns_open_rooms_with_pricing(search_service):
    """Test closed rooms are skipped and prices cover every night."""
    outcome = await search_service.search_available_rooms(query())

    assert isinstance(outcome, RoomSearchPage)
    assert ids(outcome) == ["R1", "R2", "R3", "R4"]
    first = outcome.rooms[0]
    assert first.nights == 3
    assert first.price_per_night == 100.0
    assert first.total_price == 300.0
    assert outcome.degraded is False


@pytest.mark.asyncio
async def test_capacity_filter(search_service):
    outcome = await search_service.search_available_rooms(query(guest_count=3))
    assert ids(outcome) == ["R3"]
    assert outcome.pagination.total_count == 1


@pytest.mark.asyncio
async def test_capacity_filtered_in_process_when_store_ignores_it(room_store, booking_store, cache):
    """Test rooms too small are dropped even if the store returns them."""

    class NoCapacityFilter(type(room_store)):
        async def query_available_rooms(self, min_capacity, page, page_size):
            return await super().query_available_rooms(None, page, page_size)

    store = NoCapacityFilter([make_room("S1", capacity=1), make_room("S2", capacity=4)])
    service = RoomSearchService(store, booking_store, cache, today=lambda: TODAY)

    outcome = await service.search_available_rooms(query(guest_count=2))
    assert ids(outcome) == ["S2"]


@pytest.mark.asyncio
async def test_conflicting_booking_hides_room(search_service, booking_store):
    """Test an overlapping confirmed booking removes the room."""
    await booking_store.create_booking(make_booking("R1", date(2025, 6, 1), date(2025, 6, 6)))
    outcome = await search_service.search_available_rooms(query())
    assert "R1" not in ids(outcome)


@pytest.mark.asyncio
async def test_adjacent_booking_keeps_room(search_service, booking_store):
    """Test a booking ending on the requested check-in day is not a conflict."""
    await booking_store.create_booking(make_booking("R1", date(2025, 6, 1), date(2025, 6, 5)))
    outcome = await search_service.search_available_rooms(query())
    assert "R1" in ids(outcome)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "blocks"),
    [
        (BookingStatus.CONFIRMED, True),
        (BookingStatus.CHECKED_IN, True),
        (BookingStatus.CANCELLED, False),
        (BookingStatus.COMPLETED, False),
        (BookingStatus.PENDING, False),
    ],
)
async def test_only_active_statuses_block(search_service, booking_store, status, blocks):
    await booking_store.create_booking(make_booking("R2", date(2025, 6, 4), date(2025, 6, 9), status=status))
    outcome = await search_service.search_available_rooms(query())
    assert ("R2" not in ids(outcome)) is blocks


@pytest.mark.asyncio
async def test_pagination_metadata(search_service):
    outcome = await search_service.search_available_rooms(query(page=2, limit=3))

    assert ids(outcome) == ["R4"]
    pagination = outcome.pagination
    assert pagination.current_page == 2
    assert pagination.total_pages == 2
    assert pagination.total_count == 4
    assert pagination.limit == 3
    assert pagination.has_next_page is False
    assert pagination.has_prev_page is True


@pytest.mark.asyncio
async def test_no_match_is_empty_success(search_service, booking_store):
    """Test zero available rooms is a valid empty page, not a failure."""
    for room_id in ("R1", "R2", "R3", "R4"):
        await booking_store.create_booking(make_booking(room_id, date(2025, 6, 1), date(2025, 6, 30)))

    outcome = await search_service.search_available_rooms(query())
    assert isinstance(outcome, RoomSearchPage)
    assert outcome.rooms == ()
    assert outcome.degraded is False


@pytest.mark.asyncio
async def test_repeat_query_is_served_from_cache(search_service, room_store, booking_store):
    """Test an identical query within the TTL returns the same page without store calls."""
    first = await search_service.search_available_rooms(query(guest_count=2))
    calls = (room_store.query_calls, len(booking_store.batches))

    second = await search_service.search_available_rooms(query(guest_count=2))

    assert second == first
    assert (room_store.query_calls, len(booking_store.batches)) == calls


@pytest.mark.asyncio
async def test_search_cache_expires(search_service, room_store, clock):
    await search_service.search_available_rooms(query())
    clock.advance(61)
    await search_service.search_available_rooms(query())
    assert room_store.query_calls == 2


@pytest.mark.asyncio
async def test_candidate_fetch_failure_is_resolution_failure(search_service, room_store):
    """Test a room store failure is reported, not framed as "no rooms"."""
    room_store.fail_with = StoreError("down")
    outcome = await search_service.search_available_rooms(query())
    assert isinstance(outcome, ResolutionFailure)


@pytest.mark.asyncio
async def test_booking_check_failure_fails_closed(search_service, booking_store, room_store):
    """Test every candidate is withheld when bookings cannot be read, and nothing is cached."""
    booking_store.fail_with = StoreError("down")

    outcome = await search_service.search_available_rooms(query())
    assert isinstance(outcome, RoomSearchPage)
    assert outcome.rooms == ()
    assert outcome.degraded is True

    booking_store.fail_with = None
    retry = await search_service.search_available_rooms(query())
    assert ids(retry) == ["R1", "R2", "R3", "R4"]
    assert room_store.query_calls == 2


@pytest.mark.asyncio
async def test_batch_check_reports_every_room_unavailable_on_error(search_service, booking_store):
    booking_store.fail_with = RuntimeError("boom")
    result = await search_service.check_batch_room_availability(
        ["R1", "R2"], date(2025, 6, 5), date(2025, 6, 8)
    )
    assert result == {"R1": False, "R2": False}


@pytest.mark.asyncio
async def test_booking_queries_are_chunked(booking_store, cache):
    """Test large candidate sets respect the store's IN-query limit."""
    rooms = [make_room(f"C{i:02d}") for i in range(7)]
    store = type(booking_store)()
    service = RoomSearchService(InMemoryRoomRepository(rooms), store, cache, chunk_size=3, today=lambda: TODAY)
    outcome = await service.search_available_rooms(query(limit=10))

    assert len(outcome.rooms) == 7
    assert [len(batch) for batch in store.batches] == [3, 3, 1]


@pytest.mark.asyncio
async def test_empty_candidate_page_skips_booking_query(search_service, booking_store):
    outcome = await search_service.search_available_rooms(query(page=5))
    assert outcome.rooms == ()
    assert booking_store.batches == []


@pytest.mark.asyncio
async def test_availability_map_is_cached(search_service, booking_store):
    """Test the batch check reuses its cached map for the same rooms and stay."""
    await search_service.check_batch_room_availability(["R2", "R1"], date(2025, 6, 5), date(2025, 6, 8))
    await search_service.check_batch_room_availability(["R1", "R2"], date(2025, 6, 5), date(2025, 6, 8))
    assert len(booking_store.batches) == 1


@pytest.mark.asyncio
async def test_new_booking_is_visible_to_next_search(search_service, room_store, booking_store, cache):
    """Test booking creation invalidates cached results for that room."""
    bookings = BookingService(room_store, booking_store, cache, today=lambda: TODAY)
    before = await search_service.search_available_rooms(query())
    assert "R2" in ids(before)

    await bookings.create_booking(
        user_id="guest-9",
        room_id="R2",
        check_in=date(2025, 6, 6),
        check_out=date(2025, 6, 7),
        guest_information={"name": "Ana"},
    )

    after = await search_service.search_available_rooms(query())
    assert "R2" not in ids(after)


@pytest.mark.asyncio
async def test_cancellation_is_visible_to_next_search(search_service, room_store, booking_store, cache):
    """Test cancelling a booking brings its room back even though it was filtered out."""
    bookings = BookingService(room_store, booking_store, cache, today=lambda: TODAY)
    booking = await bookings.create_booking(
        user_id="guest-9",
        room_id="R3",
        check_in=date(2025, 6, 5),
        check_out=date(2025, 6, 8),
        guest_information={"name": "Ana"},
    )
    assert "R3" not in ids(await search_service.search_available_rooms(query()))

    await bookings.cancel_booking("guest-9", booking.id)

    assert "R3" in ids(await search_service.search_available_rooms(query()))


@pytest.mark.asyncio
async def test_booking_during_search_is_not_overwritten_by_it(room_store, cache):
    """Test a search that read bookings before a new booking does not cache its stale answer."""
    store = PausingBookingRepository()
    search = RoomSearchService(room_store, store, cache, today=lambda: TODAY)
    bookings = BookingService(room_store, store, cache, today=lambda: TODAY)

    in_flight = asyncio.create_task(search.search_available_rooms(query()))
    await store.entered.wait()
    await bookings.create_booking(
        user_id="guest-1",
        room_id="R1",
        check_in=date(2025, 6, 5),
        check_out=date(2025, 6, 8),
        guest_information={"name": "Ana Silva"},
    )
    store.release.set()
    stale = await in_flight

    assert "R1" in ids(stale)
    assert cache.get_cached_availability(["R1", "R2", "R3", "R4"], date(2025, 6, 5), date(2025, 6, 8)) is None

    fresh = await search.search_available_rooms(query())
    assert "R1" not in ids(fresh)
    availability = await search.check_batch_room_availability(["R1", "R2"], date(2025, 6, 5), date(2025, 6, 8))
    assert availability == {"R1": False, "R2": True}

"""Shared fixtures for the hotel booking tests."""

from collections.abc import Collection, Sequence
from datetime import date

import pytest

from hotel_booking.entities import BookingEntity, BookingStatus, RoomEntity
from hotel_booking.repositories import InMemoryBookingRepository, InMemoryRoomRepository
from hotel_booking.services import BookingService, CacheService, RoomSearchService, RoomService

TODAY = date(2025, 5, 1)


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingRoomRepository(InMemoryRoomRepository):
    """In-memory room store that counts queries and can be told to fail."""

    def __init__(self, rooms=()) -> None:
        super().__init__(rooms)
        self.query_calls = 0
        self.fail_with: Exception | None = None

    async def query_available_rooms(self, min_capacity, page, page_size):
        self.query_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return await super().query_available_rooms(min_capacity, page, page_size)


class CountingBookingRepository(InMemoryBookingRepository):
    """In-memory booking store that records batch sizes and can be told to fail."""

    def __init__(self, bookings=()) -> None:
        super().__init__(bookings)
        self.batches: list[list[str]] = []
        self.fail_with: Exception | None = None

    async def query_bookings_for_rooms(
        self,
        room_ids: Sequence[str],
        statuses: Collection[BookingStatus],
    ) -> list[BookingEntity]:
        self.batches.append(list(room_ids))
        if self.fail_with is not None:
            raise self.fail_with
        return await super().query_bookings_for_rooms(room_ids, statuses)


class FakeAsyncRedis:
    """Tiny stand-in for ``redis.asyncio.Redis`` with ``decode_responses=True``.

    Implements only the commands the repositories use.
    """

    def __init__(self) -> None:
        self.strings: dict[str, str] = {}
        self.sets: dict[str, set[str]] = {}
        self.zsets: dict[str, dict[str, float]] = {}
        self.fail_execute: Exception | None = None

    async def get(self, key):
        return self.strings.get(key)

    async def set(self, key, value):
        self.strings[key] = value
        return True

    async def mget(self, keys):
        return [self.strings.get(key) for key in keys]

    async def exists(self, *keys):
        return sum(1 for key in keys if key in self.strings)

    async def incr(self, key):
        value = int(self.strings.get(key, "0")) + 1
        self.strings[key] = str(value)
        return value

    async def zadd(self, key, mapping, nx=False):
        zset = self.zsets.setdefault(key, {})
        added = 0
        for member, score in mapping.items():
            if nx and member in zset:
                continue
            added += member not in zset
            zset[member] = score
        return added

    async def zrange(self, key, start, end):
        members = sorted(self.zsets.get(key, {}).items(), key=lambda item: item[1])
        names = [member for member, _ in members]
        return names[start:] if end == -1 else names[start : end + 1]

    async def sadd(self, key, *members):
        bucket = self.sets.setdefault(key, set())
        before = len(bucket)
        bucket.update(members)
        return len(bucket) - before

    async def smembers(self, key):
        return set(self.sets.get(key, set()))

    async def ping(self):
        return True

    def pipeline(self, transaction=True):
        return FakePipeline(self)


class FakePipeline:
    """Buffers commands and applies them together on ``execute``.

    If the client has ``fail_execute`` set, ``execute`` raises it and
    applies nothing, as a MULTI/EXEC block that Redis rejected.
    """

    def __init__(self, client: FakeAsyncRedis) -> None:
        self._client = client
        self._commands: list[tuple[str, tuple, dict]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self._commands.clear()

    def _queue(self, name, *args, **kwargs):
        self._commands.append((name, args, kwargs))
        return self

    def set(self, key, value):
        return self._queue("set", key, value)

    def sadd(self, key, *members):
        return self._queue("sadd", key, *members)

    def zadd(self, key, mapping, nx=False):
        return self._queue("zadd", key, mapping, nx=nx)

    async def execute(self):
        commands, self._commands = self._commands, []
        if self._client.fail_execute is not None:
            raise self._client.fail_execute
        return [await getattr(self._client, name)(*args, **kwargs) for name, args, kwargs in commands]


def make_room(
    room_id: str,
    price: float = 100.0,
    capacity: int = 2,
    name: str | None = None,
    room_type: str = "standard",
    **kwargs,
) -> RoomEntity:
    return RoomEntity(
        id=room_id,
        name=name or f"Room {room_id}",
        room_type=room_type,
        price=price,
        capacity=capacity,
        **kwargs,
    )


def make_booking(
    room_id: str,
    check_in: date,
    check_out: date,
    status: BookingStatus = BookingStatus.CONFIRMED,
    user_id: str = "guest-1",
    **kwargs,
) -> BookingEntity:
    return BookingEntity(
        user_id=user_id,
        room_id=room_id,
        check_in=check_in,
        check_out=check_out,
        status=status,
        **kwargs,
    )


@pytest.fixture
def clock():
    """A hand-driven clock for TTL tests."""
    return FakeClock()


@pytest.fixture
def cache(clock):
    """A cache with short, distinct TTLs driven by the fake clock."""
    return CacheService(
        default_ttl=300,
        availability_ttl=120,
        room_page_ttl=180,
        search_ttl=60,
        count_ttl=300,
        clock=clock,
    )


@pytest.fixture
def rooms():
    """Five rooms in store order; R3 sleeps four, R5 is closed."""
    return [
        make_room("R1", price=100.0),
        make_room("R2", price=150.0),
        make_room("R3", price=400.0, capacity=4, room_type="suite"),
        make_room("R4", price=80.0, capacity=1, room_type="budget"),
        make_room("R5", price=200.0, available=False),
    ]


@pytest.fixture
def room_store(rooms):
    return CountingRoomRepository(rooms)


@pytest.fixture
def booking_store():
    return CountingBookingRepository()


@pytest.fixture
def search_service(room_store, booking_store, cache):
    return RoomSearchService(
        room_store=room_store,
        booking_store=booking_store,
        cache=cache,
        chunk_size=30,
        max_page_size=50,
        today=lambda: TODAY,
    )


@pytest.fixture
def booking_service(room_store, booking_store, cache):
    return BookingService(
        room_store=room_store,
        booking_store=booking_store,
        cache=cache,
        today=lambda: TODAY,
    )


@pytest.fixture
def room_service(room_store, cache):
    return RoomService(room_store=room_store, cache=cache)

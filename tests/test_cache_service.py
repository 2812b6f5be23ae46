"""
Tests for the in-process availability cache.
"""

import threading

from hotel_booking.services import CacheService
from hotel_booking.services.cache_keys import SearchKey, availability_key, room_page_key, total_count_key


class Unserializable:
    def __repr__(self):
        raise RuntimeError("no repr")


class BrokenKey:
    """A structured key whose string form cannot be derived."""

    room_ids = frozenset()

    def render(self):
        raise ValueError("bad key")


def test_get_before_ttl_returns_value(cache, clock):
    """Test an entry is returned while younger than its TTL."""
    cache.set("k", "v", ttl=0.1)
    clock.advance(0.05)
    assert cache.get("k") == "v"


def test_get_after_ttl_returns_none_and_evicts(cache, clock):
    """Test an expired entry is never returned and is evicted on read."""
    cache.set("k", "v", ttl=0.1)
    clock.advance(0.15)
    assert cache.get("k") is None
    assert len(cache) == 0


def test_entry_expires_exactly_at_ttl(cache, clock):
    """Test validity requires now - stored_at < ttl."""
    cache.set("k", "v", ttl=10)
    clock.advance(10)
    assert cache.get("k") is None


def test_default_ttl_applies(cache, clock):
    """Test set without a TTL uses the cache default."""
    cache.set("k", "v")
    clock.advance(299)
    assert cache.get("k") == "v"
    clock.advance(2)
    assert cache.get("k") is None


def test_overwrite_resets_expiry(cache, clock):
    """Test overwriting a key replaces the value and restarts its TTL."""
    cache.set("k", "old", ttl=10)
    clock.advance(8)
    cache.set("k", "new", ttl=10)
    clock.advance(8)
    assert cache.get("k") == "new"


def test_delete_reports_existence(cache):
    """Test delete returns whether an entry existed."""
    cache.set("k", "v")
    assert cache.delete("k") is True
    assert cache.delete("k") is False
    assert cache.get("k") is None


def test_clear_removes_everything(cache):
    """Test clear empties the cache and reports the count."""
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.clear() == 2
    assert len(cache) == 0


def test_invalidate_by_room_id_only_touches_matching_keys(cache):
    """Test room invalidation drops keys embedding the room and nothing else."""
    first = availability_key(["R1", "R2"], "2025-01-01", "2025-01-05")
    second = availability_key(["R3"], "2025-02-01", "2025-02-03")
    cache.set(first, {"R1": True, "R2": True})
    cache.set(second, {"R3": False})

    assert first.render() == "availability:R1,R2:2025-01-01:2025-01-05"
    assert cache.invalidate_by_room_id("R1") == 1
    assert cache.get(first) is None
    assert cache.get(second) == {"R3": False}


def test_invalidate_by_room_id_has_no_substring_false_positives(cache):
    """Test room R1 does not match an entry for R10."""
    key = availability_key(["R10"], "2025-01-01", "2025-01-05")
    cache.set(key, {"R10": True})
    assert cache.invalidate_by_room_id("R1") == 0
    assert cache.get(key) == {"R10": True}


def test_invalidate_by_room_id_uses_extra_tags(cache):
    """Test entries tagged at write time are dropped for their rooms."""
    key = SearchKey.of("Lisbon", "2025-06-01", "2025-06-05", 2, 1, 1, 10)
    cache.set(key, "page", room_ids=["R7", "R8"])
    cache.set(room_page_key(1, 10), "listing", room_ids=["R9"])

    assert cache.invalidate_by_room_id("R8") == 1
    assert cache.get(key) is None
    assert cache.get(room_page_key(1, 10)) == "listing"


def test_invalidate_by_prefix(cache):
    """Test prefix invalidation counts and removes matching keys."""
    cache.set(room_page_key(1, 10), "page 1")
    cache.set(room_page_key(2, 10), "page 2")
    cache.set(total_count_key(), 42)
    assert cache.invalidate_by_prefix("rooms:") == 2
    assert cache.get(total_count_key()) == 42


def test_invalidate_room_caches_keeps_unrelated_entries(cache):
    """Test room-wide invalidation spares keys outside the room namespaces."""
    cache.set(room_page_key(1, 10), "page")
    cache.set(total_count_key(), 3)
    cache.set(availability_key(["R1"], "2025-01-01", "2025-01-02"), {"R1": True})
    cache.set("session:abc", "keep")

    assert cache.invalidate_room_caches() == 3
    assert cache.get("session:abc") == "keep"


def test_sweep_evicts_only_expired(cache, clock):
    """Test sweep removes stale entries without a read."""
    cache.set("short", 1, ttl=5)
    cache.set("long", 2, ttl=50)
    clock.advance(10)
    assert cache.sweep() == 1
    assert cache.stats()["keys"] == ["long"]


def test_typed_helpers_use_their_ttls(cache, clock):
    """Test availability entries live 2 minutes and search entries 1 minute."""
    cache.cache_availability(["R2", "R1"], "2025-01-01", "2025-01-03", {"R1": True, "R2": False})
    search = SearchKey.of("Lisbon", "2025-01-01", "2025-01-03", 2, None, 1, 10)
    cache.cache_search_results(search, "page", room_ids=["R1"])

    clock.advance(90)
    assert cache.get_cached_search_results(search) is None
    assert cache.get_cached_availability(["R1", "R2"], "2025-01-01", "2025-01-03") == {"R1": True, "R2": False}

    clock.advance(40)
    assert cache.get_cached_availability(["R1", "R2"], "2025-01-01", "2025-01-03") is None


def test_total_count_round_trip(cache):
    cache.cache_total_count(12)
    assert cache.get_cached_total_count() == 12
    assert cache.get_cached_total_count(has_search_criteria=True) is None


def test_stats_reports_hits_misses_and_memory(cache):
    """Test stats expose size, keys, hit/miss counts and a memory estimate."""
    cache.set("k", {"a": 1})
    cache.get("k")
    cache.get("missing")

    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["keys"] == ["k"]
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["memory_usage"] == len("k") * 2 + len('{"a": 1}') * 2


def test_stats_memory_estimate_failure_is_contained(cache):
    """Test a value that cannot be sized yields None instead of raising."""
    cache.set("k", Unserializable())
    assert cache.stats()["memory_usage"] is None


def test_faulty_key_degrades_to_miss(cache):
    """Test internal failures never reach the caller."""
    cache.set(BrokenKey(), "v")
    assert cache.get(BrokenKey()) is None
    assert len(cache) == 0


def test_instances_do_not_share_state(clock):
    """Test two caches are isolated (no module-level singleton)."""
    first = CacheService(clock=clock)
    second = CacheService(clock=clock)
    first.set("k", "v")
    assert second.get("k") is None


def test_concurrent_writers_and_invalidators(cache):
    """Test the cache stays consistent under concurrent threads."""
    errors = []

    def writer(offset):
        try:
            for i in range(200):
                room = f"R{offset}-{i % 5}"
                cache.set(availability_key([room], "2025-01-01", "2025-01-02"), {room: True})
                cache.get(availability_key([room], "2025-01-01", "2025-01-02"))
                cache.invalidate_by_room_id(room)
        except Exception as e:  # pragma: no cover - reported below
            errors.append(e)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(cache) == 0


def test_size_is_bounded_by_max_entries(clock):
    """Test a full cache evicts the least recently used entry."""
    cache = CacheService(max_entries=2, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)

    assert len(cache) == 2
    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_write_after_room_invalidation_is_skipped(cache):
    """Test a value computed before a room was invalidated is not stored."""
    mark = cache.write_mark()
    cache.invalidate_by_room_id("R1")

    stored = cache.cache_availability(
        ["R1", "R2"], "2025-01-01", "2025-01-03", {"R1": True, "R2": True}, since=mark
    )
    assert stored is False
    assert cache.get_cached_availability(["R1", "R2"], "2025-01-01", "2025-01-03") is None

    assert cache.cache_availability(["R2"], "2025-01-01", "2025-01-03", {"R2": True}, since=mark) is True
    assert cache.get_cached_availability(["R2"], "2025-01-01", "2025-01-03") == {"R2": True}


def test_write_checks_extra_room_tags(cache):
    """Test rooms passed as tags also block a stale write."""
    search = SearchKey.of("Lisbon", "2025-01-01", "2025-01-03", 2, None, 1, 10)
    mark = cache.write_mark()
    cache.invalidate_by_room_id("R3")

    assert cache.cache_search_results(search, "page", room_ids=["R1", "R3"], since=mark) is False
    assert cache.get_cached_search_results(search) is None


def test_write_after_global_invalidation_is_skipped(cache):
    """Test dropping all room caches blocks every write started before it."""
    mark = cache.write_mark()
    cache.invalidate_room_caches()

    assert cache.cache_total_count(5, since=mark) is False
    assert cache.cache_room_page(1, 10, "page", room_ids=["R9"], since=mark) is False
    assert cache.get_cached_total_count() is None


def test_write_with_fresh_mark_is_stored(cache):
    cache.invalidate_by_room_id("R1")
    mark = cache.write_mark()
    assert cache.set(availability_key(["R1"], "2025-01-01", "2025-01-03"), {"R1": True}, since=mark) is True
    assert cache.set("plain", 1) is True

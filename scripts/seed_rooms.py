#!/usr/bin/env python3
"""
Seed the Redis room store with the sample hotel and run a demo search.

Usage:
    python scripts/seed_rooms.py            # seed and search
    python scripts/seed_rooms.py --no-demo  # seed only
"""

import argparse
import asyncio
from datetime import date, timedelta

from hotel_booking import (
    CacheService,
    RedisBookingRepository,
    RedisRoomRepository,
    RoomEntity,
    RoomSearchPage,
    RoomSearchService,
    SearchQuery,
    get_redis_client,
)

# (name, type, nightly price, capacity, bed type, room number, amenities)
SAMPLE_ROOMS = [
    ("Deluxe Ocean View", "deluxe", 250, 2, "king", "201", ["Ocean View", "King Bed", "Mini Bar", "WiFi"]),
    ("Standard City View", "standard", 150, 2, "queen", "101", ["City View", "Queen Bed", "WiFi"]),
    ("Family Suite", "suite", 400, 4, "multiple", "301", ["Living Room", "2 Bedrooms", "Kitchen", "WiFi"]),
    ("Executive Business Suite", "executive", 350, 2, "king", "401", ["Work Desk", "Lounge Access", "WiFi"]),
    ("Budget Room", "budget", 100, 1, "single", "102", ["WiFi"]),
    ("Deluxe Garden View", "deluxe", 220, 2, "queen", "202", ["Garden View", "WiFi", "Balcony"]),
    ("Deluxe Terrace Room", "deluxe", 300, 3, "king", "501", ["Private Terrace", "WiFi", "Mini Bar"]),
    ("Standard Twin", "standard", 130, 2, "twin", "104", ["Twin Beds", "WiFi"]),
    ("Family Suite Deluxe", "suite", 450, 6, "multiple", "601", ["3 Bedrooms", "Kitchen", "WiFi"]),
    ("Family Connecting Suite", "suite", 420, 5, "multiple", "502", ["Connecting Rooms", "WiFi"]),
    ("Executive Penthouse", "executive", 480, 2, "king", "701", ["Panoramic View", "Butler", "WiFi"]),
    ("Budget Quad", "budget", 120, 4, "multiple", "112", ["WiFi"]),
]


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def seed(rooms: RedisRoomRepository) -> None:
    """Add the sample rooms to the store."""
    print_section("Seeding rooms")
    for name, room_type, price, capacity, bed_type, number, amenities in SAMPLE_ROOMS:
        room_id = await rooms.add_room(
            RoomEntity(
                id=f"main-hotel-{number}",
                name=name,
                room_type=room_type,
                price=price,
                capacity=capacity,
                max_occupancy=capacity,
                bed_type=bed_type,
                room_number=number,
                hotel_id="main-hotel",
                amenities=tuple(amenities),
            )
        )
        print(f"  ✓ {name} ({room_id})")


async def demo_search(rooms: RedisRoomRepository, bookings: RedisBookingRepository) -> None:
    """Search twice for the same stay to show the cache at work."""
    print_section("Demo search")
    cache = CacheService.create()
    service = RoomSearchService(room_store=rooms, booking_store=bookings, cache=cache)
    check_in = date.today() + timedelta(days=7)
    query = SearchQuery(
        destination_city="Lisbon",
        check_in=check_in,
        check_out=check_in + timedelta(days=3),
        guest_count=2,
    )

    for attempt in ("first (store)", "second (cache)"):
        outcome = await service.search_available_rooms(query)
        print(f"\n🔍 Search {attempt}:")
        if not isinstance(outcome, RoomSearchPage):
            print(f"  ✗ {outcome}")
            return
        for item in outcome.rooms:
            print(f"  {item.room.name:<28} {item.nights} nights  total {item.total_price:>8.2f}")
        print(f"  page {outcome.pagination.current_page}/{outcome.pagination.total_pages}")

    print(f"\n📊 Cache: {cache.stats()['size']} entries, {cache.stats()['hits']} hits")


async def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--no-demo", action="store_true", help="Only seed, skip the demo search")
    args = parser.parse_args()

    client = get_redis_client()
    try:
        rooms = RedisRoomRepository.create(client)
        await seed(rooms)
        if not args.no_demo:
            await demo_search(rooms, RedisBookingRepository.create(client))
    finally:
        await client.aclose()


if __name__ == "__main__":
    asyncio.run(main())

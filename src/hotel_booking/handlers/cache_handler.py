"""HTTP handlers for cache administration and health."""

from hotel_booking.dto import CacheStatsResponse, HealthCheckResponse
from hotel_booking.protocols import RoomStore
from hotel_booking.services import CacheService


class CacheHandler:
    """HTTP handlers for cache statistics, reset and health."""

    def __init__(self, cache: CacheService, room_store: RoomStore) -> None:
        self._cache = cache
        self._rooms = room_store

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests."""
        return CacheStatsResponse(**self._cache.stats())

    async def clear_cache(self) -> dict:
        """Handle DELETE /cache requests."""
        count = self._cache.clear()
        return {
            "success": True,
            "deleted_count": count,
            "message": "Cache cleared successfully",
        }

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = await self._rooms.health_check()
        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            store_healthy=is_healthy,
        )

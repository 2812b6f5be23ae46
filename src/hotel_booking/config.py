import os
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Store backend: "redis" or "memory"
    store_backend: str = os.getenv("STORE_BACKEND", "redis")

    # Cache TTLs (seconds)
    cache_default_ttl: float = float(os.getenv("CACHE_DEFAULT_TTL", "300"))
    cache_availability_ttl: float = float(os.getenv("CACHE_AVAILABILITY_TTL", "120"))
    cache_room_page_ttl: float = float(os.getenv("CACHE_ROOM_PAGE_TTL", "180"))
    cache_search_ttl: float = float(os.getenv("CACHE_SEARCH_TTL", "60"))
    cache_count_ttl: float = float(os.getenv("CACHE_COUNT_TTL", "300"))
    cache_sweep_interval: float = float(os.getenv("CACHE_SWEEP_INTERVAL", "30"))
    cache_max_entries: int = int(os.getenv("CACHE_MAX_ENTRIES", "10000"))

    # Search
    booking_query_chunk_size: int = int(os.getenv("BOOKING_QUERY_CHUNK_SIZE", "30"))
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "50"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def uses_redis(self) -> bool:
        """Check if the configured store backend is Redis.

        Returns:
            True if rooms and bookings live in Redis, False for in-memory
        """
        return self.store_backend.lower() == "redis"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.store_backend.lower() not in ("redis", "memory"):
            raise ValueError(f"STORE_BACKEND must be 'redis' or 'memory', got {self.store_backend!r}")

        ttls = (
            self.cache_default_ttl,
            self.cache_availability_ttl,
            self.cache_room_page_ttl,
            self.cache_search_ttl,
            self.cache_count_ttl,
        )
        if any(ttl <= 0 for ttl in ttls):
            raise ValueError("Cache TTLs must be positive")

        if self.cache_max_entries < 1:
            raise ValueError("CACHE_MAX_ENTRIES must be at least 1")

        if self.cache_sweep_interval <= 0:
            raise ValueError("CACHE_SWEEP_INTERVAL must be positive")

        if self.booking_query_chunk_size < 1:
            raise ValueError("BOOKING_QUERY_CHUNK_SIZE must be at least 1")

        if not 1 <= self.default_page_size <= self.max_page_size:
            raise ValueError(
                f"DEFAULT_PAGE_SIZE must be between 1 and MAX_PAGE_SIZE ({self.max_page_size}), "
                f"got {self.default_page_size}"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create an asyncio Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )

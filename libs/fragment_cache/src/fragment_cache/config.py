"""
Runtime settings for the fragment cache.

Covers the global switches (enabled, debug, environment) and the Redis
backend used to store rendered fragments.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NAMESPACE = "AciliaComponentFragmentCache"


class FragmentCacheSettings(BaseSettings):
    """Fragment cache settings read from FRAGMENT_CACHE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FRAGMENT_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================================================
    # GLOBAL SWITCHES
    # ============================================================================

    enabled: bool = Field(
        default=True,
        description="Global kill switch. Keys are still computed when disabled.",
    )
    debug: bool = Field(
        default=False,
        description="Wrap served fragments in HIT/MISS/DISABLED HTML comments",
    )
    environment: str = Field(
        default="development",
        description="Environment name, part of every key so environments never collide",
    )
    key_namespace: str = Field(
        default=DEFAULT_NAMESPACE, description="Leading segment of every cache key"
    )

    # ============================================================================
    # REDIS STORAGE
    # ============================================================================

    redis_url: str | None = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    redis_key_prefix: str = Field(
        default="",
        description="Optional prefix prepended to fragment keys inside Redis",
    )
    redis_max_connections: int = Field(
        default=50, ge=1, description="Max Redis connections in the pool"
    )
    redis_socket_connect_timeout: int = Field(
        default=5,
        ge=0,
        description="Connection timeout in seconds (fail-fast on unreachable Redis)",
    )
    redis_socket_timeout: int = Field(
        default=10, ge=0, description="Socket read/write timeout in seconds"
    )
    redis_retry_on_timeout: bool = Field(
        default=True,
        description="Retry operations on timeout (GET/SET of fragments are idempotent)",
    )
    redis_health_check_interval: int = Field(
        default=30,
        ge=0,
        description="Health check interval in seconds (0=disabled)",
    )


@lru_cache
def get_fragment_cache_settings() -> FragmentCacheSettings:
    """Get cached FragmentCacheSettings populated from environment variables.

    Environment variables are read by Pydantic BaseSettings:
        FRAGMENT_CACHE_ENABLED (default: true)
        FRAGMENT_CACHE_DEBUG (default: false)
        FRAGMENT_CACHE_ENVIRONMENT (default: "development")
        FRAGMENT_CACHE_KEY_NAMESPACE (default: "AciliaComponentFragmentCache")
        FRAGMENT_CACHE_REDIS_URL (default: "redis://localhost:6379/0")
        FRAGMENT_CACHE_REDIS_KEY_PREFIX (default: "")
        FRAGMENT_CACHE_REDIS_MAX_CONNECTIONS (default: 50)

    Returns:
        Cached FragmentCacheSettings instance.

    Note:
        For testing, call get_fragment_cache_settings.cache_clear() to reset.
    """
    return FragmentCacheSettings()

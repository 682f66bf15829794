"""
Storage backends for rendered fragments.

The listener only needs ``get`` and ``set``. Expirations are expressed in
minutes; 0 means the fragment never expires.

Redis failures are treated as best-effort: a failed read is a miss and a
failed write is skipped, both logged as warnings. The handler output is
always served.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .config import FragmentCacheSettings, get_fragment_cache_settings
from .exceptions import RedisConfigurationError

logger = logging.getLogger(__name__)


@runtime_checkable
class FragmentStore(Protocol):
    """Key-value store holding rendered fragment bodies."""

    async def get(self, key: str) -> str | None:
        """Return the stored body, or None when the key is absent."""
        ...

    async def set(self, key: str, value: str, ttl_minutes: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_minutes`` (0 = no expiry)."""
        ...


class RedisFragmentStore:
    """Fragment store backed by an async Redis client."""

    def __init__(self, client: Redis, key_prefix: str = "") -> None:
        self.client = client
        self.key_prefix = key_prefix

    @classmethod
    def from_settings(
        cls, settings: FragmentCacheSettings | None = None
    ) -> RedisFragmentStore:
        """
        Create a store with a pooled Redis client configured from settings.

        Parameters:
            settings (FragmentCacheSettings | None): Settings to use; defaults to
                the cached environment settings.

        Returns:
            RedisFragmentStore: Store wrapping a new ``redis.asyncio.Redis`` client.

        Raises:
            RedisConfigurationError: If ``redis_url`` is not configured.
        """
        settings = settings or get_fragment_cache_settings()
        if not settings.redis_url:
            raise RedisConfigurationError()

        client = Redis.from_url(
            settings.redis_url,
            decode_responses=True,
            max_connections=settings.redis_max_connections,
            socket_connect_timeout=settings.redis_socket_connect_timeout,
            socket_timeout=settings.redis_socket_timeout,
            retry_on_timeout=settings.redis_retry_on_timeout,
            health_check_interval=settings.redis_health_check_interval,
        )
        logger.info(
            f"Redis fragment store configured: {settings.redis_url} "
            f"(max_connections={settings.redis_max_connections})"
        )
        return cls(client, key_prefix=settings.redis_key_prefix)

    def _redis_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> str | None:
        try:
            value = await self.client.get(self._redis_key(key))
        except RedisError as e:
            logger.warning(f"Fragment cache read error for key {key}: {e}")
            return None

        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl_minutes: int) -> None:
        redis_key = self._redis_key(key)
        try:
            if ttl_minutes > 0:
                await self.client.setex(redis_key, ttl_minutes * 60, value)
            else:
                await self.client.set(redis_key, value)
        except RedisError as e:
            logger.warning(f"Fragment cache write error for key {key}: {e}")

    async def aclose(self) -> None:
        """Close the underlying Redis client."""
        try:
            await self.client.aclose()
        except RedisError as e:
            logger.warning(f"Error closing fragment store Redis client: {e}")

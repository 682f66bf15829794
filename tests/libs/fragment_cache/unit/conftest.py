"""Shared test fixtures and helpers for fragment_cache unit tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from fragment_cache.config import get_fragment_cache_settings
from fragment_cache.configuration import CONFIGURATION_ATTRIBUTE, FragmentCacheConfiguration
from fragment_cache.dispatcher import EventDispatcher
from fragment_cache.http import Request
from fragment_cache.listener import FragmentCacheListener


class InMemoryFragmentStore:
    """
    Dict-backed fragment store recording every call.

    ``gets`` and ``sets`` let tests assert that the store was (or was not)
    touched.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.gets: list[str] = []
        self.sets: list[tuple[str, str, int]] = []

    async def get(self, key: str) -> str | None:
        self.gets.append(key)
        return self.data.get(key)

    async def set(self, key: str, value: str, ttl_minutes: int) -> None:
        self.sets.append((key, value, ttl_minutes))
        self.data[key] = value


@pytest.fixture
def store() -> InMemoryFragmentStore:
    return InMemoryFragmentStore()


@pytest.fixture
def dispatcher() -> EventDispatcher:
    return EventDispatcher()


@pytest.fixture
def master_request() -> Request:
    return Request("https://www.example.com/article/7")


@pytest.fixture
def configuration() -> FragmentCacheConfiguration:
    return FragmentCacheConfiguration(expiration=10, version=2)


@pytest.fixture
def sub_request(configuration: FragmentCacheConfiguration) -> Request:
    """A sub-request carrying a fragment cache configuration."""
    return Request(
        "/block/42", attributes={CONFIGURATION_ATTRIBUTE: configuration}
    )


@pytest.fixture
def listener(
    dispatcher: EventDispatcher, store: InMemoryFragmentStore
) -> FragmentCacheListener:
    return FragmentCacheListener(dispatcher, store, environment="prod")


@pytest.fixture
def mock_redis_client() -> AsyncMock:
    """Mock async Redis client with get/set/setex/aclose."""
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(return_value=None)
    mock_client.set = AsyncMock()
    mock_client.setex = AsyncMock()
    mock_client.aclose = AsyncMock()
    return mock_client


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the cached settings so environment patches take effect."""
    get_fragment_cache_settings.cache_clear()
    yield
    get_fragment_cache_settings.cache_clear()

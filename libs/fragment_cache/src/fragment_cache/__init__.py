"""HTTP response-fragment caching for sub-request rendering."""

from .config import FragmentCacheSettings, get_fragment_cache_settings
from .configuration import FragmentCacheConfiguration, fragment_cache
from .dispatcher import EventDispatcher, subscriber
from .events import KEY_GENERATION, KeyGenerationContext
from .http import Request, RequestType, Response
from .kernel import FragmentKernel
from .keys import KeyBuilder, build_key
from .listener import FragmentCacheListener
from .store import FragmentStore, RedisFragmentStore

__all__ = [
    "KEY_GENERATION",
    "EventDispatcher",
    "FragmentCacheConfiguration",
    "FragmentCacheListener",
    "FragmentCacheSettings",
    "FragmentKernel",
    "FragmentStore",
    "KeyBuilder",
    "KeyGenerationContext",
    "RedisFragmentStore",
    "Request",
    "RequestType",
    "Response",
    "build_key",
    "fragment_cache",
    "get_fragment_cache_settings",
    "subscriber",
]

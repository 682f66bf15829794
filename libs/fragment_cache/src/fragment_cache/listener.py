"""
Fragment cache listener.

Hooks key computation and the fragment store into the two interception
points of a sub-request:

- controller phase: compute the key, serve a HIT by replacing the
  controller, or remember the key on the sub-request for a MISS
- response phase: store the rendered body under the remembered key and
  apply the debug annotation

Master requests and sub-requests without a configuration attribute are never
touched. Concurrent misses for the same key each render and write the
fragment; the last write wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .config import DEFAULT_NAMESPACE, FragmentCacheSettings, get_fragment_cache_settings
from .configuration import CONFIGURATION_ATTRIBUTE, KEY_ATTRIBUTE, FragmentCacheConfiguration
from .dispatcher import EventDispatcher
from .http import Request, RequestType, Response
from .keys import KeyBuilder
from .store import FragmentStore

logger = logging.getLogger(__name__)

HIT = "HIT"
MISS = "MISS"
DISABLED = "DISABLED"

CONTROLLER_EVENT = "controller"
RESPONSE_EVENT = "response"

Controller = Callable[..., Any]


@dataclass
class ControllerEvent:
    """Raised before the handler of a request runs."""

    request: Request
    request_type: RequestType
    master_request: Request
    controller: Controller

    def set_controller(self, controller: Controller) -> None:
        self.controller = controller


@dataclass
class ResponseEvent:
    """Raised after the handler produced a response."""

    request: Request
    request_type: RequestType
    master_request: Request
    response: Response


def annotate(label: str, key: str, content: str, debug: bool) -> str:
    """Wrap ``content`` in Begin/End HTML comments when ``debug`` is on."""
    if not debug:
        return content
    return (
        f"<!-- {label} - Begin Fragment Cache for KEY: {key} -->"
        f"{content}"
        f"<!-- End Fragment Cache for KEY: {key} -->"
    )


def _get_configuration(request: Request) -> FragmentCacheConfiguration | None:
    configuration = request.attributes.get(CONFIGURATION_ATTRIBUTE)
    if isinstance(configuration, FragmentCacheConfiguration):
        return configuration
    return None


class FragmentCacheListener:
    """Serves and populates cached fragments around sub-request handlers."""

    def __init__(
        self,
        dispatcher: EventDispatcher,
        store: FragmentStore,
        *,
        environment: str,
        debug: bool = False,
        enabled: bool = True,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        """
        Initialize the listener.

        Parameters:
            dispatcher (EventDispatcher): Dispatcher holding key generation observers.
            store (FragmentStore): Where rendered fragments are read and written.
            environment (str): Environment name, part of every key.
            debug (bool): Wrap served fragments in HIT/MISS/DISABLED comments.
            enabled (bool): Global switch. When off, keys are still computed
                but the store is never read or written.
            namespace (str): Leading segment of every key.
        """
        self.dispatcher = dispatcher
        self.store = store
        self.environment = environment
        self.debug = debug
        self.enabled = enabled
        self.key_builder = KeyBuilder(dispatcher, environment, namespace)

    @classmethod
    def from_settings(
        cls,
        dispatcher: EventDispatcher,
        store: FragmentStore,
        settings: FragmentCacheSettings | None = None,
    ) -> FragmentCacheListener:
        settings = settings or get_fragment_cache_settings()
        return cls(
            dispatcher,
            store,
            environment=settings.environment,
            debug=settings.debug,
            enabled=settings.enabled,
            namespace=settings.key_namespace,
        )

    @staticmethod
    def subscribed_events() -> dict[str, tuple[str, int]]:
        """Interception points handled by this listener, with their priorities."""
        return {
            CONTROLLER_EVENT: ("on_controller", -128),
            RESPONSE_EVENT: ("on_response", 0),
        }

    async def on_controller(self, event: ControllerEvent) -> None:
        """Serve a cached fragment or mark the sub-request for population."""
        if event.request_type == RequestType.MASTER:
            return

        sub_request = event.request
        configuration = _get_configuration(sub_request)
        if configuration is None:
            return

        # Observers fire even when caching is disabled
        key = self.key_builder.build(configuration, sub_request, event.master_request)

        if not self.enabled:
            sub_request.attributes[KEY_ATTRIBUTE] = key
            return

        content = await self.store.get(key)
        if content is not None:
            logger.debug(f"Fragment cache HIT for {key}")
            sub_request.attributes.pop(KEY_ATTRIBUTE, None)
            response = Response(annotate(HIT, key, content, self.debug))

            def cached_controller(*args: Any, **kwargs: Any) -> Response:
                return response

            event.set_controller(cached_controller)
        else:
            logger.debug(f"Fragment cache MISS for {key}")
            sub_request.attributes[KEY_ATTRIBUTE] = key

    async def on_response(self, event: ResponseEvent) -> None:
        """Store a freshly rendered fragment and apply the debug annotation."""
        if event.request_type == RequestType.MASTER:
            return

        sub_request = event.request
        configuration = _get_configuration(sub_request)
        if configuration is None:
            return

        key = sub_request.attributes.get(KEY_ATTRIBUTE)
        if key is None:
            return

        response = event.response
        if self.enabled:
            await self.store.set(key, response.content, configuration.expiration)
            logger.debug(
                f"Stored fragment {key} for {configuration.expiration} minutes"
            )
            response.content = annotate(MISS, key, response.content, self.debug)
        else:
            response.content = annotate(DISABLED, key, response.content, self.debug)

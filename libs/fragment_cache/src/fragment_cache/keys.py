"""
Cache key derivation for rendered fragments.

Key format:
    "<namespace>:<environment>:v<version>:<digest>"

where ``digest`` is the SHA-1 of the key material joined with ":":
    [sha1(sub request uri), sha1(master request uri), *observer parts]

Observers of ``KEY_GENERATION`` contribute the extra parts. Their order is
significant, so the dispatcher's ordering must be stable for keys to repeat.
"""

from __future__ import annotations

import logging

from .config import DEFAULT_NAMESPACE
from .configuration import FragmentCacheConfiguration
from .dispatcher import EventDispatcher
from .events import KEY_GENERATION, KeyGenerationContext, digest
from .http import Request

logger = logging.getLogger(__name__)

KEY_SEPARATOR = ":"

__all__ = ["KEY_SEPARATOR", "KeyBuilder", "build_key", "digest"]


class KeyBuilder:
    """Builds fragment cache keys for one environment."""

    def __init__(
        self,
        dispatcher: EventDispatcher,
        environment: str,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self.dispatcher = dispatcher
        self.environment = environment
        self.namespace = namespace

    def build(
        self,
        configuration: FragmentCacheConfiguration,
        sub_request: Request,
        master_request: Request,
    ) -> str:
        """
        Compute the cache key of a fragment.

        Parameters:
            configuration (FragmentCacheConfiguration): Settings of the cached endpoint.
            sub_request (Request): The sub-request rendering the fragment.
            master_request (Request): The request that triggered the sub-request.

        Returns:
            str: Deterministic key for the given inputs and observer contributions.

        Raises:
            ObserverError: If a key generation observer fails.
        """
        key_material = [
            digest(sub_request.request_uri),
            digest(master_request.request_uri),
        ]

        context = KeyGenerationContext(configuration, sub_request, master_request)
        self.dispatcher.dispatch(KEY_GENERATION, context)
        key_material.extend(context.parts)

        key = KEY_SEPARATOR.join(
            [
                self.namespace,
                self.environment,
                f"v{configuration.version}",
                digest(KEY_SEPARATOR.join(key_material)),
            ]
        )
        logger.debug(
            f"Computed fragment key {key} for {sub_request.request_uri} "
            f"({len(context.parts)} observer parts)"
        )
        return key


def build_key(
    configuration: FragmentCacheConfiguration,
    sub_request: Request,
    master_request: Request,
    dispatcher: EventDispatcher,
    *,
    environment: str,
    namespace: str = DEFAULT_NAMESPACE,
) -> str:
    """Functional form of ``KeyBuilder.build``."""
    return KeyBuilder(dispatcher, environment, namespace).build(
        configuration, sub_request, master_request
    )

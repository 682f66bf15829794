"""Key generation event payload."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .configuration import FragmentCacheConfiguration
    from .http import Request

KEY_GENERATION = "fragment_cache.key_generation"


def digest(value: str) -> str:
    """Return the SHA-1 hex digest of ``value`` encoded as UTF-8."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


class KeyGenerationContext:
    """
    Payload dispatched to key generation observers.

    Observers inspect the configuration and both requests, then call
    ``add_part`` with any raw string the fragment should vary on (a cookie,
    a header, a user segment). Only the digest of each part is kept, in call
    order. A context belongs to a single key computation.
    """

    def __init__(
        self,
        configuration: FragmentCacheConfiguration,
        sub_request: Request,
        master_request: Request,
    ) -> None:
        self._configuration = configuration
        self._sub_request = sub_request
        self._master_request = master_request
        self._parts: list[str] = []

    @property
    def configuration(self) -> FragmentCacheConfiguration:
        return self._configuration

    @property
    def sub_request(self) -> Request:
        return self._sub_request

    @property
    def master_request(self) -> Request:
        return self._master_request

    @property
    def parts(self) -> tuple[str, ...]:
        """Digests contributed so far, in contribution order."""
        return tuple(self._parts)

    def add_part(self, raw: str) -> str:
        """
        Contribute a raw key part.

        Parameters:
            raw (str): Value the fragment should vary on.

        Returns:
            str: The digest appended to the key material.
        """
        part = digest(raw)
        self._parts.append(part)
        return part

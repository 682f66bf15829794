"""
Minimal request/response objects exchanged with the host.

Hosts adapt their own framework objects into these before running the
interception points.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from yarl import URL


class RequestType(str, Enum):
    """Whether a request came from outside or was dispatched internally."""

    MASTER = "master"
    SUB = "sub"


@dataclass
class Request:
    """An incoming master request or an internally dispatched sub-request."""

    uri: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def request_uri(self) -> str:
        """
        Canonical path and query string.

        Scheme and host are dropped from absolute URLs. Anything else is kept
        exactly as given (a leading ``//`` is part of the path, not a host),
        minus a ``#fragment``.
        """
        url = URL(self.uri)
        if url.scheme:
            return url.raw_path_qs
        return self.uri.partition("#")[0]


@dataclass
class Response:
    """A rendered response. Fragment caching only touches ``content``."""

    content: str = ""
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)

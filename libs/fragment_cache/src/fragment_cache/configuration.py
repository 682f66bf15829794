"""
Per-endpoint fragment cache configuration.

A handler opts into fragment caching with the ``fragment_cache`` decorator.
The host copies the resulting configuration into the sub-request attributes
under ``CONFIGURATION_ATTRIBUTE`` before the controller phase runs.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

ALIAS_NAME = "fragment_cache"
CONFIGURATION_ATTRIBUTE = f"_{ALIAS_NAME}"
KEY_ATTRIBUTE = f"_{ALIAS_NAME}_key"

DEFAULT_EXPIRATION = 1
DEFAULT_VERSION = 1

# Attribute set on decorated handlers
HANDLER_ATTRIBUTE = "__fragment_cache__"

# Decimal numbers with optional sign, fraction and exponent; no "_" separators or hex
NUMERIC_PATTERN = re.compile(r"\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*")

F = TypeVar("F", bound=Callable[..., Any])


def _coerce_non_negative_int(value: Any, default: int) -> int:
    """
    Coerce a loosely typed value to a non-negative integer.

    Integers, floats and numeric strings are truncated to int. Anything else
    (None, booleans, non-numeric strings, negative numbers) yields ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return default
        number = int(value)
    elif isinstance(value, str):
        if not NUMERIC_PATTERN.fullmatch(value):
            return default
        try:
            number = int(float(value))
        except (ValueError, OverflowError):
            return default
    else:
        return default
    return number if number >= 0 else default


class FragmentCacheConfiguration(BaseModel):
    """Cache settings for one cacheable endpoint.

    Invalid ``expiration`` or ``version`` values never raise; they fall back
    to 1. ``options`` is handed to key generation observers and is not part
    of the key itself.
    """

    model_config = ConfigDict(validate_assignment=True)

    expiration: int = Field(
        default=DEFAULT_EXPIRATION, description="Expiration time in minutes"
    )
    version: int = Field(
        default=DEFAULT_VERSION, description="Fragment version, part of the key"
    )
    options: dict[str, str] = Field(
        default_factory=dict, description="Custom options for observers"
    )

    @field_validator("expiration", mode="before")
    @classmethod
    def _coerce_expiration(cls, value: Any) -> int:
        return _coerce_non_negative_int(value, DEFAULT_EXPIRATION)

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> int:
        return _coerce_non_negative_int(value, DEFAULT_VERSION)

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, value: Any) -> dict[str, str]:
        if not isinstance(value, Mapping):
            return {}
        return {str(k): str(v) for k, v in value.items()}

    def set_expiration(self, expiration: Any) -> FragmentCacheConfiguration:
        """Set the expiration in minutes, defaulting to 1 when not numeric."""
        self.expiration = expiration
        return self

    def set_version(self, version: Any) -> FragmentCacheConfiguration:
        """Set the version, defaulting to 1 when not numeric."""
        self.version = version
        return self

    def set_options(self, options: Any) -> FragmentCacheConfiguration:
        """Replace the custom options. Non-mapping input clears them."""
        self.options = options
        return self

    @property
    def alias_name(self) -> str:
        return ALIAS_NAME


def fragment_cache(
    expiration: Any = DEFAULT_EXPIRATION,
    version: Any = DEFAULT_VERSION,
    options: Mapping[str, str] | None = None,
) -> Callable[[F], F]:
    """
    Mark a handler as a cacheable fragment.

    Usage:
        @fragment_cache(expiration=10, version=2, options={"vary": "country"})
        async def latest_news(request: Request) -> str:
            ...

    Args:
        expiration: Minutes the rendered fragment stays in the store
        version: Bump to invalidate every stored fragment of this handler
        options: Free-form data for key generation observers

    Returns:
        Decorator that attaches a FragmentCacheConfiguration to the handler
        and returns it otherwise unchanged.
    """
    configuration = FragmentCacheConfiguration(
        expiration=expiration, version=version, options=options or {}
    )

    def decorator(handler: F) -> F:
        setattr(handler, HANDLER_ATTRIBUTE, configuration)
        return handler

    return decorator


def get_configuration(handler: Callable[..., Any]) -> FragmentCacheConfiguration | None:
    """Return the configuration attached by ``fragment_cache``, if any."""
    return getattr(handler, HANDLER_ATTRIBUTE, None)

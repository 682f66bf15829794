"""Custom exceptions for the fragment cache library."""


class FragmentCacheError(Exception):
    """Base exception for fragment cache errors."""


class StorageConfigurationError(FragmentCacheError):
    """Raised when the fragment store is misconfigured."""

    def __init__(self, detail: str | None = None):
        if detail:
            super().__init__(f"Fragment store configuration error: {detail}")
        else:
            super().__init__("Fragment store configuration error")


class RedisConfigurationError(StorageConfigurationError):
    """Raised when Redis storage is requested without a redis_url."""

    def __init__(self):
        super().__init__()
        self.args = ("redis_url required for Redis fragment storage",)


class ObserverError(FragmentCacheError):
    """Raised when an observer fails while an event is being dispatched."""

    def __init__(self, event_name: str, observer_name: str):
        self.event_name = event_name
        self.observer_name = observer_name
        super().__init__(f"Observer {observer_name} failed during {event_name}")


class InvalidObserverError(FragmentCacheError, TypeError):
    """Raised when an observer cannot be registered (e.g. a coroutine function)."""

    def __init__(self, observer_name: str):
        super().__init__(
            f"Observer {observer_name} must be a synchronous callable"
        )

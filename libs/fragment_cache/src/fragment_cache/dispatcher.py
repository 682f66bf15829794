"""
Synchronous, priority-ordered event dispatcher.

Used as the extension point of key generation: observers subscribed to
``KEY_GENERATION`` receive the ``KeyGenerationContext`` and may add key
parts before the key is finalized.

Ordering:
- Higher priority runs first
- Equal priorities run in registration order
- Lists are sorted when an observer subscribes, never while dispatching

Every observer runs to completion; there is no cancellation. The first
observer that raises aborts the dispatch with an ``ObserverError`` chained to
the original exception, so a partially built key is never used.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from .exceptions import InvalidObserverError, ObserverError

logger = logging.getLogger(__name__)

Observer = Callable[[Any], None]
P = TypeVar("P")
ObserverT = TypeVar("ObserverT", bound=Observer)


@dataclass(frozen=True)
class Subscription:
    """A registered observer."""

    observer: Observer
    priority: int
    identifier: str


def _observer_name(observer: Observer) -> str:
    module = getattr(observer, "__module__", None) or "<unknown>"
    qualname = getattr(observer, "__qualname__", None) or type(observer).__qualname__
    return f"{module}.{qualname}"


class EventDispatcher:
    """Registry of observers per event name."""

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = {}

    def subscribe(self, event_name: str, observer: Observer, priority: int = 0) -> None:
        """
        Register an observer for an event.

        Parameters:
            event_name (str): Event to observe, e.g. ``KEY_GENERATION``.
            observer (Callable): Synchronous callable receiving the payload.
            priority (int): Higher values run earlier. Defaults to 0.

        Raises:
            InvalidObserverError: If ``observer`` is a coroutine function or
                not callable. Observers must not suspend.
        """
        name = _observer_name(observer)
        if not callable(observer) or inspect.iscoroutinefunction(observer):
            raise InvalidObserverError(name)

        subscriptions = self._subscriptions.setdefault(event_name, [])
        subscriptions.append(Subscription(observer, int(priority), name))
        # sort is stable, ties keep registration order
        subscriptions.sort(key=lambda s: -s.priority)

        logger.debug(f"Subscribed {name} to {event_name} with priority {priority}")

    def unsubscribe(self, event_name: str, observer: Observer) -> bool:
        """Remove every registration of ``observer``. Returns True if one was removed."""
        subscriptions = self._subscriptions.get(event_name, [])
        remaining = [s for s in subscriptions if s.observer is not observer]
        removed = len(remaining) != len(subscriptions)
        if remaining:
            self._subscriptions[event_name] = remaining
        else:
            self._subscriptions.pop(event_name, None)
        return removed

    def get_observers(self, event_name: str) -> list[Observer]:
        """Observers for ``event_name`` in the order they will be called."""
        return [s.observer for s in self._subscriptions.get(event_name, [])]

    def has_observers(self, event_name: str) -> bool:
        return bool(self._subscriptions.get(event_name))

    def dispatch(self, event_name: str, payload: P) -> P:
        """
        Call every observer of ``event_name`` with ``payload``.

        Returns:
            The payload, after all observers had a chance to mutate it.

        Raises:
            ObserverError: If an observer raises. Later observers are not run.
        """
        for subscription in list(self._subscriptions.get(event_name, [])):
            try:
                subscription.observer(payload)
            except Exception as exc:
                logger.exception(
                    f"Observer {subscription.identifier} failed during {event_name}"
                )
                raise ObserverError(event_name, subscription.identifier) from exc
        return payload


def subscriber(
    dispatcher: EventDispatcher, event_name: str, priority: int = 0
) -> Callable[[ObserverT], ObserverT]:
    """
    Decorator form of ``EventDispatcher.subscribe``.

    Usage:
        @subscriber(dispatcher, KEY_GENERATION, priority=10)
        def vary_on_country(context: KeyGenerationContext) -> None:
            context.add_part(context.master_request.headers.get("x-country", ""))
    """

    def decorator(observer: ObserverT) -> ObserverT:
        dispatcher.subscribe(event_name, observer, priority)
        return observer

    return decorator

"""
Priority-ordered event dispatcher.

Listeners are registered per event class. Higher priority runs first;
listeners with equal priority run in registration order. Listeners may
be plain callables or coroutine functions.
"""

import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Tuple, Type

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class Event:
    """Base class for dispatched events."""

    def __init__(self):
        self._propagation_stopped = False

    @property
    def propagation_stopped(self) -> bool:
        return self._propagation_stopped

    def stop_propagation(self) -> None:
        self._propagation_stopped = True


class EventDispatcher:
    """
    In-process event bus.

    Listener exceptions propagate to the caller of dispatch(); the
    dispatcher never swallows them.
    """

    def __init__(self):
        self._listeners: Dict[Type[Event], List[Tuple[int, int, Listener]]] = defaultdict(list)
        self._sequence = 0

    def add_listener(self, event_type: Type[Event], listener: Listener, priority: int = 0) -> None:
        """
        Register a listener.

        Args:
            event_type: Event class to listen to (subclasses are not matched)
            listener: Callable receiving the event
            priority: Higher values run earlier
        """
        self._sequence += 1
        self._listeners[event_type].append((priority, self._sequence, listener))
        self._listeners[event_type].sort(key=lambda item: (-item[0], item[1]))

    def add_subscriber(self, subscriber: Any) -> None:
        """
        Register every listener a subscriber declares.

        The subscriber exposes get_subscribed_events() returning
        {EventClass: [(method_name, priority), ...]}.
        """
        for event_type, entries in subscriber.get_subscribed_events().items():
            for method_name, priority in entries:
                self.add_listener(event_type, getattr(subscriber, method_name), priority)

    def remove_listener(self, event_type: Type[Event], listener: Listener) -> None:
        self._listeners[event_type] = [
            entry for entry in self._listeners[event_type] if entry[2] != listener
        ]

    def get_listeners(self, event_type: Type[Event]) -> List[Listener]:
        return [entry[2] for entry in self._listeners.get(event_type, [])]

    def has_listeners(self, event_type: Type[Event]) -> bool:
        return bool(self._listeners.get(event_type))

    async def dispatch(self, event: Event) -> Event:
        """
        Call the listeners of the event's class in priority order.

        Returns:
            The same event, possibly mutated by listeners
        """
        for listener in self.get_listeners(type(event)):
            if event.propagation_stopped:
                logger.debug(f"Propagation of {type(event).__name__} stopped")
                break

            result = listener(event)
            if inspect.isawaitable(result):
                await result

        return event

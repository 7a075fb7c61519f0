"""
Lifecycle events and the synchronous event channel that dispatches them.
"""

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import inspect
import logging
from typing import Any, ClassVar, Dict, List, Optional, Union

from ..core.base import ObjectId
from .object import LifecycleObject
from .state import StateLike


class LifecycleEventType(str, Enum):
    """Names of the events emitted by the lifecycle manager."""
    CREATED = "object:created"
    STATE_CHANGED = "object:stateChanged"
    DELETED = "object:deleted"
    WILDCARD = "*"


EventName = Union[str, LifecycleEventType]


def event_name(event_type: EventName) -> str:
    """Normalize an event type to its plain string name."""
    if isinstance(event_type, LifecycleEventType):
        return event_type.value
    return str(event_type)


@dataclass(frozen=True)
class ObjectCreatedEvent:
    """Payload of ``object:created``."""
    event_type: ClassVar[str] = LifecycleEventType.CREATED.value

    object: LifecycleObject
    timestamp: datetime

    @property
    def object_id(self) -> Optional[ObjectId]:
        return self.object.id

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "event_type": self.event_type,
            "object_id": self.object.id,
            "timestamp": self.timestamp.isoformat(),
            "object": self.object.to_dict(),
        }


@dataclass(frozen=True)
class ObjectStateChangedEvent:
    """Payload of ``object:stateChanged``."""
    event_type: ClassVar[str] = LifecycleEventType.STATE_CHANGED.value

    object: LifecycleObject
    old_state: StateLike
    new_state: StateLike
    timestamp: datetime

    @property
    def object_id(self) -> Optional[ObjectId]:
        return self.object.id

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "event_type": self.event_type,
            "object_id": self.object.id,
            "timestamp": self.timestamp.isoformat(),
            "old_state": self.old_state.name,
            "new_state": self.new_state.name,
        }


@dataclass(frozen=True)
class ObjectDeletedEvent:
    """Payload of ``object:deleted``."""
    event_type: ClassVar[str] = LifecycleEventType.DELETED.value

    object_id: ObjectId
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "event_type": self.event_type,
            "object_id": self.object_id,
            "timestamp": self.timestamp.isoformat(),
        }


LifecycleEvent = Union[ObjectCreatedEvent, ObjectStateChangedEvent, ObjectDeletedEvent]


class EventEmitter:
    """
    Synchronous publish/subscribe channel.

    Listeners registered for a named event receive the payload; listeners
    registered for ``"*"`` receive ``(event_type, payload)`` for every
    event. A listener raising an exception is logged and does not stop
    dispatch to the remaining listeners.
    """

    WILDCARD = LifecycleEventType.WILDCARD.value

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        """
        Initialize the emitter.

        Args:
            logger: Optional logger used to report listener failures
        """
        self.logger = logger or logging.getLogger(__name__)
        self.listeners: Dict[str, List[Callable]] = defaultdict(list)

    def on(self, event_type: EventName, listener: Callable) -> None:
        """
        Subscribe to an event.

        Args:
            event_type: Event name, or ``"*"`` for every event
            listener: Synchronous callable

        Raises:
            TypeError: If the listener is not a plain callable
        """
        if not callable(listener):
            raise TypeError(f"Listener must be callable, got {listener!r}")
        if inspect.iscoroutinefunction(listener) or inspect.iscoroutinefunction(getattr(listener, "__call__", None)):
            raise TypeError("Listeners are dispatched synchronously and cannot be coroutine functions")

        name = event_name(event_type)
        self.listeners[name].append(listener)
        self.logger.debug(f"Subscribed listener to {name}")

    def off(self, event_type: EventName, listener: Optional[Callable] = None) -> None:
        """
        Unsubscribe from an event.

        Args:
            event_type: Event name
            listener: Listener to remove; all listeners of the event when omitted
        """
        name = event_name(event_type)
        if name not in self.listeners:
            return

        if listener is None:
            del self.listeners[name]
            return

        try:
            self.listeners[name].remove(listener)
        except ValueError:
            pass  # Listener not found
        if not self.listeners[name]:
            del self.listeners[name]

    def emit(self, event_type: EventName, payload: Any) -> None:
        """
        Dispatch an event to its listeners, then to wildcard listeners.

        Args:
            event_type: Event name
            payload: Event payload
        """
        name = event_name(event_type)

        for listener in list(self.listeners.get(name, [])):
            self._dispatch(name, listener, payload)

        if name != self.WILDCARD:
            for listener in list(self.listeners.get(self.WILDCARD, [])):
                self._dispatch(name, listener, name, payload)

    def listener_count(self, event_type: Optional[EventName] = None) -> int:
        """Count listeners for one event, or for all events."""
        if event_type is None:
            return sum(len(listeners) for listeners in self.listeners.values())
        return len(self.listeners.get(event_name(event_type), []))

    def clear(self) -> None:
        """Remove all listeners."""
        self.listeners.clear()

    def _dispatch(self, name: str, listener: Callable, *args: Any) -> None:
        try:
            result = listener(*args)
        except Exception as e:
            self.logger.error(f"Listener {listener!r} failed for {name}: {e}", exc_info=True)
            return

        if inspect.isawaitable(result):
            # Nothing awaits the result; close it so it is dropped without a warning
            close = getattr(result, "close", None)
            if close is not None:
                close()
            self.logger.error(f"Listener {listener!r} returned an awaitable for {name}; it was not run")

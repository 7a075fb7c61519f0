"""
Lifecycle management module: states, objects, events and the manager.
"""

from .state import CREATED, STARTED, STOPPED, LifecycleState, StateLike, StateName, is_state_like, same_state
from .object import LifecycleObject
from .factory import DefaultLifecycleFactory
from .events import (
    EventEmitter,
    LifecycleEvent,
    LifecycleEventType,
    ObjectCreatedEvent,
    ObjectDeletedEvent,
    ObjectStateChangedEvent,
)
from .manager import LifecycleManager, TransitionTarget

__all__ = [
    "CREATED",
    "DefaultLifecycleFactory",
    "EventEmitter",
    "LifecycleEvent",
    "LifecycleEventType",
    # Main classes
    "LifecycleManager",
    "LifecycleObject",
    "LifecycleState",
    "ObjectCreatedEvent",
    "ObjectDeletedEvent",
    "ObjectStateChangedEvent",
    "STARTED",
    "STOPPED",
    "StateLike",
    "StateName",
    "TransitionTarget",
    "is_state_like",
    "same_state",
]

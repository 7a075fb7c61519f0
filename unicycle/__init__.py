"""
unicycle: a generic object lifecycle framework.

Assigns identity to application objects, tracks them through an open
created/started/stopped state machine, persists them through a
pluggable store and publishes an event for every change.
"""

from .config import ConfigError, ConfigManager
from .core import IdGenerator, LifecycleError, LifecycleFactory, LifecycleStore, ObjectId, UnicycleError
from .lifecycle import (
    CREATED,
    STARTED,
    STOPPED,
    DefaultLifecycleFactory,
    EventEmitter,
    LifecycleEventType,
    LifecycleManager,
    LifecycleObject,
    LifecycleState,
    ObjectCreatedEvent,
    ObjectDeletedEvent,
    ObjectStateChangedEvent,
    StateLike,
)
from .logging import LoggingManager
from .storage import MemoryLifecycleStore, SequentialIdGenerator, UuidIdGenerator

__version__ = "0.1.0"

__all__ = [
    "CREATED",
    "ConfigError",
    "ConfigManager",
    "DefaultLifecycleFactory",
    "EventEmitter",
    "IdGenerator",
    "LifecycleError",
    "LifecycleEventType",
    "LifecycleFactory",
    "LifecycleManager",
    "LifecycleObject",
    "LifecycleState",
    "LifecycleStore",
    "LoggingManager",
    "MemoryLifecycleStore",
    "ObjectCreatedEvent",
    "ObjectDeletedEvent",
    "ObjectId",
    "ObjectStateChangedEvent",
    "STARTED",
    "STOPPED",
    "SequentialIdGenerator",
    "StateLike",
    "UnicycleError",
    "UuidIdGenerator",
]

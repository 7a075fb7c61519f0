"""
Lifecycle manager coordinating object creation, state transitions and
deletion.
"""

from collections.abc import Callable
import logging
from typing import Any, Dict, List, Optional, Union

from ..config.manager import ConfigManager, ConfigValidator
from ..core.base import IdGenerator, LifecycleFactory, LifecycleStore, ObjectId
from ..core.exceptions import LifecycleError
from ..storage.ids import SequentialIdGenerator, UuidIdGenerator
from ..storage.memory import MemoryLifecycleStore
from .events import (
    EventEmitter,
    EventName,
    LifecycleEvent,
    LifecycleEventType,
    ObjectCreatedEvent,
    ObjectDeletedEvent,
    ObjectStateChangedEvent,
    event_name,
)
from .factory import DefaultLifecycleFactory
from .object import LifecycleObject, utc_now
from .state import STARTED, STOPPED, StateLike

TransitionTarget = Union[ObjectId, LifecycleObject]


class LifecycleManager:
    """
    Manager for lifecycle objects.

    The only component that moves objects between states. Every
    transition mutates the object, persists it through the store and
    then notifies listeners on ``events``, in that order, so a listener
    reading the store sees the new state.
    """

    def __init__(
        self,
        factory: Optional[LifecycleFactory] = None,
        store: Optional[LifecycleStore] = None,
        id_generator: Optional[IdGenerator] = None,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the lifecycle manager.

        Args:
            factory: Object factory (defaults to DefaultLifecycleFactory)
            store: Object store (defaults to MemoryLifecycleStore)
            id_generator: Identifier generator (defaults to UuidIdGenerator)
            config: Configuration dictionary; the ``lifecycle`` section is used
            logger: Logger instance

        Raises:
            ConfigValidationError: If the ``lifecycle`` section is invalid
        """
        lifecycle_config = ConfigValidator().validate(
            {"lifecycle": (config or {}).get("lifecycle", {})}
        ).lifecycle
        self.config = lifecycle_config.model_dump()
        self.logger = logger or logging.getLogger(__name__)

        # Stores may define __len__, so an empty one is falsy
        self.factory = factory if factory is not None else DefaultLifecycleFactory()
        self.store = store if store is not None else MemoryLifecycleStore(logger=self.logger)
        self.id_generator = id_generator if id_generator is not None else UuidIdGenerator()
        self.events = EventEmitter(self.logger)

        # Event history
        self.event_history: List[LifecycleEvent] = []
        self.max_event_history = lifecycle_config.max_event_history
        self.record_history = lifecycle_config.record_history

    @classmethod
    def from_config(
        cls,
        config: Union[Dict[str, Any], ConfigManager],
        factory: Optional[LifecycleFactory] = None,
        logger: Optional[logging.Logger] = None
    ) -> "LifecycleManager":
        """
        Build a manager with collaborators chosen by configuration.

        Args:
            config: Configuration dictionary or loaded ConfigManager
            factory: Optional object factory
            logger: Optional logger instance

        Returns:
            A manager backed by a memory store

        Raises:
            ConfigValidationError: If the configuration is invalid
        """
        if isinstance(config, ConfigManager):
            lifecycle_config = config.get_lifecycle_config()
        else:
            lifecycle_config = ConfigValidator().validate(config).lifecycle.model_dump()

        if lifecycle_config["id_strategy"] == "sequential":
            id_generator: IdGenerator = SequentialIdGenerator()
        else:
            id_generator = UuidIdGenerator()

        store = MemoryLifecycleStore(strict=lifecycle_config["strict_store"], logger=logger)

        return cls(
            factory=factory,
            store=store,
            id_generator=id_generator,
            config={"lifecycle": lifecycle_config},
            logger=logger
        )

    def on(self, event_type: EventName, listener: Callable) -> None:
        """Subscribe a listener to a lifecycle event or to ``"*"``."""
        self.events.on(event_type, listener)

    def off(self, event_type: EventName, listener: Optional[Callable] = None) -> None:
        """Unsubscribe a listener from a lifecycle event."""
        self.events.off(event_type, listener)

    async def create(self, initial_properties: Optional[Dict[str, Any]] = None) -> LifecycleObject:
        """
        Create, identify and persist a new lifecycle object.

        Args:
            initial_properties: Optional properties to seed the object with

        Returns:
            The persisted object in the created state
        """
        obj = await self.factory.create(initial_properties)
        obj.id = self.id_generator.generate(obj)
        await self.store.create(obj)

        self.logger.info(f"Created lifecycle object {obj.id}", extra={
            "object_id": obj.id,
            "event_type": LifecycleEventType.CREATED.value
        })

        self._emit(ObjectCreatedEvent(object=obj, timestamp=utc_now()))
        return obj

    async def get(self, object_id: ObjectId) -> Optional[LifecycleObject]:
        """
        Get a lifecycle object.

        Args:
            object_id: Identifier of the object

        Returns:
            The object or None if the id is unknown
        """
        return await self.store.get(object_id)

    async def start(self, target: TransitionTarget) -> None:
        """
        Move an object to the started state.

        Raises:
            LifecycleError: If the object cannot be found
        """
        await self.change_state(target, STARTED)

    async def stop(self, target: TransitionTarget) -> None:
        """
        Move an object to the stopped state.

        Raises:
            LifecycleError: If the object cannot be found
        """
        await self.change_state(target, STOPPED)

    async def delete(self, object_id: ObjectId) -> None:
        """
        Delete an object.

        Unknown ids are not an error; the deletion event is emitted either way.

        Args:
            object_id: Identifier of the object
        """
        await self.store.delete(object_id)

        self.logger.info(f"Deleted lifecycle object {object_id}", extra={
            "object_id": object_id,
            "event_type": LifecycleEventType.DELETED.value
        })

        self._emit(ObjectDeletedEvent(object_id=object_id, timestamp=utc_now()))

    async def change_state(self, target: TransitionTarget, state: StateLike) -> None:
        """
        Move an object to an arbitrary state.

        Any state is accepted from any state. The object is updated in
        place, persisted, and then ``object:stateChanged`` is emitted. If
        persisting fails the object is put back into its previous state
        and the store error propagates without an event.

        Args:
            target: Object id or an already resolved object
            state: New state

        Raises:
            LifecycleError: If the target cannot be resolved or the state is malformed
        """
        obj = await self._resolve(target)

        old_state = obj.state
        obj.state = state
        try:
            await self._on_change(obj)
        except Exception:
            obj.state = old_state
            raise

        self.logger.info(f"Lifecycle object {obj.id} changed state: {old_state.name} -> {state.name}", extra={
            "object_id": obj.id,
            "event_type": LifecycleEventType.STATE_CHANGED.value
        })

        self._emit(ObjectStateChangedEvent(
            object=obj,
            old_state=old_state,
            new_state=state,
            timestamp=utc_now()
        ))

    def get_event_history(
        self,
        object_id: Optional[ObjectId] = None,
        event_type: Optional[EventName] = None,
        limit: Optional[int] = None
    ) -> List[LifecycleEvent]:
        """
        Get filtered event history.

        Args:
            object_id: Optional object ID filter
            event_type: Optional event type filter
            limit: Optional limit on number of events (most recent kept)

        Returns:
            List of matching events, oldest first
        """
        events = self.event_history

        if object_id is not None:
            events = [e for e in events if e.object_id == object_id]

        if event_type is not None:
            name = event_name(event_type)
            events = [e for e in events if e.event_type == name]

        if limit is not None:
            events = events[-limit:]

        return list(events)

    def clear_event_history(self) -> None:
        self.event_history = []

    def get_manager_status(self) -> Dict[str, Any]:
        """
        Get lifecycle manager status.

        Returns:
            Dictionary containing manager status
        """
        return {
            "event_history_size": len(self.event_history),
            "max_event_history": self.max_event_history,
            "record_history": self.record_history,
            "listeners": {
                name: len(listeners) for name, listeners in self.events.listeners.items()
            },
            "store": type(self.store).__name__,
            "id_generator": type(self.id_generator).__name__,
        }

    async def _resolve(self, target: TransitionTarget) -> LifecycleObject:
        """Turn a transition target into a concrete object."""
        if isinstance(target, LifecycleObject):
            return target

        obj = await self.get(target)
        if obj is None:
            raise LifecycleError(
                f"Lifecycle object not found: {target}",
                context={"object_id": target}
            )
        return obj

    async def _on_change(self, obj: LifecycleObject) -> None:
        """Persist a mutated object. Subclasses may extend this."""
        await self.store.update(obj)

    def _emit(self, event: LifecycleEvent) -> None:
        if self.record_history:
            self.event_history.append(event)
            if len(self.event_history) > self.max_event_history:
                self.event_history = self.event_history[-self.max_event_history:]
                self.logger.debug(f"Trimmed event history to {self.max_event_history} events")

        self.events.emit(event.event_type, event)

"""
Base classes for the collaborators of the lifecycle manager.

The manager depends only on these abstractions, so storage, identity
and instantiation strategies can be swapped without touching the core.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

if TYPE_CHECKING:
    from ..lifecycle.object import LifecycleObject

ObjectId = Union[str, int]


class LifecycleStore(ABC):
    """
    Abstract persistence layer for lifecycle objects.

    Implementations must treat ``update`` as an upsert and ``delete`` as
    idempotent.
    """

    @abstractmethod
    async def create(self, obj: "LifecycleObject") -> None:
        """
        Persist a newly created object.

        Args:
            obj: Object to store, with its id already assigned
        """
        pass

    @abstractmethod
    async def get(self, object_id: ObjectId) -> Optional["LifecycleObject"]:
        """
        Look up an object by id.

        Args:
            object_id: Identifier of the object

        Returns:
            The stored object or None if the id is unknown
        """
        pass

    @abstractmethod
    async def update(self, obj: "LifecycleObject") -> None:
        """Persist the current state of an object."""
        pass

    @abstractmethod
    async def delete(self, object_id: ObjectId) -> None:
        """Remove an object; unknown ids are ignored."""
        pass


class IdGenerator(ABC):
    """Produces a unique identifier for a new lifecycle object."""

    @abstractmethod
    def generate(self, obj: "LifecycleObject") -> ObjectId:
        """
        Generate an identifier for the given object.

        Args:
            obj: Object that will receive the identifier

        Returns:
            An identifier unique for the lifetime of the store
        """
        pass


class LifecycleFactory(ABC):
    """Instantiates blank lifecycle objects."""

    @abstractmethod
    async def create(self, initial_properties: Optional[Dict[str, Any]] = None) -> "LifecycleObject":
        """
        Create a new lifecycle object.

        Args:
            initial_properties: Optional properties to seed the object with

        Returns:
            A new object in the created state, without an id
        """
        pass

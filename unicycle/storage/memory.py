"""
In-memory lifecycle object store.
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from ..core.base import LifecycleStore, ObjectId
from ..core.exceptions import LifecycleError

if TYPE_CHECKING:
    from ..lifecycle.object import LifecycleObject


class MemoryLifecycleStore(LifecycleStore):
    """
    Dictionary-backed store keyed by object id.

    Objects are kept by reference, so a retrieved object is the same
    instance the manager mutates. By default ``create`` silently replaces
    an object with the same id; with ``strict=True`` it raises instead.
    """

    def __init__(self, strict: bool = False, logger: Optional[logging.Logger] = None) -> None:
        """
        Initialize the store.

        Args:
            strict: Reject duplicate ids on create
            logger: Optional logger instance
        """
        self.strict = strict
        self.logger = logger or logging.getLogger(__name__)
        self._objects: Dict[ObjectId, "LifecycleObject"] = {}

    async def create(self, obj: "LifecycleObject") -> None:
        if obj.id is None:
            raise LifecycleError("Cannot store a lifecycle object without an id")

        if obj.id in self._objects:
            if self.strict:
                raise LifecycleError(
                    f"Lifecycle object already exists: {obj.id}",
                    context={"object_id": obj.id}
                )
            self.logger.warning(f"Overwriting existing lifecycle object {obj.id}")

        self._objects[obj.id] = obj

    async def get(self, object_id: ObjectId) -> Optional["LifecycleObject"]:
        return self._objects.get(object_id)

    async def update(self, obj: "LifecycleObject") -> None:
        if obj.id is None:
            raise LifecycleError("Cannot store a lifecycle object without an id")
        self._objects[obj.id] = obj

    async def delete(self, object_id: ObjectId) -> None:
        self._objects.pop(object_id, None)

    def ids(self) -> List[ObjectId]:
        """List the ids of all stored objects."""
        return list(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._objects

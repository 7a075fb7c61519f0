"""
Lifecycle object: identity, current state and a property bag.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from ..core.base import ObjectId
from ..core.exceptions import LifecycleError
from .state import CREATED, StateLike, is_state_like


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class LifecycleObject:
    """
    Entity managed by the lifecycle manager.

    Holds an identifier assigned once at creation, the current lifecycle
    state and arbitrary named properties. Applications typically subclass
    it to add typed accessors over the property bag.
    """

    def __init__(self) -> None:
        """Initialize a blank object in the created state."""
        self._id: Optional[ObjectId] = None
        self._state: StateLike = CREATED
        self._created_at = utc_now()
        self._updated_at = self._created_at
        self._properties: Dict[str, Any] = {}

    @property
    def id(self) -> Optional[ObjectId]:
        """Identifier of the object, None until assigned."""
        return self._id

    @id.setter
    def id(self, value: ObjectId) -> None:
        if self._id is not None and self._id != value:
            raise LifecycleError(
                f"Lifecycle object id is already assigned: {self._id}",
                context={"object_id": self._id, "new_id": value}
            )
        self._id = value

    @property
    def state(self) -> StateLike:
        """Current lifecycle state."""
        return self._state

    @state.setter
    def state(self, value: StateLike) -> None:
        if not is_state_like(value):
            raise LifecycleError(
                f"Invalid lifecycle state: {value!r}",
                context={"object_id": self._id}
            )
        self._state = value

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        """Time of the last property mutation; state changes do not touch it."""
        return self._updated_at

    @property
    def properties(self) -> Dict[str, Any]:
        """Copy of all properties."""
        return dict(self._properties)

    def set_property(self, key: str, value: Any) -> None:
        self._properties[key] = value
        self._touch()

    def get_property(self, key: str, default: Any = None) -> Any:
        return self._properties.get(key, default)

    def has_property(self, key: str) -> bool:
        return key in self._properties

    def delete_property(self, key: str) -> None:
        """Remove a property; missing keys are ignored."""
        if key in self._properties:
            del self._properties[key]
            self._touch()

    def set_properties(self, properties: Mapping[str, Any]) -> None:
        """
        Set several properties at once.

        Args:
            properties: Mapping of property names to values
        """
        if not properties:
            return
        self._properties.update(properties)
        self._touch()

    def require_property(self, key: str) -> Any:
        """
        Get a property that must be present.

        Args:
            key: Property name

        Returns:
            The property value

        Raises:
            LifecycleError: If the property is not set
        """
        if key not in self._properties:
            raise LifecycleError(
                f"Required property is missing: {key}",
                context={"object_id": self._id, "property": key}
            )
        return self._properties[key]

    def to_dict(self) -> Dict[str, Any]:
        """Convert the object to a dictionary summary."""
        return {
            "id": self._id,
            "state": self._state.name,
            "created_at": self._created_at.isoformat(),
            "updated_at": self._updated_at.isoformat(),
            "properties": self.properties,
        }

    def _touch(self) -> None:
        self._updated_at = utc_now()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, state={self._state.name!r})"

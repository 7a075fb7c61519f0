"""
Default lifecycle object factory.
"""

from typing import Any, Dict, Optional, Type

from ..core.base import LifecycleFactory
from .object import LifecycleObject


class DefaultLifecycleFactory(LifecycleFactory):
    """
    Factory instantiating a configurable ``LifecycleObject`` subclass.

    The class must be constructible without arguments.
    """

    def __init__(self, object_class: Type[LifecycleObject] = LifecycleObject) -> None:
        """
        Initialize the factory.

        Args:
            object_class: Class to instantiate for new objects
        """
        if not (isinstance(object_class, type) and issubclass(object_class, LifecycleObject)):
            raise TypeError(f"object_class must be a LifecycleObject subclass, got {object_class!r}")
        self.object_class = object_class

    async def create(self, initial_properties: Optional[Dict[str, Any]] = None) -> LifecycleObject:
        obj = self.object_class()
        if initial_properties:
            obj.set_properties(initial_properties)
        return obj

"""
Identifier generators.
"""

import itertools
import threading
from typing import TYPE_CHECKING
from uuid import uuid4

from ..core.base import IdGenerator

if TYPE_CHECKING:
    from ..lifecycle.object import LifecycleObject


class UuidIdGenerator(IdGenerator):
    """Generates random UUID4 strings."""

    def generate(self, obj: "LifecycleObject") -> str:
        return str(uuid4())


class SequentialIdGenerator(IdGenerator):
    """
    Generates increasing integer ids.

    Uniqueness only holds per generator instance, so share one instance
    per store.
    """

    def __init__(self, start: int = 1) -> None:
        """
        Initialize the generator.

        Args:
            start: First id to hand out
        """
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def generate(self, obj: "LifecycleObject") -> int:
        with self._lock:
            return next(self._counter)

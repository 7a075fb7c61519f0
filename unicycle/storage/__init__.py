"""
Default storage and identity collaborators for the lifecycle manager.
"""

from .ids import SequentialIdGenerator, UuidIdGenerator
from .memory import MemoryLifecycleStore

__all__ = [
    "MemoryLifecycleStore",
    "SequentialIdGenerator",
    "UuidIdGenerator",
]

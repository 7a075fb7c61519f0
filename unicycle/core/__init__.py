"""
Core module for the unicycle lifecycle framework.

This module contains the error types and the collaborator abstractions
the lifecycle manager is built on.
"""

from .base import IdGenerator, LifecycleFactory, LifecycleStore, ObjectId
from .exceptions import LifecycleError, UnicycleError

__all__ = [
    "IdGenerator",
    "LifecycleError",
    "LifecycleFactory",
    "LifecycleStore",
    "ObjectId",
    "UnicycleError",
]

"""
Lifecycle state values.

A state is any value with a non-empty string ``name``. The built-in
states are plain ``LifecycleState`` instances; applications can add
their own either as ``LifecycleState("paused")`` or as frozen
dataclasses carrying extra fields.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Protocol, runtime_checkable


class StateName(str, Enum):
    """Names of the built-in lifecycle states."""
    CREATED = "created"
    STARTED = "started"
    STOPPED = "stopped"


@runtime_checkable
class StateLike(Protocol):
    """Structural shape every lifecycle state satisfies."""

    @property
    def name(self) -> str:
        ...


@dataclass(frozen=True)
class LifecycleState:
    """
    Immutable named lifecycle state.

    Equality and hashing only consider ``name``; ``data`` is an optional
    read-only payload for custom extensions.
    """
    name: str
    data: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("State name must be a non-empty string")
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def __str__(self) -> str:
        return self.name


CREATED = LifecycleState(StateName.CREATED.value)
STARTED = LifecycleState(StateName.STARTED.value)
STOPPED = LifecycleState(StateName.STOPPED.value)


def is_state_like(value: Any) -> bool:
    """Check whether a value can be used as a lifecycle state."""
    name = getattr(value, "name", None)
    return isinstance(name, str) and bool(name)


def same_state(a: StateLike, b: StateLike) -> bool:
    """Compare two states of possibly different types by name."""
    return a.name == b.name

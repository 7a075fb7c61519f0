"""
Pytest configuration and shared fixtures for the test suite.

This module provides common test fixtures and configuration that can be
used across all test modules.
"""

import logging
from typing import Any, Dict, List, Tuple

import pytest

from unicycle.lifecycle.manager import LifecycleManager
from unicycle.storage.ids import SequentialIdGenerator
from unicycle.storage.memory import MemoryLifecycleStore


class EventRecorder:
    """Wildcard listener collecting every emitted event in order."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Any]] = []

    def __call__(self, event_type: str, payload: Any) -> None:
        self.events.append((event_type, payload))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def of_type(self, event_type: str) -> List[Any]:
        return [payload for name, payload in self.events if name == event_type]


@pytest.fixture
def test_logger() -> logging.Logger:
    """Provide a logger for components under test."""
    return logging.getLogger("unicycle.tests")


@pytest.fixture
def store() -> MemoryLifecycleStore:
    """Provide an empty in-memory store."""
    return MemoryLifecycleStore()


@pytest.fixture
def manager(store: MemoryLifecycleStore, test_logger: logging.Logger) -> LifecycleManager:
    """Provide a lifecycle manager backed by the store fixture."""
    return LifecycleManager(store=store, logger=test_logger)


@pytest.fixture
def sequential_manager(test_logger: logging.Logger) -> LifecycleManager:
    """Provide a lifecycle manager handing out integer ids."""
    return LifecycleManager(id_generator=SequentialIdGenerator(), logger=test_logger)


@pytest.fixture
def recorder(manager: LifecycleManager) -> EventRecorder:
    """Record every event emitted by the manager fixture."""
    event_recorder = EventRecorder()
    manager.on("*", event_recorder)
    return event_recorder


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide sample configuration for testing."""
    return {
        "lifecycle": {
            "max_event_history": 50,
            "record_history": True,
            "id_strategy": "sequential",
            "strict_store": True,
        },
        "logging": {
            "level": "DEBUG",
        },
    }

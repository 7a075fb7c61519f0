"""
Tests for lifecycle state values.
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from unicycle.lifecycle.state import (
    CREATED,
    STARTED,
    STOPPED,
    LifecycleState,
    StateLike,
    StateName,
    is_state_like,
    same_state,
)


@dataclass(frozen=True)
class ErrorState:
    name: str = "error"
    error_message: str = ""


class TestLifecycleState:
    """Test LifecycleState values."""

    def test_builtin_state_names(self):
        assert CREATED.name == "created"
        assert STARTED.name == "started"
        assert STOPPED.name == "stopped"
        assert [s.value for s in StateName] == ["created", "started", "stopped"]

    def test_equality_uses_name_only(self):
        assert LifecycleState("paused", {"reason": "a"}) == LifecycleState("paused", {"reason": "b"})
        assert LifecycleState("started") == STARTED
        assert LifecycleState("paused") != STARTED
        assert hash(LifecycleState("started")) == hash(STARTED)

    def test_state_is_immutable(self):
        with pytest.raises(FrozenInstanceError):
            STARTED.name = "stopped"

    def test_data_is_read_only(self):
        state = LifecycleState("error", {"message": "boom"})

        assert state.data["message"] == "boom"
        with pytest.raises(TypeError):
            state.data["message"] = "other"

    def test_data_is_copied(self):
        payload = {"message": "boom"}
        state = LifecycleState("error", payload)
        payload["message"] = "changed"

        assert state.data["message"] == "boom"

    @pytest.mark.parametrize("name", ["", None, 5])
    def test_invalid_name_rejected(self, name):
        with pytest.raises(ValueError):
            LifecycleState(name)

    def test_str_is_name(self):
        assert str(STOPPED) == "stopped"


class TestStateShape:
    """Test structural state helpers."""

    def test_custom_dataclass_is_state_like(self):
        state = ErrorState(error_message="disk full")

        assert is_state_like(state)
        assert isinstance(state, StateLike)

    def test_values_without_name_are_not_state_like(self):
        assert not is_state_like(None)
        assert not is_state_like("started")
        assert not is_state_like(ErrorState(name=""))

    def test_same_state_across_types(self):
        assert same_state(ErrorState(), LifecycleState("error"))
        assert not same_state(ErrorState(), STARTED)

import pytest

from relay_core.domain.conversation import ConversationState, invert_message, invert_role
from relay_core.domain.models import ChatMessage


def test_invert_role():
    assert invert_role("assistant") == "user"
    assert invert_role("user") == "assistant"
    assert invert_role("system") == "system"
    assert invert_message(ChatMessage(role="assistant", content="x")) == ChatMessage(role="user", content="x")


def test_state_commit_turn():
    state = ConversationState(model_count=2)
    state.append_external(ChatMessage(role="user", content="start"))
    state.commit_turn(ChatMessage(role="assistant", content="ping"))
    assert state.history(0)[-1] == ChatMessage(role="assistant", content="ping")
    assert state.history(1)[-1] == ChatMessage(role="user", content="ping")
    assert state.active == 1
    state.commit_turn(ChatMessage(role="assistant", content="pong"))
    assert state.active == 0
    assert len(state.history(0)) == len(state.history(1)) == 3


def test_state_history_is_a_snapshot():
    state = ConversationState(model_count=1)
    snapshot = state.active_history
    state.append_external(ChatMessage(role="system", content="s"))
    assert snapshot == ()
    assert state.active_history == (ChatMessage(role="system", content="s"),)


def test_state_requires_a_model():
    with pytest.raises(ValueError):
        ConversationState(model_count=0)

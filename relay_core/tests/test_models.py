import dataclasses

import pytest

from relay_core.domain.models import ChatMessage, ChatRequest, ChatStreamChunk


def test_message_payload_round_trip():
    for role in ("user", "assistant", "system"):
        msg = ChatMessage(role=role, content="héllo\n世界")
        assert ChatMessage.from_payload(msg.to_payload()) == msg


def test_message_is_immutable():
    msg = ChatMessage(role="user", content="hi")
    with pytest.raises(dataclasses.FrozenInstanceError):
        msg.content = "changed"


def test_request_payload():
    req = ChatRequest(model="llama3", messages=[ChatMessage(role="user", content="hi")])
    assert req.to_payload() == {
        "model": "llama3",
        "messages": [{"role": "user", "content": "hi"}],
        "stream": True,
    }


def test_chunk_from_payload_defaults():
    chunk = ChatStreamChunk.from_payload({"message": {"role": "assistant", "content": "x"}})
    assert chunk.message == ChatMessage(role="assistant", content="x")
    assert chunk.done is False
    assert chunk.telemetry.eval_count == 0

    empty = ChatStreamChunk.from_payload({"done": True})
    assert empty.message.content == ""
    assert empty.done is True

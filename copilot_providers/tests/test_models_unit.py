"""DTO behavior: messages, usage parsing and fragments."""
from __future__ import annotations

import pytest

from copilot_providers.base.models import (
    ChatRequest,
    ContentPart,
    FinishReason,
    Message,
    ResponseFragment,
    Usage,
)


def test_message_parts():
    assert Message.user("hi").parts() == [ContentPart.of_text("hi")]  # nosec B101
    assert Message.user("").parts() == []  # nosec B101
    structured = Message(role="user", content=[ContentPart.of_text("a"), ContentPart.of_text("b")])
    assert structured.is_structured() is True  # nosec B101
    assert len(structured.parts()) == 2  # nosec B101


def test_usage_from_mapping_variants():
    assert Usage.from_mapping(None) is None  # nosec B101
    assert Usage.from_mapping({}) is None  # nosec B101
    usage = Usage.from_mapping({"prompt_tokens": 3, "completion_tokens": 4})
    assert usage == Usage(prompt_tokens=3, completion_tokens=4, total_tokens=7)  # nosec B101
    alt = Usage.from_mapping({"input_tokens": 1, "output_tokens": 2, "total_tokens": 10})
    assert alt == Usage(prompt_tokens=1, completion_tokens=2, total_tokens=10)  # nosec B101


def test_fragment_cannot_be_partial_and_complete():
    with pytest.raises(ValueError):
        ResponseFragment(text="x", partial=True, turn_complete=True)


def test_fragment_to_dict():
    fragment = ResponseFragment(text="done", turn_complete=True, finish_reason=FinishReason.STOP)
    assert fragment.to_dict() == {  # nosec B101
        "role": "assistant",
        "text": "done",
        "partial": False,
        "turn_complete": True,
        "finish_reason": "STOP",
        "usage": None,
    }


def test_chat_request_to_dict_serializes_parts():
    request = ChatRequest(messages=[Message(role="user", content=[ContentPart.of_text("x")])], model="m")
    data = request.to_dict()
    assert data["model"] == "m"  # nosec B101
    assert data["messages"] == [{"role": "user", "content": [{"type": "text", "text": "x"}]}]  # nosec B101

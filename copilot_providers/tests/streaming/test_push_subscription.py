"""Session events -> bridge events, subscription lifecycle."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List

from copilot_providers.base.models import Usage
from copilot_providers.base.streaming import EventKind, PushSubscription
from copilot_providers.base.streaming.push import event_type


class _Kind(Enum):
    DELTA = "assistant.message_delta"


@dataclass
class _Data:
    delta_content: str = ""


@dataclass
class _Event:
    type: Any
    data: Any = None


@dataclass
class _Session:
    handlers: List[Callable[[Any], None]] = field(default_factory=list)
    unsubscribed: int = 0

    def on(self, handler: Callable[[Any], None]) -> Callable[[], None]:
        self.handlers.append(handler)

        def _off() -> None:
            self.handlers.remove(handler)
            self.unsubscribed += 1

        return _off

    def emit(self, event: Any) -> None:
        for handler in list(self.handlers):
            handler(event)


def _ev(kind: str, **data: Any) -> Dict[str, Any]:
    return {"type": kind, "data": data}


def test_event_type_accepts_enums_and_mappings():
    assert event_type(_Event(_Kind.DELTA)) == "assistant.message_delta"  # nosec B101
    assert event_type({"type": "session.idle"}) == "session.idle"  # nosec B101
    assert event_type({}) == ""  # nosec B101


def test_translation_of_session_events():
    sub = PushSubscription(_Session(), lambda e: True)

    delta = sub.translate(_ev("assistant.message_delta", delta_content="he"))
    assert delta.kind is EventKind.DELTA and delta.text == "he"  # nosec B101
    camel = sub.translate(_ev("assistant.message_delta", deltaContent="llo"))
    assert camel.text == "llo"  # nosec B101
    assert sub.translate(_Event(_Kind.DELTA, _Data("obj"))).text == "obj"  # nosec B101
    assert sub.translate(_ev("assistant.message_delta", delta_content="")) is None  # nosec B101

    assert sub.translate(_ev("assistant.usage", input_tokens=3, output_tokens=4)) is None  # nosec B101
    final = sub.translate(_ev("assistant.message", content="hello"))
    assert final.kind is EventKind.FINAL and final.text == "hello"  # nosec B101
    assert final.usage == Usage(prompt_tokens=3, completion_tokens=4, total_tokens=7)  # nosec B101

    idle = sub.translate(_ev("session.idle"))
    assert idle.kind is EventKind.IDLE  # nosec B101

    error = sub.translate(_ev("session.error", message="quota exceeded"))
    assert error.kind is EventKind.ERROR and error.error == "quota exceeded"  # nosec B101
    assert sub.translate(_ev("session.error")).error == "session reported an error"  # nosec B101

    assert sub.translate(_ev("tool.execution_start", tool="x")) is None  # nosec B101


def test_subscription_forwards_and_unsubscribes_on_exit():
    session = _Session()
    received = []
    with PushSubscription(session, received.append) as sub:
        assert len(session.handlers) == 1  # nosec B101
        session.emit(_ev("assistant.message_delta", delta_content="a"))
        session.emit(_ev("unknown.event"))
        session.emit(_ev("session.idle"))
        sub.close()  # closing twice is harmless
    assert session.handlers == [] and session.unsubscribed == 1  # nosec B101
    assert [e.kind for e in received] == [EventKind.DELTA, EventKind.IDLE]  # nosec B101


def test_tool_request_message_does_not_end_the_turn():
    sub = PushSubscription(_Session(), lambda e: True)
    requests = [{"toolCallId": "c1", "name": "weather", "arguments": {"city": "Oslo"}}]
    assert sub.translate(_ev("assistant.message", content="", tool_requests=requests)) is None  # nosec B101
    assert sub.translate(_ev("assistant.message", content="Checking", toolRequests=requests)) is None  # nosec B101
    assert sub.translate(_ev("assistant.message", content="done", tool_requests=[])).kind is EventKind.FINAL  # nosec B101

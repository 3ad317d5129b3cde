"""Push transport: session callbacks -> bridge events.

A session object (owned by the caller) exposes ``on(handler)``, which
registers a callback and returns an unsubscribe function. Session events are
records with a ``type`` discriminator and a ``data`` payload, given either as
attribute objects or as mappings:

* ``assistant.message_delta`` -> delta (``delta_content``)
* ``assistant.message`` -> final (``content``), unless it carries
  ``tool_requests``: that message hands work to tools inside the session and
  the turn goes on, so it is skipped
* ``assistant.usage`` -> usage counters, folded into the next event
* ``session.idle`` -> idle
* ``session.error`` -> upstream error (``message``)

Other event types are ignored. The subscription always unsubscribes on exit.
"""
from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from ..models import Usage
from .bridge_event import BridgeEvent

MESSAGE_DELTA = "assistant.message_delta"
MESSAGE = "assistant.message"
USAGE = "assistant.usage"
SESSION_IDLE = "session.idle"
SESSION_ERROR = "session.error"


def _field(obj: Any, *names: str) -> Any:
    for name in names:
        if isinstance(obj, dict):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return None


def event_type(event: Any) -> str:
    """Type discriminator as a string (enum members use their value)."""
    raw = _field(event, "type")
    return str(getattr(raw, "value", raw) or "")


class PushSubscription:
    """Context manager wiring a session's events to a bridge listener."""

    def __init__(self, session: Any, listener: Callable[[BridgeEvent], bool]) -> None:
        self._session = session
        self._listener = listener
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._pending_usage: Optional[Usage] = None
        self._lock = threading.Lock()

    def __enter__(self) -> "PushSubscription":
        self._unsubscribe = self._session.on(self.handle)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    def handle(self, event: Any) -> None:
        """Session callback; runs on the session's thread."""
        translated = self.translate(event)
        if translated is not None:
            self._listener(translated)

    def translate(self, event: Any) -> Optional[BridgeEvent]:
        kind = event_type(event)
        data = _field(event, "data") or {}
        if kind == MESSAGE_DELTA:
            text = _field(data, "delta_content", "deltaContent") or ""
            return BridgeEvent.delta(str(text)) if text else None
        if kind == USAGE:
            self._pending_usage = Usage.from_mapping(_as_mapping(data)) or self._pending_usage
            return None
        if kind == MESSAGE:
            if _field(data, "tool_requests", "toolRequests"):
                return None
            text = _field(data, "content") or ""
            return BridgeEvent.final(str(text), usage=self._pending_usage)
        if kind == SESSION_IDLE:
            return BridgeEvent.idle(usage=self._pending_usage)
        if kind == SESSION_ERROR:
            message = _field(data, "message") or "session reported an error"
            return BridgeEvent.failure(str(message))
        return None


def _as_mapping(data: Any) -> dict:
    if isinstance(data, dict):
        return data
    return {
        name: getattr(data, name)
        for name in ("prompt_tokens", "completion_tokens", "total_tokens", "input_tokens", "output_tokens")
        if hasattr(data, name)
    }


__all__ = [
    "PushSubscription",
    "event_type",
    "MESSAGE_DELTA",
    "MESSAGE",
    "USAGE",
    "SESSION_IDLE",
    "SESSION_ERROR",
]

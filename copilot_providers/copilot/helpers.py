"""Copilot helpers module.

Purpose:
- Side-effect-free conversions between the package DTOs and the Copilot
  chat-completions wire format, plus prompt flattening for the session
  transport. Kept out of ``client.py`` so the orchestration stays readable.

Wire format:
- Requests follow the OpenAI chat-completions shape. A message with one part
  is sent as a plain string; several parts become a list of typed parts.
- Streaming chunks carry ``choices[0].delta.content`` and eventually a
  ``finish_reason``; ``usage`` may appear on any chunk.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..base.http import completion_headers
from ..base.models import (
    ChatRequest,
    ChatResponse,
    ContentPart,
    FinishReason,
    Message,
    ProviderMetadata,
    ResponseFragment,
    Usage,
)
from ..base.streaming import BridgeEvent

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "length": FinishReason.MAX_TOKENS,
    "content_filter": FinishReason.SAFETY,
}

_PROMPT_LABELS = {
    "user": "User",
    "model": "Assistant",
    "assistant": "Assistant",
    "system": "System",
}


def map_finish_reason(reason: Optional[str]) -> Optional[FinishReason]:
    """Map an OpenAI finish reason; unknown non-empty values become ``OTHER``."""
    if not reason:
        return None
    return _FINISH_REASONS.get(reason, FinishReason.OTHER)


def request_headers(api_key: str, stream: bool) -> Dict[str, str]:
    """Headers for ``POST /chat/completions``."""
    return completion_headers(bearer=api_key, stream=stream)


def _convert_message(message: Message) -> Dict[str, Any]:
    role = (message.role or "").lower()
    if role == "model":
        role = "assistant"
    parts = message.parts()
    if len(parts) == 1:
        only = parts[0]
        content: Any = only.text if only.text else only.to_dict()
    elif parts:
        content = [p.to_dict() for p in parts]
    else:
        content = ""
    return {"role": role, "content": content}


def convert_request(request: ChatRequest, *, model: str, stream: bool) -> Dict[str, Any]:
    """Build the chat-completions payload; unset sampling fields are omitted."""
    payload: Dict[str, Any] = {
        "model": model,
        "messages": [_convert_message(m) for m in request.messages],
        "stream": stream,
    }
    if request.temperature is not None:
        payload["temperature"] = request.temperature
    if request.top_p is not None:
        payload["top_p"] = request.top_p
    if request.max_tokens:
        payload["max_tokens"] = request.max_tokens
    if request.stop:
        payload["stop"] = list(request.stop)
    for key, value in (request.extra or {}).items():
        payload.setdefault(key, value)
    return payload


def convert_response(data: Dict[str, Any]) -> ResponseFragment:
    """Turn a non-streaming completion body into the single terminal fragment."""
    choices = data.get("choices") or []
    text = ""
    role = "assistant"
    finish = None
    if choices:
        choice = choices[0] or {}
        message = choice.get("message") or {}
        text = message.get("content") or ""
        role = message.get("role") or role
        finish = map_finish_reason(choice.get("finish_reason"))
    return ResponseFragment(
        role=role,
        text=text,
        turn_complete=True,
        finish_reason=finish,
        usage=Usage.from_mapping(data.get("usage")),
    )


def chunk_to_event(chunk: Dict[str, Any]) -> List[BridgeEvent]:
    """Translate one streaming chunk into bridge events (delta, then final).

    Usage reported on a chunk without a finish reason (including the
    choice-less usage chunk some servers send last) rides on a delta event.
    """
    usage = Usage.from_mapping(chunk.get("usage"))
    choices = chunk.get("choices") or []
    choice = (choices[0] or {}) if choices else {}
    delta = choice.get("delta") or {}
    content = delta.get("content")
    text = content if isinstance(content, str) else ""
    finish = map_finish_reason(choice.get("finish_reason"))
    events: List[BridgeEvent] = []
    if text or (usage is not None and finish is None):
        events.append(BridgeEvent.delta(text, usage=None if finish is not None else usage))
    if finish is not None:
        events.append(BridgeEvent.final(finish_reason=finish, usage=usage))
    return events


def to_chat_response(
    fragments: Iterable[ResponseFragment],
    *,
    meta: ProviderMetadata,
) -> ChatResponse:
    """Collapse a fragment sequence into a ``ChatResponse``.

    Partial fragments are concatenated; a turn-complete fragment replaces the
    concatenation with its full text.
    """
    chunks: List[str] = []
    terminal: Optional[ResponseFragment] = None
    for fragment in fragments:
        if fragment.turn_complete:
            terminal = fragment
        elif fragment.text:
            chunks.append(fragment.text)
    text = terminal.text if terminal is not None and terminal.text else "".join(chunks)
    return ChatResponse(
        text=text,
        parts=[ContentPart.of_text(text)] if text else None,
        raw=None,
        meta=meta,
        finish_reason=terminal.finish_reason if terminal else None,
        usage=terminal.usage if terminal else None,
    )


def extract_text(message: Optional[Message]) -> str:
    """Join the non-empty text parts of ``message`` with newlines."""
    if message is None:
        return ""
    return "\n".join(p.text for p in message.parts() if p.text)


def format_prompt(messages: Optional[Sequence[Message]]) -> str:
    """Flatten a conversation into one prompt for the session transport.

    A single message is sent as its bare text. Otherwise each non-empty
    message becomes ``"<Label>: <text>"`` and turns are separated by a blank
    line. Known roles map case-insensitively to ``User``/``Assistant``/
    ``System``; unknown roles keep their own name.
    """
    if not messages:
        return ""
    if len(messages) == 1:
        return extract_text(messages[0])
    turns: List[str] = []
    for message in messages:
        text = extract_text(message)
        if not text:
            continue
        label = _PROMPT_LABELS.get((message.role or "").lower(), message.role)
        turns.append(f"{label}: {text}")
    return "\n\n".join(turns)


__all__ = [
    "map_finish_reason",
    "request_headers",
    "convert_request",
    "convert_response",
    "chunk_to_event",
    "to_chat_response",
    "extract_text",
    "format_prompt",
]

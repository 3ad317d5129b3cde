"""
ChatRequest DTO for a Copilot generation.

Carries the model, ordered messages and sampling parameters. Conversion to
the upstream chat-completions payload lives in ``copilot.helpers``; this DTO
stays free of wire-format concerns. ``tools`` is only consumed by the session
transport.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .message import Message


@dataclass
class ChatRequest:
    """Normalized chat request.

    Attributes:
        messages: Ordered list of chat `Message` instances.
        model: Target model identifier; ``None`` uses the configured default.
        temperature: Sampling temperature.
        top_p: Nucleus sampling cutoff.
        max_tokens: Maximum completion tokens; ``None`` or 0 leaves it unset.
        stop: Optional stop sequences.
        tools: Tool definitions for the session transport.
        extra: JSON-serializable fields merged into the upstream payload.
    """

    messages: List[Message]
    model: Optional[str] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    stop: Optional[List[str]] = None
    tools: Optional[List[Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation of the request."""
        return {
            "model": self.model,
            "messages": [
                {
                    "role": m.role,
                    "content": (
                        m.content if isinstance(m.content, str)
                        else [p.to_dict() for p in m.content]
                    ),
                }
                for m in self.messages
            ],
            "temperature": self.temperature,
            "top_p": self.top_p,
            "max_tokens": self.max_tokens,
            "stop": self.stop,
            "extra": self.extra,
        }


__all__ = [
    "ChatRequest",
]

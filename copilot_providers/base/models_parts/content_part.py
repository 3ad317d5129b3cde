"""
Content part model for multi-part messages.

A message is either a plain string or a list of parts. Text parts carry
``text``; any other part keeps its payload in ``data`` and is forwarded to the
completion API unchanged (e.g. ``{"type": "image_url", "image_url": {...}}``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional


ContentPartType = Literal["text", "image_url", "other"]


@dataclass
class ContentPart:
    """One piece of message content.

    Attributes:
        type: ``"text"`` for text; anything else is passed through.
        text: Text for text parts.
        data: Payload for non-text parts, sent as-is.
    """

    type: ContentPartType
    text: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def of_text(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape of the part: ``{"type": "text", "text": ...}`` or the raw payload."""
        if self.text:
            return {"type": "text", "text": self.text}
        payload: Dict[str, Any] = {"type": self.type}
        if self.data:
            payload.update(self.data)
        return payload


__all__ = [
    "ContentPart",
    "ContentPartType",
]

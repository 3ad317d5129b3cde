"""
ChatResponse DTO: a whole turn collected from a generation.

Built by ``CopilotProvider.chat`` from the terminal fragment. The ``raw`` field
is excluded from serialization so large payloads are never logged.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .content_part import ContentPart
from .finish_reason import FinishReason
from .provider_metadata import ProviderMetadata
from .usage import Usage


@dataclass
class ChatResponse:
    """Provider response for one completed turn.

    Attributes:
        text: Assistant text (may be empty).
        parts: Structured content parts when available.
        raw: Native payload for diagnostics only.
        meta: Execution `ProviderMetadata`.
        finish_reason: Normalized finish reason, when reported.
        usage: Token counters, when reported.
    """

    text: Optional[str]
    parts: Optional[List[ContentPart]]
    raw: Optional[Any]
    meta: ProviderMetadata
    finish_reason: Optional[FinishReason] = None
    usage: Optional[Usage] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary excluding raw provider objects."""
        return {
            "text": self.text,
            "parts": [p.to_dict() for p in self.parts] if self.parts else None,
            "raw": None,
            "meta": self.meta.to_dict(),
            "finish_reason": self.finish_reason.value if self.finish_reason else None,
            "usage": self.usage.to_dict() if self.usage else None,
        }


__all__ = [
    "ChatResponse",
]

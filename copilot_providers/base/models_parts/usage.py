"""
Token usage counters reported by the completion service.

Populated from the ``usage`` object of a chat-completion response (or a
session usage event). Any counter may be missing; ``total`` is derived from
prompt and completion when the service omits it.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class Usage:
    """Prompt/completion/total token counts for one generation."""

    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["Usage"]:
        """Build from an OpenAI-style ``usage`` mapping; ``None`` when absent."""
        if not isinstance(data, Mapping):
            return None
        prompt = _as_int(data.get("prompt_tokens", data.get("input_tokens")))
        completion = _as_int(data.get("completion_tokens", data.get("output_tokens")))
        total = _as_int(data.get("total_tokens"))
        if total is None and prompt is not None and completion is not None:
            total = prompt + completion
        if prompt is None and completion is None and total is None:
            return None
        return cls(prompt_tokens=prompt, completion_tokens=completion, total_tokens=total)

    def to_dict(self) -> Dict[str, Optional[int]]:
        return asdict(self)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


__all__ = ["Usage"]

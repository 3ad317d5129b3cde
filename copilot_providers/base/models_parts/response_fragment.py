"""
ResponseFragment: one element of a generation's output sequence.

A generation yields zero or more partial fragments (incremental deltas, only
in streaming mode) and at most one fragment with ``turn_complete=True``, after
which nothing else is yielded. The turn-complete fragment carries the whole
assistant text for the turn, not just the last delta.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .finish_reason import FinishReason
from .usage import Usage


@dataclass(frozen=True)
class ResponseFragment:
    """A piece of generated output.

    Attributes:
        role: Author role, ``"assistant"`` for generated content.
        text: Delta text for partial fragments, full text for the final one.
            May be empty.
        partial: True for incremental streaming deltas.
        turn_complete: True for the single terminal fragment.
        finish_reason: Normalized :class:`FinishReason`, when reported.
        usage: Token counters, when reported.

    Raises:
        ValueError: when constructed with both ``partial`` and
            ``turn_complete`` set.
    """

    role: str = "assistant"
    text: str = ""
    partial: bool = False
    turn_complete: bool = False
    finish_reason: Optional[FinishReason] = None
    usage: Optional[Usage] = None

    def __post_init__(self) -> None:
        if self.partial and self.turn_complete:
            raise ValueError("a partial fragment cannot complete the turn")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "text": self.text,
            "partial": self.partial,
            "turn_complete": self.turn_complete,
            "finish_reason": self.finish_reason.value if self.finish_reason else None,
            "usage": self.usage.to_dict() if self.usage else None,
        }


__all__ = ["ResponseFragment"]

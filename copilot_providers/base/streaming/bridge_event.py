"""Internal events exchanged between a transport and the stream bridge.

Transports (the SSE reader, a push-session subscription) translate whatever
they receive into :class:`BridgeEvent` values; the bridge's merge loop is the
only consumer. Events are created, queued, consumed and discarded; nothing
retains them.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..errors import ProviderError
from ..models import FinishReason, Usage


class EventKind(str, Enum):
    DELTA = "delta"
    FINAL = "final"
    IDLE = "idle"
    ERROR = "error"


@dataclass(frozen=True)
class BridgeEvent:
    """Tagged event: delta text, final message, idle/done, or upstream error.

    ``FINAL`` with empty ``text`` means "use the text accumulated from the
    deltas so far". A ``DELTA`` with empty ``text`` only carries ``usage``.
    """

    kind: EventKind
    text: str = ""
    finish_reason: Optional[FinishReason] = None
    usage: Optional[Usage] = None
    error: Optional[Union[ProviderError, str]] = None
    role: str = "assistant"

    @property
    def is_terminal(self) -> bool:
        return self.kind is not EventKind.DELTA

    @classmethod
    def delta(cls, text: str, *, usage: Optional[Usage] = None) -> "BridgeEvent":
        return cls(EventKind.DELTA, text=text, usage=usage)

    @classmethod
    def final(
        cls,
        text: str = "",
        *,
        finish_reason: Optional[FinishReason] = None,
        usage: Optional[Usage] = None,
    ) -> "BridgeEvent":
        return cls(EventKind.FINAL, text=text, finish_reason=finish_reason, usage=usage)

    @classmethod
    def idle(cls, usage: Optional[Usage] = None) -> "BridgeEvent":
        return cls(EventKind.IDLE, usage=usage)

    @classmethod
    def failure(cls, error: Union[ProviderError, str]) -> "BridgeEvent":
        return cls(EventKind.ERROR, error=error)


__all__ = ["EventKind", "BridgeEvent"]

"""SupportsStreaming Protocol (single-class module).

Capability marker for providers that can stream incremental deltas.
"""

from __future__ import annotations

from typing import Iterator, Optional, Protocol, runtime_checkable

from ..cancellation import CancellationToken
from ..models import ChatRequest, ResponseFragment


@runtime_checkable
class SupportsStreaming(Protocol):
    """Providers that yield partial fragments before the turn-complete one."""

    def supports_streaming(self) -> bool:  # pragma: no cover - trivial
        """Return True if the provider supports streaming chat responses."""
        return True

    def stream_chat(
        self, request: ChatRequest, token: Optional[CancellationToken] = None
    ) -> Iterator[ResponseFragment]:  # pragma: no cover - interface
        """Partial fragments, then at most one ``turn_complete`` fragment."""
        ...

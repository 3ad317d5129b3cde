"""LLMProvider Protocol (single-class module).

Minimal generation contract shared by the HTTP and session providers.
"""

from __future__ import annotations

from typing import Iterator, Optional, Protocol, runtime_checkable

from ..cancellation import CancellationToken
from ..models import ChatRequest, ChatResponse, ResponseFragment


@runtime_checkable
class LLMProvider(Protocol):
    """A provider yields fragments for a request and can collect a whole turn."""

    @property
    def provider_name(self) -> str:
        """Canonical provider identifier, e.g. ``"github-copilot"``."""
        ...

    def generate(
        self,
        request: ChatRequest,
        stream: Optional[bool] = None,
        token: Optional[CancellationToken] = None,
    ) -> Iterator[ResponseFragment]:
        """Lazy fragment sequence; errors and cancellation are raised."""
        ...

    def chat(self, request: ChatRequest, token: Optional[CancellationToken] = None) -> ChatResponse:
        """Generate without streaming and return the collected turn."""
        ...

    def close(self) -> None:
        """Release held resources; idempotent."""
        ...

"""
Provider call metadata model.

Attached to every ``ChatResponse`` for observability: which provider and
model served the call, the HTTP status, latency and transport-specific notes.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional


@dataclass
class ProviderMetadata:
    """Execution metadata for a provider call.

    Attributes:
        provider_name: Canonical provider key (``"github-copilot"``).
        model_name: Resolved model name used for the call.
        transport: ``"http"`` for the chat-completions API, ``"session"`` for
            the push transport.
        http_status: HTTP status code when the call used HTTP.
        response_id: Upstream response identifier when available.
        latency_ms: End-to-end latency, in milliseconds.
        extra: JSON-serializable diagnostics (stream metrics, credential
            provenance).
    """

    provider_name: str
    model_name: str
    transport: Optional[str] = None
    http_status: Optional[int] = None
    response_id: Optional[str] = None
    latency_ms: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary of the metadata fields."""
        return asdict(self)


__all__ = [
    "ProviderMetadata",
]

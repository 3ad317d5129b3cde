"""
Provider-agnostic interfaces (Protocols) for the providers layer.

Re-exports the single-class modules under
``copilot_providers.base.interfaces_parts``.
"""

from __future__ import annotations

from .interfaces_parts import (
    HasDefaultModel,
    LLMProvider,
    SupportsStreaming,
)

__all__ = [
    "LLMProvider",
    "SupportsStreaming",
    "HasDefaultModel",
]

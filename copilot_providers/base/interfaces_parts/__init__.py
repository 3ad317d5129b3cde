"""Interfaces (Protocols) split into single-class modules.

``copilot_providers.base.interfaces`` re-exports them as the stable path.
"""

from .llm_provider import LLMProvider
from .supports_streaming import SupportsStreaming
from .has_default_model import HasDefaultModel

__all__ = [
    "LLMProvider",
    "SupportsStreaming",
    "HasDefaultModel",
]

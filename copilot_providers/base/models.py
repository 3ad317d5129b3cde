"""
Provider-agnostic domain models (DTOs) public surface.

Re-exports the one-class-per-file implementations under
``copilot_providers.base.models_parts``.
"""

from .models_parts.content_part import ContentPart, ContentPartType
from .models_parts.message import Message, Role
from .models_parts.provider_metadata import ProviderMetadata
from .models_parts.chat_request import ChatRequest
from .models_parts.chat_response import ChatResponse
from .models_parts.finish_reason import FinishReason
from .models_parts.usage import Usage
from .models_parts.response_fragment import ResponseFragment

__all__ = [
    "ContentPart",
    "ContentPartType",
    "Message",
    "Role",
    "ProviderMetadata",
    "ChatRequest",
    "ChatResponse",
    "FinishReason",
    "Usage",
    "ResponseFragment",
]

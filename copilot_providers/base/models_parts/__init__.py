"""Models parts package public surface.

Re-exports individual DTOs; `copilot_providers.base.models` remains the
primary import path.
"""

from .content_part import ContentPart, ContentPartType
from .message import Message, Role
from .provider_metadata import ProviderMetadata
from .chat_request import ChatRequest
from .chat_response import ChatResponse
from .finish_reason import FinishReason
from .usage import Usage
from .response_fragment import ResponseFragment

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

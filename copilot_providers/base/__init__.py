"""
Providers Base Package

Exports provider-agnostic contracts, DTOs, the stream bridge and the
provider factory used by the Copilot transports.

- Interfaces: normalized provider boundaries
- Models (DTOs): serialization-friendly request/response objects
- Streaming: event queue, bridge and SSE decoding
- Factory: lazy creation of providers by canonical name
"""

from .factory import ProviderFactory, UnknownProviderError
from .interfaces import HasDefaultModel, LLMProvider, SupportsStreaming
from .models import (
    ChatRequest,
    ChatResponse,
    ContentPart,
    FinishReason,
    Message,
    ProviderMetadata,
    ResponseFragment,
    Role,
    Usage,
)
from .timeouts import TimeoutConfig, get_timeout_config
from .cancellation import CancellationToken, CancelledError
from .errors import ErrorCode, ProviderError
from .streaming import BridgeEvent, EventKind, EventQueue, StreamBridge, StreamMetrics

__all__ = [
    # Models
    "Role",
    "ContentPart",
    "Message",
    "ProviderMetadata",
    "ChatRequest",
    "ChatResponse",
    "FinishReason",
    "ResponseFragment",
    "Usage",
    # Interfaces
    "LLMProvider",
    "SupportsStreaming",
    "HasDefaultModel",
    # Factory
    "ProviderFactory",
    "UnknownProviderError",
    # Errors
    "ErrorCode",
    "ProviderError",
    # Timeouts & Cancellation
    "TimeoutConfig",
    "get_timeout_config",
    "CancellationToken",
    "CancelledError",
    # Streaming
    "BridgeEvent",
    "EventKind",
    "EventQueue",
    "StreamBridge",
    "StreamMetrics",
]

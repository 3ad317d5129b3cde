"""Streaming package for provider layer.

Bridges push (session callbacks) and pull (SSE bodies) transports into a
single ordered, cancellable sequence of response fragments.
"""

from .bridge_event import BridgeEvent, EventKind
from .event_queue import EventQueue
from .bridge import StreamBridge
from .sse import SSEDecoder, iter_frames
from .pull import chunk_events
from .push import PushSubscription
from .streaming_metrics import StreamMetrics, apply_token_usage, build_token_usage

__all__ = [
    "BridgeEvent",
    "EventKind",
    "EventQueue",
    "StreamBridge",
    "SSEDecoder",
    "iter_frames",
    "chunk_events",
    "PushSubscription",
    "StreamMetrics",
    "apply_token_usage",
    "build_token_usage",
]

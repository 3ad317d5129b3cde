"""Streaming metrics data structures.

One :class:`StreamMetrics` per bridged generation; reported in the bridge's
finalize log event (``stream.end``, ``stream.error`` or ``stream.cancelled``).
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from ..models import Usage


@dataclass
class StreamMetrics:
    """Collected metrics for a single generation.

    Fields:
      emitted: fragments yielded to the caller
      dropped: delta events dropped by the bounded queue
      time_to_first_token_ms: latency until the first fragment with text
      total_duration_ms: latency until the terminal transition
      prompt_tokens/completion_tokens/total_tokens: usage when reported
    """

    emitted: int = 0
    dropped: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_token_usage(prompt: Optional[int], completion: Optional[int], total: Optional[int] = None) -> Dict[str, Optional[int]]:
    """Return a canonical token usage mapping."""
    derived_total = total
    if derived_total is None and (prompt is not None and completion is not None):
        derived_total = prompt + completion
    return {"prompt": prompt, "completion": completion, "total": derived_total}


def apply_token_usage(metrics: StreamMetrics, usage: Optional[Usage]) -> None:
    """Copy usage counters onto ``metrics`` (no-op for ``None``)."""
    if usage is None:
        return
    tokens = build_token_usage(usage.prompt_tokens, usage.completion_tokens, usage.total_tokens)
    metrics.prompt_tokens = tokens["prompt"]
    metrics.completion_tokens = tokens["completion"]
    metrics.total_tokens = tokens["total"]


__all__ = [
    "StreamMetrics",
    "apply_token_usage",
    "build_token_usage",
]

"""Pull transport: decoded SSE frames -> bridge events.

Each frame is a JSON chat-completion chunk. A caller-supplied ``translate``
maps a decoded chunk to zero or more :class:`BridgeEvent` values (the wire
schema lives with the provider). Malformed frames are logged and skipped; the
stream continues. After a final event the remaining frames are read only for
usage (servers report it on a trailing chunk); the final event is released
when the frames run out and carries the last usage seen. Running out of
frames without a final yields an idle event.
"""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from ..logging import LogContext, get_logger, normalized_log_event
from .bridge_event import BridgeEvent, EventKind

ChunkTranslator = Callable[[Dict[str, Any]], Iterable[BridgeEvent]]


def chunk_events(
    frames: Iterable[str],
    translate: ChunkTranslator,
    *,
    logger: Optional[logging.Logger] = None,
    ctx: Optional[LogContext] = None,
) -> Iterator[BridgeEvent]:
    logger = logger or get_logger("copilot_providers.streaming")
    last_usage = None
    final: Optional[BridgeEvent] = None
    for index, frame in enumerate(frames):
        try:
            chunk = json.loads(frame)
            if not isinstance(chunk, dict):
                raise ValueError(f"expected a JSON object, got {type(chunk).__name__}")
        except ValueError as e:
            normalized_log_event(
                logger,
                "stream.decode_error",
                ctx,
                phase="mid_stream",
                error=str(e),
                frame_index=index,
                level=logging.WARNING,
            )
            continue
        for event in translate(chunk):
            if event.usage is not None:
                last_usage = event.usage
            if final is not None:
                continue
            if event.kind is EventKind.FINAL:
                final = event
                continue
            yield event
            if event.is_terminal:
                return
    if final is not None:
        yield replace(final, usage=last_usage)
        return
    yield BridgeEvent.idle(usage=last_usage)


__all__ = ["ChunkTranslator", "chunk_events"]

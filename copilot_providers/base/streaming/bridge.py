"""Stream bridge: turn transport events into one ordered fragment sequence.

Both transports reduce to the same merge loop:

* push: an external client calls :attr:`StreamBridge.listener` from its own
  thread; events flow through a bounded :class:`EventQueue` and ``run()``
  consumes them.
* pull: ``feed_from(produce)`` runs a blocking event source (decoded SSE
  frames) on a reader thread that feeds the same queue with back-pressure,
  so a stalled socket never delays cancellation. ``run(events)`` iterates
  an in-memory event iterator on the caller's thread.

Per event:

* delta -> a partial fragment, only when ``streaming`` is on; the text is
  always accumulated.
* final -> one ``turn_complete`` fragment with the full text; sequence ends.
* idle/done (or the source running dry) -> sequence ends. In non-streaming
  mode the accumulated text is delivered as the single ``turn_complete``
  fragment so the caller still receives the turn; in streaming mode the
  caller already has the deltas and nothing more is yielded.
* error -> ``ProviderError(UPSTREAM)`` is raised.
* cancellation -> ``CancelledError`` is raised; checked before every event
  and while waiting, and it takes priority over queued events.

Exactly one terminal transition happens per run; nothing is yielded after it.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from ...config.defaults import EVENT_QUEUE_CAPACITY, PROVIDER_NAME
from ..cancellation import CancellationToken, CancelledError
from ..errors import ErrorCode, ProviderError, classify_exception
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import ResponseFragment, Usage
from .bridge_event import BridgeEvent, EventKind
from .event_queue import EventQueue
from .streaming_metrics import StreamMetrics, apply_token_usage


class StreamBridge:
    """Single-use merge loop producing :class:`ResponseFragment` values."""

    def __init__(
        self,
        *,
        streaming: bool,
        token: Optional[CancellationToken] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
        capacity: int = EVENT_QUEUE_CAPACITY,
        idle_timeout: Optional[float] = None,
    ) -> None:
        self._streaming = streaming
        self._token = token or CancellationToken()
        self._logger = logger or get_logger("copilot_providers.streaming")
        self._ctx = ctx or LogContext(provider=PROVIDER_NAME)
        self._idle_timeout = idle_timeout
        self._queue = EventQueue(capacity, on_drop=self._on_drop)
        self._chunks: List[str] = []
        self._usage: Optional[Usage] = None
        self._started = False
        self._terminated = False
        self._reader: Optional[threading.Thread] = None
        self._t0 = 0.0
        self.metrics = StreamMetrics()

    @property
    def listener(self) -> Callable[[BridgeEvent], bool]:
        """Callback for push producers; never blocks, returns False on drop."""
        return self._queue.offer

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def terminated(self) -> bool:
        return self._terminated

    def close(self) -> None:
        """Signal that the push producer will send nothing more."""
        self._queue.close()

    def feed_from(
        self,
        produce: Callable[[], Iterable[BridgeEvent]],
        *,
        name: str = "copilot-stream-reader",
    ) -> threading.Thread:
        """Drain a blocking event source on a daemon thread into the queue.

        The source is paused rather than dropped when the queue is full. Its
        exceptions arrive as error events and the queue closes when it ends.
        Pair with ``run()`` (no arguments).
        """

        def _pump() -> None:
            events: Optional[Iterable[BridgeEvent]] = None
            try:
                events = produce()
                for event in events:
                    if not self._queue.put(event, self._token):
                        break
            except Exception as e:  # becomes the consumer's error terminal
                self._queue.put(BridgeEvent.failure(self._as_provider_error(e)), self._token)
            finally:
                close = getattr(events, "close", None)
                if close is not None:
                    close()
                self._queue.close()

        self._reader = threading.Thread(target=_pump, name=name, daemon=True)
        self._reader.start()
        return self._reader

    def run(self, events: Optional[Iterable[BridgeEvent]] = None) -> Iterator[ResponseFragment]:
        """Yield fragments until the single terminal transition.

        Parameters:
            events: Pull-transport event iterator. When omitted, events come
                from :attr:`listener` through the bounded queue.
        """
        if self._started:
            raise RuntimeError("StreamBridge.run() may only be called once")
        self._started = True
        self._t0 = time.perf_counter()
        source = self._iterate(events) if events is not None else self._drain()
        normalized_log_event(
            self._logger,
            "stream.start",
            self._ctx,
            phase="start",
            streaming=self._streaming,
            transport="push" if events is None and self._reader is None else "pull",
        )
        terminal: Optional[ResponseFragment] = None
        try:
            for event in source:
                fragment, done = self._step(event)
                if done:
                    terminal = fragment
                    break
                if fragment is not None:
                    self._record(fragment)
                    yield fragment
            else:
                # Source ran dry without a terminal event: treat as idle.
                terminal, _ = self._step(BridgeEvent.idle())
        except CancelledError:
            self._finish(error_code=ErrorCode.CANCELLED.value)
            raise
        except ProviderError as e:
            self._finish(error_code=e.code.value, error=e.message)
            raise
        finally:
            self._terminated = True
            self._queue.close()
            source.close()
        # Finalize before handing out the terminal fragment; callers often
        # stop iterating as soon as they see it.
        if terminal is not None:
            self._record(terminal)
        self._finish()
        if terminal is not None:
            yield terminal

    # Event sources -------------------------------------------------------
    def _iterate(self, events: Iterable[BridgeEvent]) -> Iterator[BridgeEvent]:
        try:
            for event in events:
                self._token.raise_if_cancelled()
                yield event
        finally:
            close = getattr(events, "close", None)
            if close is not None:
                close()

    def _drain(self) -> Iterator[BridgeEvent]:
        while True:
            try:
                event = self._queue.take(self._token, timeout=self._idle_timeout)
            except TimeoutError as e:
                raise ProviderError(
                    code=ErrorCode.TIMEOUT,
                    message=str(e),
                    provider=self._ctx.provider or PROVIDER_NAME,
                    model=self._ctx.model,
                    retryable=True,
                    raw=e,
                ) from e
            if event is None:
                return
            yield event

    # Merge step ----------------------------------------------------------
    def _step(self, event: BridgeEvent) -> Tuple[Optional[ResponseFragment], bool]:
        """Apply one event; returns (fragment to yield, sequence finished)."""
        if event.usage is not None:
            self._usage = event.usage
        if event.kind is EventKind.DELTA:
            if not event.text:
                return None, False
            self._chunks.append(event.text)
            if not self._streaming:
                return None, False
            return ResponseFragment(role=event.role, text=event.text, partial=True), False
        if event.kind is EventKind.FINAL:
            text = event.text or "".join(self._chunks)
            return (
                ResponseFragment(
                    role=event.role,
                    text=text,
                    turn_complete=True,
                    finish_reason=event.finish_reason,
                    usage=self._usage,
                ),
                True,
            )
        if event.kind is EventKind.IDLE:
            if self._streaming:
                return None, True
            return ResponseFragment(text="".join(self._chunks), turn_complete=True, usage=self._usage), True
        raise self._upstream_error(event)

    def _as_provider_error(self, exc: Exception) -> ProviderError:
        if isinstance(exc, ProviderError):
            return exc
        return ProviderError(
            code=classify_exception(exc),
            message=str(exc),
            provider=self._ctx.provider or PROVIDER_NAME,
            model=self._ctx.model,
            raw=exc,
        )

    def _upstream_error(self, event: BridgeEvent) -> ProviderError:
        if isinstance(event.error, ProviderError):
            return event.error
        return ProviderError(
            code=ErrorCode.UPSTREAM,
            message=str(event.error or "upstream reported an error"),
            provider=self._ctx.provider or PROVIDER_NAME,
            model=self._ctx.model,
        )

    # Bookkeeping ---------------------------------------------------------
    def _record(self, fragment: ResponseFragment) -> None:
        self.metrics.emitted += 1
        if fragment.text and self.metrics.time_to_first_token_ms is None:
            self.metrics.time_to_first_token_ms = (time.perf_counter() - self._t0) * 1000.0

    def _on_drop(self, event: BridgeEvent) -> None:
        self.metrics.dropped += 1
        normalized_log_event(
            self._logger,
            "stream.drop",
            self._ctx,
            phase="mid_stream",
            dropped=self.metrics.dropped,
            capacity=self._queue.capacity,
            level=logging.WARNING,
        )

    def _finish(self, *, error_code: Optional[str] = None, error: Optional[str] = None) -> None:
        self.metrics.total_duration_ms = (time.perf_counter() - self._t0) * 1000.0
        apply_token_usage(self.metrics, self._usage)
        if error_code is None:
            event = "stream.end"
        elif error_code == ErrorCode.CANCELLED.value:
            event = "stream.cancelled"
        else:
            event = "stream.error"
        normalized_log_event(
            self._logger,
            event,
            self._ctx,
            phase="finalize",
            emitted=self.metrics.emitted > 0,
            tokens=self._usage,
            error_code=error_code,
            error=error,
            emitted_count=self.metrics.emitted,
            dropped=self.metrics.dropped,
            time_to_first_token_ms=self.metrics.time_to_first_token_ms,
            total_duration_ms=self.metrics.total_duration_ms,
            level=logging.INFO if error_code is None else logging.WARNING,
        )


__all__ = ["StreamBridge"]

"""Bounded, lossy-for-deltas event queue between a producer and the bridge.

``offer`` never blocks the producer: when the queue already holds
``capacity`` delta events, further deltas are dropped (counted, and reported
through ``on_drop``). Terminal events (final, idle, error) bypass the limit
and are always enqueued, so the terminal transition can never be lost under
load. Order is FIFO; dropped deltas are omitted, never reordered. ``put`` is the
blocking alternative for producers that should be slowed down instead.

``take`` blocks until an event is available, the queue is closed, or the
cancellation token fires. Cancellation wins over queued events.
"""
from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable, Deque, Optional

from ...config.defaults import EVENT_QUEUE_CAPACITY
from ..cancellation import CancellationToken
from .bridge_event import BridgeEvent


class EventQueue:
    """Thread-safe FIFO with a non-droppable path for terminal events."""

    def __init__(
        self,
        capacity: int = EVENT_QUEUE_CAPACITY,
        *,
        on_drop: Optional[Callable[[BridgeEvent], None]] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._on_drop = on_drop
        self._items: Deque[BridgeEvent] = deque()
        self._pending_deltas = 0
        self._cond = threading.Condition(threading.Lock())
        self._closed = False
        self.dropped = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def offer(self, event: BridgeEvent) -> bool:
        """Enqueue without blocking; False when the event was dropped or the queue is closed.

        Late events after ``close`` are discarded silently; only capacity
        drops are counted and reported.
        """
        with self._cond:
            if self._closed:
                return False
            if event.is_terminal:
                self._items.append(event)
                accepted = True
            elif self._pending_deltas >= self._capacity:
                self.dropped += 1
                accepted = False
            else:
                self._items.append(event)
                self._pending_deltas += 1
                accepted = True
            if accepted:
                self._cond.notify_all()
        if not accepted and self._on_drop is not None:
            self._on_drop(event)
        return accepted

    def put(self, event: BridgeEvent, token: CancellationToken) -> bool:
        """Enqueue, waiting for room instead of dropping.

        For producers that can be paused (a socket reader). Returns False once
        the queue is closed or ``token`` is cancelled.
        """
        unregister = token.on_cancel(self._wake)
        try:
            with self._cond:
                while (
                    not event.is_terminal
                    and self._pending_deltas >= self._capacity
                    and not self._closed
                    and not token.cancelled
                ):
                    self._cond.wait()
                if self._closed or token.cancelled:
                    return False
                self._items.append(event)
                if not event.is_terminal:
                    self._pending_deltas += 1
                self._cond.notify_all()
                return True
        finally:
            unregister()

    def take(self, token: CancellationToken, timeout: Optional[float] = None) -> Optional[BridgeEvent]:
        """Next event, or ``None`` once closed and drained.

        Raises:
            CancelledError: ``token`` is cancelled (checked before every pop).
            TimeoutError: nothing arrived within ``timeout`` seconds.
        """
        unregister = token.on_cancel(self._wake)
        try:
            deadline = None if timeout is None else time.monotonic() + timeout
            with self._cond:
                while True:
                    token.raise_if_cancelled()
                    if self._items:
                        event = self._items.popleft()
                        if not event.is_terminal:
                            self._pending_deltas -= 1
                            self._cond.notify_all()
                        return event
                    if self._closed:
                        return None
                    if deadline is None:
                        self._cond.wait()
                        continue
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise TimeoutError(f"no stream event within {timeout}s")
                    self._cond.wait(remaining)
        finally:
            unregister()

    def close(self) -> None:
        """Reject further events; ``take`` drains what is queued, then returns None."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def _wake(self) -> None:
        with self._cond:
            self._cond.notify_all()


__all__ = ["EventQueue"]

"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class used across the package as the
cancellation/deadline signal threaded through every network call and every
blocking wait (credential exchange, device-flow polling, stream consumption).
"""

from __future__ import annotations

import threading
from typing import Callable, List, Optional

from .state import State
from .cancelled_error import CancelledError

DEADLINE_REASON = "deadline exceeded"


class CancellationToken:
    """A cooperative cancellation token with optional cascading semantics.

    Thread-safe. Child tokens inherit cancellation when the parent is
    cancelled. Blocking waiters (``wait``) and registered ``on_cancel``
    callbacks are woken as soon as ``cancel`` is called, so cancellation is
    observed within one scheduling step.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._state = State()
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._children: List[CancellationToken] = []
        self._callbacks: List[Callable[[], None]] = []
        self._timer: Optional[threading.Timer] = None
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    @property
    def deadline_exceeded(self) -> bool:
        """Whether the token was cancelled by its own deadline timer."""
        return self._state.deadline

    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation and cascade to children."""
        self._cancel(reason, deadline=False)

    def _cancel(self, reason: str | None, *, deadline: bool) -> None:
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            self._state.deadline = deadline
            children = list(self._children)
            callbacks = list(self._callbacks)
            self._callbacks.clear()
            timer, self._timer = self._timer, None
        self._event.set()
        if timer is not None:
            timer.cancel()
        for callback in callbacks:
            callback()
        for child in children:
            child._cancel(reason, deadline=deadline)

    def cancel_after(self, seconds: float) -> "CancellationToken":
        """Arm a deadline: cancel the token once ``seconds`` have elapsed.

        Returns the token itself so callers can write
        ``token = CancellationToken().cancel_after(30)``.
        """
        timer = threading.Timer(seconds, self._cancel, args=(DEADLINE_REASON,), kwargs={"deadline": True})
        timer.daemon = True
        with self._lock:
            if self._state.cancelled:
                return self
            previous, self._timer = self._timer, timer
        if previous is not None:
            previous.cancel()
        timer.start()
        return self

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
            deadline = self._state.deadline
        if should_cancel:
            token._cancel(reason, deadline=deadline)
        return token

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` to run once on cancellation.

        Runs immediately when the token is already cancelled. Returns a
        function that unregisters the callback.
        """
        with self._lock:
            if not self._state.cancelled:
                self._callbacks.append(callback)

                def _unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return _unregister
        callback()
        return lambda: None

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to ``timeout`` seconds; return True once cancelled."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled", deadline=self._state.deadline)

    def child(self) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, children={len(self._children)})"
        )


__all__ = ["CancellationToken", "DEADLINE_REASON"]

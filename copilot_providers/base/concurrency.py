"""Thread helpers: the credential store's shared/exclusive lock and a
cancellable wrapper for blocking calls.

``threading`` only ships exclusive locks; credential validity checks happen
on every request while refreshes are rare, so readers share the lock and a
refresh takes it exclusively. Writers are preferred once waiting so a steady
stream of readers cannot starve a refresh.

httpx offers no way to interrupt a blocking read from another thread, so
``run_cancellable`` parks the call on a worker and lets the caller return as
soon as its token is cancelled.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, TypeVar

from .cancellation import CancellationToken

T = TypeVar("T")


class ReadWriteLock:
    """Many concurrent readers or one writer. Not re-entrant."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


def run_cancellable(
    fn: Callable[[], T],
    token: Optional[CancellationToken],
    *,
    name: str = "copilot-worker",
) -> T:
    """Run a blocking call on a worker thread and wait for it or for ``token``.

    Cancellation wins: once ``token`` fires the caller gets ``CancelledError``
    straight away and the worker's eventual result is discarded. Exceptions
    raised by ``fn`` are re-raised on the calling thread.
    """
    if token is None:
        return fn()
    token.raise_if_cancelled()
    done = threading.Event()
    outcome: Dict[str, object] = {}

    def _target() -> None:
        try:
            outcome["value"] = fn()
        except Exception as e:  # handed back to the waiting caller
            outcome["error"] = e
        finally:
            done.set()

    unregister = token.on_cancel(done.set)
    try:
        threading.Thread(target=_target, name=name, daemon=True).start()
        done.wait()
    finally:
        unregister()
    token.raise_if_cancelled()
    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    if "value" not in outcome:
        raise RuntimeError(f"{name} exited without a result")
    return outcome["value"]  # type: ignore[return-value]


__all__ = ["ReadWriteLock", "run_cancellable"]

"""Time source abstraction for credential expiry and device-flow polling.

Injected so tests can drive expiry checks and poll backoff with a virtual
clock instead of real wall-clock delays.
"""
from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

from ..base.cancellation import CancellationToken


@runtime_checkable
class Clock(Protocol):
    """Wall-clock reads plus a cancellable sleep."""

    def now(self) -> float:
        """Current time as epoch seconds."""
        ...

    def sleep(self, seconds: float, token: CancellationToken) -> bool:
        """Wait ``seconds``; return True if ``token`` was cancelled meanwhile."""
        ...


class SystemClock:
    """Real clock: ``time.time`` and an interruptible wait on the token."""

    def now(self) -> float:
        return time.time()

    def sleep(self, seconds: float, token: CancellationToken) -> bool:
        if seconds <= 0:
            return token.cancelled
        return token.wait(seconds)


__all__ = ["Clock", "SystemClock"]

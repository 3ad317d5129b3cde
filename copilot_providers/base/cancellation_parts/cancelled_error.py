"""Cancellation error type.

Defines the public ``CancelledError`` used to signal cooperative cancellation
in credential and generation operations. Kept isolated to satisfy the
one-class-per-file policy.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    This specialized error distinguishes cooperative cancellation from other
    runtime failures, enabling targeted handling (e.g., suppress log noise,
    map to a structured status, or avoid retry logic). ``deadline`` is True
    when the cancellation came from a token deadline rather than an explicit
    ``cancel`` call.
    """

    def __init__(self, message: str = "operation cancelled", *, deadline: bool = False) -> None:
        super().__init__(message)
        self.deadline = deadline


__all__ = ["CancelledError"]

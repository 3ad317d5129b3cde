"""
Structured provider error exception type.

Wraps transport, protocol and upstream failures with a normalized `ErrorCode`
for consistent handling and structured logging. Protocol errors carry the
HTTP status and response body so callers can decide what to do next.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """Represents a structured provider error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        provider: Provider key where the error originated (e.g., ``"github-copilot"``).
        model: Optional model name associated with the failure.
        retryable: Hint for caller retry logic (not authoritative; the core
            never retries).
        raw: Optional original exception for diagnostics.
        status: HTTP status code for protocol errors.
        body: Response body text for protocol errors.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[Exception] = None
    status: Optional[int] = None
    body: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining provider, model, code, and message."""
        return f"{self.provider}:{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["ProviderError"]

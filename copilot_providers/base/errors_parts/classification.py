"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements httpx transport classification, HTTP status extraction,
status-to-code mapping, and message-based heuristics as a fallback. The
``network_error``/``status_error``/``decode_error`` builders produce the three
failure modes shared by every token endpoint call.
"""
from __future__ import annotations

from typing import Dict, Optional

import httpx

from .error_code import ErrorCode
from .provider_error import ProviderError


def _extract_status(exc: Exception) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without a status."""
    PATTERN_GROUPS = (
        (ErrorCode.TIMEOUT, ("timeout",)),
        (ErrorCode.TIMEOUT, ("timed out",)),
        (ErrorCode.AUTH, ("unauthorized",)),
        (ErrorCode.AUTH, ("forbidden",)),
        (ErrorCode.NETWORK, ("connection",)),
        (ErrorCode.NOT_FOUND, ("not found",)),
        (ErrorCode.UNAVAILABLE, ("unavailable",)),
        (ErrorCode.DECODE, ("malformed",)),
        (ErrorCode.SERVER_ERROR, ("server error",)),
    )
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    for code, patterns in PATTERN_GROUPS:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: Exception) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ProviderError passthrough.
        2. Timeout exceptions (builtin and httpx).
        3. Other httpx transport failures (connection, protocol, read).
        4. HTTP status mapping.
        5. Substring heuristics.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.NETWORK
    status = _extract_status(exc)
    if status is not None and status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


def network_error(exc: Exception, *, provider: str, action: str, model: Optional[str] = None) -> ProviderError:
    """Wrap a transport failure (connection refused, DNS, timeout)."""
    code = classify_exception(exc)
    if code not in (ErrorCode.TIMEOUT, ErrorCode.NETWORK):
        code = ErrorCode.NETWORK
    return ProviderError(
        code=code,
        message=f"failed to {action}: {exc}",
        provider=provider,
        model=model,
        retryable=True,
        raw=exc,
    )


def status_error(response: httpx.Response, *, provider: str, action: str, model: Optional[str] = None) -> ProviderError:
    """Wrap a non-success HTTP response, keeping its status and body."""
    try:
        body = response.text
    except httpx.ResponseNotRead:
        body = response.read().decode("utf-8", errors="replace")
    code = _HTTP_STATUS_MAP.get(response.status_code, ErrorCode.PROTOCOL)
    return ProviderError(
        code=code,
        message=f"{action} failed with status {response.status_code}: {body}",
        provider=provider,
        model=model,
        retryable=code in (ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.UNAVAILABLE),
        status=response.status_code,
        body=body,
    )


def decode_error(exc: Exception, *, provider: str, action: str, model: Optional[str] = None) -> ProviderError:
    """Wrap a malformed response body."""
    return ProviderError(
        code=ErrorCode.DECODE,
        message=f"failed to decode {action} response: {exc}",
        provider=provider,
        model=model,
        raw=exc,
    )


__all__ = [
    "classify_exception",
    "network_error",
    "status_error",
    "decode_error",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]

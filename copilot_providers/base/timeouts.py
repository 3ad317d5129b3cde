"""Unified timeout configuration.

This module centralizes timeout values used across the package (token
endpoint calls, generation requests, stream reads). Hard ceilings on whole
operations are expressed with :meth:`CancellationToken.cancel_after`; the
values here bound individual network calls.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use and again whenever the relevant variables change. Supported
    environment variables (all optional):
        PT_TIMEOUT_HTTP_SECONDS
        PT_TIMEOUT_GENERATION_SECONDS
        PT_TIMEOUT_STREAM_SECONDS

Design Constraints
------------------
1. No hard-coded ad-hoc timeouts outside this module.
2. Avoid per-call env parsing (cache keyed on the raw env values).
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

_ENV_KEYS = (
    "PT_TIMEOUT_HTTP_SECONDS",
    "PT_TIMEOUT_GENERATION_SECONDS",
    "PT_TIMEOUT_STREAM_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        http_timeout_seconds: Timeout for token endpoint calls (exchange,
            device code, access token polling).
        generation_timeout_seconds: Timeout for non-streaming completion
            requests and for establishing a streaming response.
        stream_timeout_seconds: Idle read timeout between streamed chunks;
            ``None`` disables it and leaves the bound to cancellation.
    """

    http_timeout_seconds: float = 30.0
    generation_timeout_seconds: float = 60.0
    stream_timeout_seconds: float | None = None

    def httpx_timeout(self, *, streaming: bool = False) -> httpx.Timeout:
        """Translate to an ``httpx.Timeout`` for the given request kind."""
        if streaming:
            return httpx.Timeout(self.generation_timeout_seconds, read=self.stream_timeout_seconds)
        return httpx.Timeout(self.generation_timeout_seconds)


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float | None) -> float | None:
    """Parse a positive float from the environment, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(k, "") for k in _ENV_KEYS)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        http_timeout_seconds=_parse_env_float("PT_TIMEOUT_HTTP_SECONDS", defaults.http_timeout_seconds)
        or defaults.http_timeout_seconds,
        generation_timeout_seconds=_parse_env_float(
            "PT_TIMEOUT_GENERATION_SECONDS", defaults.generation_timeout_seconds
        )
        or defaults.generation_timeout_seconds,
        stream_timeout_seconds=_parse_env_float("PT_TIMEOUT_STREAM_SECONDS", defaults.stream_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]

"""copilot_providers.config.env
===========================

Environment variable names and lookup helpers for the held GitHub token.

Design Notes
------------
- ``TOKEN_ENV_VARS`` lists acceptable names in priority order; the first
  non-empty, non-placeholder value wins.
- Helpers never raise on unset variables; callers decide how to proceed
  (explicit configuration, or the interactive device flow).
"""

from __future__ import annotations

import os
from typing import Iterable, Optional, Tuple

# Canonical first.
TOKEN_ENV_VARS: Tuple[str, ...] = ("COPILOT_GITHUB_TOKEN", "GITHUB_TOKEN", "GH_TOKEN")


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'your_token', or
    'example'. The check is case-insensitive and resilient to surrounding
    spaces.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "your_token" in v or "example" in v


def get_env_var_candidates() -> Iterable[str]:
    """Yield acceptable token environment variable names in priority order."""
    yield from TOKEN_ENV_VARS


def resolve_github_token() -> Tuple[Optional[str], Optional[str]]:
    """Resolve the held GitHub token from the process environment.

    Returns
    -------
    Tuple[Optional[str], Optional[str]]
        ``(value, env_var_used)``; ``(None, None)`` when nothing usable is set.
    """
    for name in get_env_var_candidates():
        val = (os.environ.get(name) or "").strip()
        if val and not is_placeholder(val):
            return val, name
    return None, None


def env_flag(name: str) -> Optional[bool]:
    """Parse a boolean environment flag; ``None`` when unset or unrecognized."""
    raw = os.getenv(name)
    if raw is None:
        return None
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return None


__all__ = [
    "TOKEN_ENV_VARS",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_github_token",
    "env_flag",
]

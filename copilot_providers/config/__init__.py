"""Unified configuration layer.

Goals
-----
* Centralize defaults (model, endpoints, queue capacity).
* Merge sources in a predictable order:
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by PROVIDERS_CONFIG_FILE
    3. Environment variables (COPILOT_MODEL, COPILOT_ENTERPRISE_URL, ...)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_provider_config(provider)``.
* Keep zero hard dependency on PyYAML (load YAML only if available).

Environment Variable Conventions
--------------------------------
COPILOT_MODEL, COPILOT_BASE_URL, COPILOT_ENTERPRISE_URL, COPILOT_STREAMING,
COPILOT_QUEUE_CAPACITY. The held token is resolved separately through
``config.env.resolve_github_token`` and is never read from the config file.

External Config File (Optional)
-------------------------------
If PROVIDERS_CONFIG_FILE is set to a path, JSON is tried first, then YAML
when PyYAML is installed. Structure example:

```
github-copilot:
  model: gpt-4o
  enterprise_url: https://company.ghe.com
  streaming: true
```

Public API
----------
* get_provider_config(provider: str, overrides: dict | None = None) -> dict
* get_model(provider: str) -> str | None
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .defaults import (
    COPILOT_DEFAULT_MODEL,
    EVENT_QUEUE_CAPACITY,
    PROVIDER_NAME,
)
from .env import env_flag

try:  # Optional YAML support
    import yaml  # type: ignore
except ImportError:  # pragma: no cover
    yaml = None  # type: ignore


DEFAULTS: Dict[str, Dict[str, Any]] = {
    PROVIDER_NAME: {
        "model": COPILOT_DEFAULT_MODEL,
        "streaming": False,
        "queue_capacity": EVENT_QUEUE_CAPACITY,
    },
}

# Env var prefix per provider; the provider key contains a dash.
ENV_PREFIX: Dict[str, str] = {PROVIDER_NAME: "COPILOT"}

ENV_FIELD_MAP = {
    "model": "MODEL",
    "base_url": "BASE_URL",
    "enterprise_url": "ENTERPRISE_URL",
    "streaming": "STREAMING",
    "queue_capacity": "QUEUE_CAPACITY",
}

_FILE_CACHE: Optional[Dict[str, Any]] = None


def reset_config_cache() -> None:
    """Forget the parsed config file (tests switch PROVIDERS_CONFIG_FILE)."""
    global _FILE_CACHE
    _FILE_CACHE = None


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("PROVIDERS_CONFIG_FILE")
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    data: Any = {}
    try:
        data = json.loads(text)
    except ValueError:
        if yaml is not None:  # pragma: no cover (depends on optional lib)
            data = yaml.safe_load(text) or {}
    _FILE_CACHE = data if isinstance(data, dict) else {}
    return _FILE_CACHE


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = ENV_PREFIX.get(provider, provider.upper().replace("-", "_"))
    for field, suffix in ENV_FIELD_MAP.items():
        name = f"{prefix}_{suffix}"
        if field == "streaming":
            flag = env_flag(name)
            if flag is not None:
                out[field] = flag
            continue
        val = os.getenv(name)
        if val is None or not val.strip():
            continue
        if field == "queue_capacity":
            try:
                out[field] = int(val)
            except ValueError:
                continue
        else:
            out[field] = val.strip()
    return out


def get_provider_config(provider: str = PROVIDER_NAME, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Merge order (later wins): defaults -> external config -> env vars -> overrides
    """
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}

    cfg |= DEFAULTS.get(name, {})

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return cfg


def get_model(provider: str = PROVIDER_NAME) -> Optional[str]:
    return get_provider_config(provider).get("model")


__all__ = [
    "get_provider_config",
    "get_model",
    "reset_config_cache",
    "DEFAULTS",
]

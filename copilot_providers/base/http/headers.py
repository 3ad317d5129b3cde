"""Fixed request headers for the token endpoints and the completion API."""

from __future__ import annotations

from typing import Dict, Optional

from ...config.defaults import (
    API_USER_AGENT,
    AUTH_USER_AGENT,
    COPILOT_INTEGRATION_ID,
    EDITOR_PLUGIN_VERSION,
    EDITOR_VERSION,
    OPENAI_INTENT,
)


def json_headers(*, user_agent: str = AUTH_USER_AGENT, bearer: Optional[str] = None) -> Dict[str, str]:
    """Headers for plain JSON calls against the OAuth endpoints."""
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": user_agent,
    }
    if bearer:
        headers["Authorization"] = f"Bearer {bearer}"
    return headers


def editor_headers(*, bearer: str) -> Dict[str, str]:
    """Headers identifying the editor integration (exchange and completion calls)."""
    return {
        "Authorization": f"Bearer {bearer}",
        "Accept": "application/json",
        "User-Agent": API_USER_AGENT,
        "Editor-Version": EDITOR_VERSION,
        "Editor-Plugin-Version": EDITOR_PLUGIN_VERSION,
        "Copilot-Integration-Id": COPILOT_INTEGRATION_ID,
    }


def completion_headers(*, bearer: str, stream: bool) -> Dict[str, str]:
    """Headers for ``POST /chat/completions``."""
    headers = editor_headers(bearer=bearer)
    headers["Content-Type"] = "application/json"
    headers["Openai-Intent"] = OPENAI_INTENT
    headers["X-Initiator"] = "user"
    if stream:
        headers["Accept"] = "text/event-stream"
    return headers


__all__ = ["json_headers", "editor_headers", "completion_headers"]

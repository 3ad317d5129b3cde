"""Pooled httpx clients are reused per (base_url, purpose) and closable."""
from __future__ import annotations

from copilot_providers.base.http import (
    close_all_clients,
    completion_headers,
    editor_headers,
    get_httpx_client,
    json_headers,
)


def test_client_reuse_per_key_and_close_all():
    a1 = get_httpx_client(None, purpose="test.auth")
    a2 = get_httpx_client(None, purpose="test.auth")
    b = get_httpx_client("https://api.example.test", purpose="test.chat")
    assert a1 is a2  # nosec B101
    assert a1 is not b  # nosec B101

    close_all_clients()
    assert a1.is_closed and b.is_closed  # nosec B101
    assert get_httpx_client(None, purpose="test.auth") is not a1  # nosec B101
    close_all_clients()


def test_fixed_headers():
    plain = json_headers()
    assert plain["Accept"] == "application/json" and "Authorization" not in plain  # nosec B101

    editor = editor_headers(bearer="tok")
    assert editor["Authorization"] == "Bearer tok"  # nosec B101
    assert editor["Copilot-Integration-Id"] == "vscode-chat"  # nosec B101
    assert editor["Editor-Version"].startswith("vscode/")  # nosec B101

    streaming = completion_headers(bearer="tok", stream=True)
    assert streaming["Accept"] == "text/event-stream"  # nosec B101
    assert streaming["Openai-Intent"] == "conversation-panel"  # nosec B101
    assert streaming["X-Initiator"] == "user"  # nosec B101
    assert completion_headers(bearer="tok", stream=False)["Accept"] == "application/json"  # nosec B101

"""Credential exchange against the token endpoint."""
from __future__ import annotations

import threading
import time

import httpx
import pytest

from copilot_providers.auth import CredentialExchanger, Provenance
from copilot_providers.base.cancellation import CancellationToken, CancelledError
from copilot_providers.base.errors import ErrorCode, ProviderError

EXCHANGE_URL = "https://api.github.test/copilot_internal/v2/token"


def test_exchange_success_sends_editor_headers(mock_http, log_capture):
    transport = mock_http(
        lambda request: httpx.Response(
            200, json={"token": "tid=abc;exp=1", "expires_at": 2_000_000_000, "refresh_in": 1500, "sku": "x"}
        )
    )
    credential = CredentialExchanger(EXCHANGE_URL, transport.client()).exchange("gho_held")

    assert credential.value == "tid=abc;exp=1"  # nosec B101
    assert credential.expires_at == 2_000_000_000  # nosec B101
    assert credential.refresh_in == 1500  # nosec B101
    assert credential.provenance is Provenance.EXCHANGED  # nosec B101

    request = transport.requests[0]
    assert request.method == "GET" and str(request.url) == EXCHANGE_URL  # nosec B101
    assert request.headers["Authorization"] == "Bearer gho_held"  # nosec B101
    assert request.headers["Editor-Version"].startswith("vscode/")  # nosec B101
    assert request.headers["Copilot-Integration-Id"] == "vscode-chat"  # nosec B101

    assert [e["event"] for e in log_capture.records if e.get("event", "").startswith("auth.exchange")] == [  # nosec B101
        "auth.exchange.start",
        "auth.exchange.end",
    ]
    assert not any("tid=abc" in str(r) or "gho_held" in str(r) for r in log_capture.records)  # nosec B101


def test_exchange_non_2xx_keeps_status_and_body(mock_http, log_capture):
    transport = mock_http(lambda request: httpx.Response(401, text='{"message":"Bad credentials"}'))
    with pytest.raises(ProviderError) as info:
        CredentialExchanger(EXCHANGE_URL, transport.client()).exchange("gho_held")
    err = info.value
    assert err.code is ErrorCode.AUTH  # nosec B101
    assert err.status == 401 and "Bad credentials" in (err.body or "")  # nosec B101
    assert "token exchange failed with status 401" in err.message  # nosec B101
    assert log_capture.events("auth.exchange.error")[-1]["status"] == 401  # nosec B101


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        '{"token": "", "expires_at": 1}',
        '{"token": "x"}',
        '{"token": "x", "expires_at": "soon"}',
    ],
)
def test_exchange_malformed_body_is_decode_error(mock_http, body):
    transport = mock_http(lambda request: httpx.Response(200, text=body))
    with pytest.raises(ProviderError) as info:
        CredentialExchanger(EXCHANGE_URL, transport.client()).exchange("gho_held")
    assert info.value.code is ErrorCode.DECODE  # nosec B101


def test_exchange_unreachable_is_network_error():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(refuse)) as client:
        with pytest.raises(ProviderError) as info:
            CredentialExchanger(EXCHANGE_URL, client).exchange("gho_held")
    assert info.value.code is ErrorCode.NETWORK  # nosec B101
    assert isinstance(info.value.raw, httpx.ConnectError)  # nosec B101


def test_exchange_respects_cancelled_token(mock_http):
    transport = mock_http(lambda request: httpx.Response(200, json={"token": "t", "expires_at": 1}))
    token = CancellationToken()
    token.cancel()
    with pytest.raises(CancelledError):
        CredentialExchanger(EXCHANGE_URL, transport.client()).exchange("gho_held", token)
    assert transport.requests == []  # nosec B101


def test_exchange_cancelled_while_in_flight(mock_http):
    release = threading.Event()

    def slow(request: httpx.Request) -> httpx.Response:
        release.wait(5)
        return httpx.Response(200, json={"token": "t", "expires_at": 2_000_000_000})

    token = CancellationToken()
    threading.Timer(0.05, token.cancel).start()
    started = time.monotonic()
    try:
        with pytest.raises(CancelledError):
            CredentialExchanger(EXCHANGE_URL, mock_http(slow).client()).exchange("gho_held", token)
        assert time.monotonic() - started < 2  # nosec B101
    finally:
        release.set()

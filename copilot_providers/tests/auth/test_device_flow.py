"""Device-authorization flow: grant request, polling backoff, cancellation.

All polling runs on the ``fake_clock`` fixture, so recorded sleeps are the
exact intervals the loop asked for and no test waits in real time.
"""
from __future__ import annotations

import json
from collections import deque

import httpx
import pytest

from copilot_providers.auth import (
    AccessTokenResponse,
    DeviceAuthorizationClient,
    PollOutcome,
    PollState,
    next_state,
)
from copilot_providers.base.cancellation import CancellationToken, CancelledError
from copilot_providers.base.errors import ErrorCode, ProviderError
from copilot_providers.config.defaults import COPILOT_CLIENT_ID, DEVICE_GRANT_TYPE

DEVICE_URL = "https://github.test/login/device/code"
TOKEN_URL = "https://github.test/login/oauth/access_token"


def _oauth_server(poll_replies, grant=None):
    """Handler serving one device grant and a scripted list of poll replies."""
    replies = deque(poll_replies)

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == DEVICE_URL:
            return httpx.Response(
                200,
                json=grant
                or {
                    "device_code": "dev-123",
                    "user_code": "ABCD-1234",
                    "verification_uri": "https://github.test/login/device",
                    "expires_in": 900,
                    "interval": 5,
                },
            )
        reply = replies.popleft()
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    return handler


def _client(transport, clock, **kwargs) -> DeviceAuthorizationClient:
    return DeviceAuthorizationClient(
        device_code_url=DEVICE_URL,
        access_token_url=TOKEN_URL,
        http_client=transport.client(),
        clock=clock,
        **kwargs,
    )


def _poll_requests(transport):
    return [r for r in transport.requests if str(r.url) == TOKEN_URL]


def test_next_state_transitions():
    state = PollState(interval=5.0)
    state, outcome = next_state(state, AccessTokenResponse(error="authorization_pending"))
    assert outcome is PollOutcome.PENDING and state == PollState(5.0, 1)  # nosec B101
    state, outcome = next_state(state, AccessTokenResponse(error="slow_down"))
    assert outcome is PollOutcome.SLOW_DOWN and state == PollState(10.0, 2)  # nosec B101
    state, outcome = next_state(state, AccessTokenResponse())
    assert outcome is PollOutcome.PENDING and state.attempts == 3  # nosec B101
    state, outcome = next_state(state, AccessTokenResponse(access_token="gho_x"))
    assert outcome is PollOutcome.SUCCESS and state.interval == 10.0  # nosec B101


def test_next_state_terminal_error_raises_auth():
    with pytest.raises(ProviderError) as info:
        next_state(PollState(5.0), AccessTokenResponse(error="expired_token", error_description="too late"))
    assert info.value.code is ErrorCode.AUTH  # nosec B101
    assert "expired_token" in info.value.message and "too late" in info.value.message  # nosec B101


def test_slow_down_increases_interval_cumulatively(mock_http, fake_clock, log_capture):
    transport = mock_http(
        _oauth_server(
            [
                {"error": "slow_down"},
                {"error": "slow_down"},
                {"error": "authorization_pending"},
                {"access_token": "gho_granted", "token_type": "bearer", "scope": "read:user"},
            ]
        )
    )
    client = _client(transport, fake_clock)

    result = client.poll_for_access_token("dev-123", 1, CancellationToken())

    assert result == "gho_granted"  # nosec B101
    assert fake_clock.sleeps == [1, 6, 11, 11]  # nosec B101
    assert len(_poll_requests(transport)) == 4  # nosec B101
    assert len(log_capture.events("auth.device.slow_down")) == 2  # nosec B101
    assert log_capture.events("auth.device.authorized")[-1]["attempt"] == 4  # nosec B101


def test_poll_request_body_and_headers(mock_http, fake_clock):
    transport = mock_http(_oauth_server([{"access_token": "gho_granted"}]))
    _client(transport, fake_clock).poll_for_access_token("dev-123", 2)

    request = _poll_requests(transport)[0]
    assert request.method == "POST"  # nosec B101
    assert json.loads(request.content) == {  # nosec B101
        "client_id": COPILOT_CLIENT_ID,
        "device_code": "dev-123",
        "grant_type": DEVICE_GRANT_TYPE,
    }
    assert request.headers["Accept"] == "application/json"  # nosec B101
    assert "Authorization" not in request.headers  # nosec B101


def test_non_positive_interval_falls_back_to_default(mock_http, fake_clock):
    transport = mock_http(_oauth_server([{"access_token": "gho_granted"}]))
    _client(transport, fake_clock).poll_for_access_token("dev-123", 0)
    assert fake_clock.sleeps == [5.0]  # nosec B101


def test_cancel_during_wait_stops_before_next_request(mock_http, fake_clock, log_capture):
    transport = mock_http(_oauth_server([{"error": "authorization_pending"}] * 5))
    token = CancellationToken()
    fake_clock.on_sleep = lambda _s: token.cancel("user aborted") if len(fake_clock.sleeps) == 2 else None

    with pytest.raises(CancelledError) as info:
        _client(transport, fake_clock).poll_for_access_token("dev-123", 5, token)

    assert "user aborted" in str(info.value)  # nosec B101
    assert len(_poll_requests(transport)) == 1  # nosec B101
    assert log_capture.events("auth.device.cancelled")  # nosec B101


def test_already_cancelled_token_sends_nothing(mock_http, fake_clock):
    transport = mock_http(_oauth_server([]))
    token = CancellationToken()
    token.cancel()
    with pytest.raises(CancelledError):
        _client(transport, fake_clock).poll_for_access_token("dev-123", 5, token)
    with pytest.raises(CancelledError):
        _client(transport, fake_clock).start_device_flow(token)
    assert transport.requests == []  # nosec B101


def test_access_denied_is_auth_error(mock_http, fake_clock, log_capture):
    transport = mock_http(
        _oauth_server([{"error": "access_denied", "error_description": "The user has denied your application access."}])
    )
    with pytest.raises(ProviderError) as info:
        _client(transport, fake_clock).poll_for_access_token("dev-123", 5)
    assert info.value.code is ErrorCode.AUTH  # nosec B101
    assert "access_denied" in info.value.message  # nosec B101
    assert log_capture.events("auth.device.error")[-1]["oauth_error"] == "access_denied"  # nosec B101


def test_non_200_poll_reply_carries_status_and_body(mock_http, fake_clock):
    transport = mock_http(_oauth_server([httpx.Response(502, text="bad gateway")]))
    with pytest.raises(ProviderError) as info:
        _client(transport, fake_clock).poll_for_access_token("dev-123", 5)
    assert info.value.status == 502 and info.value.body == "bad gateway"  # nosec B101
    assert "access token request failed with status 502" in info.value.message  # nosec B101


def test_transport_failure_is_network_error(fake_clock):
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = DeviceAuthorizationClient(
        device_code_url=DEVICE_URL,
        access_token_url=TOKEN_URL,
        http_client=httpx.Client(transport=httpx.MockTransport(boom)),
        clock=fake_clock,
    )
    with pytest.raises(ProviderError) as info:
        client.start_device_flow()
    assert info.value.code is ErrorCode.NETWORK  # nosec B101


def test_start_device_flow_parses_grant(mock_http, fake_clock):
    transport = mock_http(_oauth_server([]))
    grant = _client(transport, fake_clock).start_device_flow()

    assert grant.device_code == "dev-123" and grant.user_code == "ABCD-1234"  # nosec B101
    assert grant.issued_at == fake_clock.now()  # nosec B101
    assert grant.expires_at == fake_clock.now() + 900  # nosec B101
    assert "dev-123" not in repr(grant)  # nosec B101
    body = json.loads(transport.requests[0].content)
    assert body == {"client_id": COPILOT_CLIENT_ID, "scope": "read:user"}  # nosec B101


def test_start_device_flow_errors(mock_http, fake_clock):
    failing = mock_http(lambda request: httpx.Response(500, text="oops"))
    with pytest.raises(ProviderError) as info:
        _client(failing, fake_clock).start_device_flow()
    assert info.value.code is ErrorCode.SERVER_ERROR and info.value.status == 500  # nosec B101

    garbled = mock_http(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(ProviderError) as info:
        _client(garbled, fake_clock).start_device_flow()
    assert info.value.code is ErrorCode.DECODE  # nosec B101

    incomplete = mock_http(lambda request: httpx.Response(200, json={"user_code": "X"}))
    with pytest.raises(ProviderError) as info:
        _client(incomplete, fake_clock).start_device_flow()
    assert info.value.code is ErrorCode.DECODE  # nosec B101


def test_authenticate_prompts_then_polls(mock_http, fake_clock):
    transport = mock_http(
        _oauth_server(
            [{"error": "authorization_pending"}, {"access_token": "gho_done"}],
            grant={
                "device_code": "dev-9",
                "user_code": "WXYZ-0000",
                "verification_uri": "https://github.test/login/device",
                "expires_in": 900,
                "interval": 0,
            },
        )
    )
    shown = []
    result = _client(transport, fake_clock).authenticate(prompt=shown.append)

    assert result == "gho_done"  # nosec B101
    assert [g.user_code for g in shown] == ["WXYZ-0000"]  # nosec B101
    assert fake_clock.sleeps == [5.0, 5.0]  # nosec B101
    assert json.loads(_poll_requests(transport)[0].content)["device_code"] == "dev-9"  # nosec B101


def test_grant_expiry_only_enforced_when_enabled(mock_http, fake_clock):
    grant = {
        "device_code": "dev-1",
        "user_code": "U",
        "verification_uri": "https://github.test/login/device",
        "expires_in": 7,
        "interval": 5,
    }
    enforced = mock_http(_oauth_server([{"error": "authorization_pending"}] * 3, grant=grant))
    with pytest.raises(ProviderError) as info:
        _client(enforced, fake_clock, enforce_grant_expiry=True).authenticate(prompt=lambda g: None)
    assert info.value.code is ErrorCode.AUTH and "expired" in info.value.message  # nosec B101
    assert len(_poll_requests(enforced)) == 1  # nosec B101

    lenient = mock_http(
        _oauth_server([{"error": "authorization_pending"}, {"access_token": "gho_late"}], grant=grant)
    )
    assert _client(lenient, fake_clock).authenticate(prompt=lambda g: None) == "gho_late"  # nosec B101


def test_default_prompt_prints_instructions(mock_http, fake_clock, capsys):
    transport = mock_http(_oauth_server([{"access_token": "gho_done"}]))
    _client(transport, fake_clock).authenticate()
    out = capsys.readouterr().out
    assert "Visit: https://github.test/login/device" in out  # nosec B101
    assert "Enter code: ABCD-1234" in out  # nosec B101

"""Unit tests for error classification and the status/network/decode builders."""
from __future__ import annotations

import httpx
import pytest

from copilot_providers.base.errors import (
    ErrorCode,
    ProviderError,
    classify_exception,
    decode_error,
    network_error,
    status_error,
)


class _StatusExc(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(f"status {status}")
        self.status_code = status


@pytest.mark.parametrize(
    "status,code",
    [
        (401, ErrorCode.AUTH),
        (403, ErrorCode.AUTH),
        (404, ErrorCode.NOT_FOUND),
        (429, ErrorCode.RATE_LIMIT),
        (503, ErrorCode.UNAVAILABLE),
        (504, ErrorCode.TIMEOUT),
    ],
)
def test_classify_by_status(status, code):
    assert classify_exception(_StatusExc(status)) is code  # nosec B101


def test_classify_passthrough_and_transport():
    err = ProviderError(code=ErrorCode.DECODE, message="x", provider="p")
    assert classify_exception(err) is ErrorCode.DECODE  # nosec B101
    assert classify_exception(httpx.ConnectError("refused")) is ErrorCode.NETWORK  # nosec B101
    assert classify_exception(httpx.ReadTimeout("slow")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(TimeoutError()) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(ValueError("??")) is ErrorCode.UNKNOWN  # nosec B101


def test_status_error_keeps_status_and_body():
    resp = httpx.Response(401, text="bad credentials", request=httpx.Request("GET", "https://x"))
    err = status_error(resp, provider="github-copilot", action="token exchange")
    assert err.code is ErrorCode.AUTH  # nosec B101
    assert err.status == 401 and err.body == "bad credentials"  # nosec B101
    assert "401" in err.message and "bad credentials" in err.message  # nosec B101
    assert err.retryable is False  # nosec B101


def test_status_error_unmapped_status_is_protocol():
    resp = httpx.Response(418, text="teapot", request=httpx.Request("GET", "https://x"))
    err = status_error(resp, provider="github-copilot", action="token exchange")
    assert err.code is ErrorCode.PROTOCOL  # nosec B101


def test_network_error_is_retryable_network():
    exc = httpx.ConnectError("refused")
    err = network_error(exc, provider="github-copilot", action="send token exchange request")
    assert err.code is ErrorCode.NETWORK and err.retryable is True  # nosec B101
    assert err.raw is exc  # nosec B101
    assert err.message.startswith("failed to send token exchange request")  # nosec B101


def test_decode_error_code():
    err = decode_error(ValueError("no json"), provider="github-copilot", action="token exchange")
    assert err.code is ErrorCode.DECODE  # nosec B101
    assert "no json" in str(err)  # nosec B101

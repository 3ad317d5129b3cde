"""Pytest configuration for the copilot_providers test suite.

Fixtures:
- ``fake_clock``: virtual time for expiry checks and device-flow backoff;
  ``sleep`` records the requested interval and advances time instantly.
- ``log_capture``: parsed structured events emitted under the package logger.
- ``mock_http``: builds an ``httpx.Client`` on ``httpx.MockTransport`` from a
  handler and records every request it serves.
- ``clean_env``: removes token and config environment variables so tests do
  not depend on the developer's shell.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Dict, Iterator, List

import httpx
import pytest

from copilot_providers.base.cancellation import CancellationToken
from copilot_providers.base.http import close_all_clients
from copilot_providers.base.logging import BASE_LOGGER_NAME, get_logger
from copilot_providers.config import reset_config_cache


class FakeClock:
    """Deterministic clock: ``now`` is settable, ``sleep`` never blocks.

    ``on_sleep`` runs after each recorded sleep (before the cancellation
    check) so tests can cancel a token mid-poll.
    """

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.t = start
        self.sleeps: List[float] = []
        self.on_sleep: Callable[[float], None] | None = None
        self._lock = threading.Lock()

    def now(self) -> float:
        with self._lock:
            return self.t

    def advance(self, seconds: float) -> None:
        with self._lock:
            self.t += seconds

    def sleep(self, seconds: float, token: CancellationToken) -> bool:
        self.sleeps.append(seconds)
        self.advance(seconds)
        if self.on_sleep is not None:
            self.on_sleep(seconds)
        return token.cancelled


class LogCapture(logging.Handler):
    """Collects structured log payloads (decoded JSON messages)."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[Dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload = json.loads(record.getMessage())
        except ValueError:
            payload = {"msg": record.getMessage()}
        payload.setdefault("level", record.levelname)
        self.records.append(payload)

    def events(self, name: str | None = None) -> List[Dict[str, Any]]:
        return [r for r in self.records if name is None or r.get("event") == name]

    def names(self) -> List[str]:
        return [r.get("event", "") for r in self.records]


class RecordingTransport:
    """Wraps a request handler and keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: List[httpx.Request] = []
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        return self.handler(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def log_capture() -> Iterator[LogCapture]:
    logger = get_logger(BASE_LOGGER_NAME)
    handler = LogCapture()
    previous = logger.level
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)


@pytest.fixture()
def mock_http() -> Iterator[Callable[[Callable[[httpx.Request], httpx.Response]], RecordingTransport]]:
    """Factory fixture: ``transport = mock_http(handler); transport.client()``."""

    clients: List[httpx.Client] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> RecordingTransport:
        transport = RecordingTransport(handler)
        original = transport.client

        def _client() -> httpx.Client:
            c = original()
            clients.append(c)
            return c

        transport.client = _client  # type: ignore[method-assign]
        return transport

    yield _make
    for c in clients:
        c.close()


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "COPILOT_GITHUB_TOKEN",
        "GITHUB_TOKEN",
        "GH_TOKEN",
        "COPILOT_MODEL",
        "COPILOT_BASE_URL",
        "COPILOT_ENTERPRISE_URL",
        "COPILOT_STREAMING",
        "COPILOT_QUEUE_CAPACITY",
        "PROVIDERS_CONFIG_FILE",
        "PT_TIMEOUT_HTTP_SECONDS",
        "PT_TIMEOUT_GENERATION_SECONDS",
        "PT_TIMEOUT_STREAM_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture(scope="session", autouse=True)
def close_pooled_clients_after_session() -> Iterator[None]:
    """Close pooled httpx clients once the session ends."""
    yield
    close_all_clients()

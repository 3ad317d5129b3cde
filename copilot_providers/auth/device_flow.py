"""OAuth device-authorization client.

Purpose:
- Obtain a held GitHub token interactively: request a device code, show the
  user code and verification URI, then poll the access-token endpoint until
  the user approves in a browser.

Polling model:
- The loop is an explicit state machine. ``PollState`` carries the current
  interval and attempt count; :func:`next_state` is the pure transition
  ``pending -> backoff(n) -> pending -> success|failure``.
- Each tick first waits the current interval through the injected
  :class:`Clock` (interruptible by the cancellation token), then issues one
  request. ``slow_down`` adds five seconds to the interval, cumulatively.

Failure semantics:
- Non-2xx responses and structured errors other than ``authorization_pending``
  and ``slow_down`` end the loop with a ``ProviderError``; nothing is retried.
- Cancellation is checked before every request and during every wait; no
  request starts once the token is cancelled.
- The grant's ``expires_in`` is not enforced unless
  ``enforce_grant_expiry=True``; callers normally bound the loop with a
  deadline on their cancellation token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Tuple

import httpx
from pydantic import BaseModel, ValidationError, computed_field

from ..base.cancellation import CancellationToken, CancelledError
from ..base.concurrency import run_cancellable
from ..base.errors import ErrorCode, ProviderError, decode_error, network_error, status_error
from ..base.http import get_httpx_client, json_headers
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..config.defaults import (
    COPILOT_CLIENT_ID,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEVICE_FLOW_SCOPE,
    DEVICE_GRANT_TYPE,
    GITHUB_DEFAULT_ACCESS_TOKEN_URL,
    GITHUB_DEFAULT_DEVICE_CODE_URL,
    PROVIDER_NAME,
    SLOW_DOWN_INCREMENT_SECONDS,
)
from .clock import Clock, SystemClock

PENDING_ERROR = "authorization_pending"
SLOW_DOWN_ERROR = "slow_down"


class DeviceGrant(BaseModel):
    """Device-code response plus the local time it was issued."""

    device_code: str
    user_code: str
    verification_uri: str
    expires_in: int = 0
    interval: int = 0
    issued_at: float = 0.0

    @computed_field  # type: ignore[misc]
    @property
    def expires_at(self) -> float:
        return self.issued_at + self.expires_in

    def __repr__(self) -> str:
        return f"DeviceGrant(user_code={self.user_code!r}, verification_uri={self.verification_uri!r}, expires_in={self.expires_in})"


class AccessTokenResponse(BaseModel):
    """One poll response: either an access token or a structured error."""

    access_token: str = ""
    token_type: str = ""
    scope: str = ""
    error: str = ""
    error_description: str = ""


class PollOutcome(str, Enum):
    PENDING = "pending"
    SLOW_DOWN = "slow_down"
    SUCCESS = "success"


@dataclass(frozen=True)
class PollState:
    """Interval in seconds before the next request, and requests made so far."""

    interval: float
    attempts: int = 0


def next_state(state: PollState, response: AccessTokenResponse) -> Tuple[PollState, PollOutcome]:
    """Advance the poll state machine by one response.

    Raises:
        ProviderError: ``AUTH`` for any structured error other than
            ``authorization_pending``/``slow_down`` (``access_denied``,
            ``expired_token``, ...).
    """
    attempted = replace(state, attempts=state.attempts + 1)
    if response.error == PENDING_ERROR:
        return attempted, PollOutcome.PENDING
    if response.error == SLOW_DOWN_ERROR:
        return replace(attempted, interval=attempted.interval + SLOW_DOWN_INCREMENT_SECONDS), PollOutcome.SLOW_DOWN
    if response.error:
        detail = f": {response.error_description}" if response.error_description else ""
        raise ProviderError(
            code=ErrorCode.AUTH,
            message=f"device authorization failed: {response.error}{detail}",
            provider=PROVIDER_NAME,
        )
    if response.access_token:
        return attempted, PollOutcome.SUCCESS
    # Neither token nor error: treat like pending.
    return attempted, PollOutcome.PENDING


def print_instructions(grant: DeviceGrant) -> None:
    """Default user prompt: print where to go and what to type."""
    print("\nTo authenticate with GitHub Copilot:")
    print(f"1. Visit: {grant.verification_uri}")
    print(f"2. Enter code: {grant.user_code}\n")
    print("Waiting for authorization...")


class DeviceAuthorizationClient:
    """Runs the device-authorization grant against GitHub (or an Enterprise host)."""

    def __init__(
        self,
        *,
        device_code_url: str = GITHUB_DEFAULT_DEVICE_CODE_URL,
        access_token_url: str = GITHUB_DEFAULT_ACCESS_TOKEN_URL,
        http_client: Optional[httpx.Client] = None,
        clock: Optional[Clock] = None,
        client_id: str = COPILOT_CLIENT_ID,
        enforce_grant_expiry: bool = False,
    ) -> None:
        self._device_code_url = device_code_url
        self._access_token_url = access_token_url
        self._http = http_client
        self._clock: Clock = clock or SystemClock()
        self._client_id = client_id
        self._enforce_grant_expiry = enforce_grant_expiry
        self._logger = get_logger("copilot_providers.auth")
        self._ctx = LogContext(provider=PROVIDER_NAME, extra={"component": "device_flow"})

    @classmethod
    def from_endpoints(cls, endpoints, **kwargs) -> "DeviceAuthorizationClient":
        """Build from a resolved ``Endpoints`` bundle."""
        return cls(
            device_code_url=endpoints.device_code_url,
            access_token_url=endpoints.access_token_url,
            **kwargs,
        )

    def _client(self) -> httpx.Client:
        return self._http or get_httpx_client(None, purpose="copilot.auth")

    def _post(self, url: str, payload: dict, *, action: str, token: CancellationToken) -> httpx.Response:
        token.raise_if_cancelled()
        try:
            return run_cancellable(
                lambda: self._client().post(url, json=payload, headers=json_headers()),
                token,
                name="copilot-device-flow",
            )
        except httpx.HTTPError as e:
            raise network_error(e, provider=PROVIDER_NAME, action=f"send {action}") from e

    def start_device_flow(self, token: Optional[CancellationToken] = None) -> DeviceGrant:
        """Request a device code and user code."""
        token = token or CancellationToken()
        normalized_log_event(
            self._logger, "auth.device.start", self._ctx, phase="start", url=self._device_code_url
        )
        resp = self._post(
            self._device_code_url,
            {"client_id": self._client_id, "scope": DEVICE_FLOW_SCOPE},
            action="device code request",
            token=token,
        )
        if resp.status_code != 200:
            err = status_error(resp, provider=PROVIDER_NAME, action="device code request")
            normalized_log_event(
                self._logger,
                "auth.device.error",
                self._ctx,
                phase="start",
                error_code=err.code.value,
                status=err.status,
                level=logging.ERROR,
            )
            raise err
        try:
            grant = DeviceGrant.model_validate({**resp.json(), "issued_at": self._clock.now()})
        except (ValueError, TypeError, ValidationError) as e:
            raise decode_error(e, provider=PROVIDER_NAME, action="device code") from e
        normalized_log_event(
            self._logger,
            "auth.device.started",
            self._ctx,
            phase="start",
            verification_uri=grant.verification_uri,
            user_code=grant.user_code,
            expires_in=grant.expires_in,
            interval=grant.interval,
        )
        return grant

    def check_access_token(self, device_code: str, token: Optional[CancellationToken] = None) -> AccessTokenResponse:
        """Issue one poll request; non-2xx raises, structured errors are returned."""
        token = token or CancellationToken()
        resp = self._post(
            self._access_token_url,
            {"client_id": self._client_id, "device_code": device_code, "grant_type": DEVICE_GRANT_TYPE},
            action="access token request",
            token=token,
        )
        if resp.status_code != 200:
            raise status_error(resp, provider=PROVIDER_NAME, action="access token request")
        try:
            return AccessTokenResponse.model_validate(resp.json())
        except (ValueError, TypeError, ValidationError) as e:
            raise decode_error(e, provider=PROVIDER_NAME, action="access token") from e

    def poll_for_access_token(
        self,
        device_code: str,
        interval: float,
        token: Optional[CancellationToken] = None,
        *,
        expires_at: Optional[float] = None,
    ) -> str:
        """Poll until the user approves, the server refuses, or ``token`` is cancelled.

        Parameters:
            device_code: Secret code from :meth:`start_device_flow`.
            interval: Initial seconds between requests; non-positive values
                fall back to the OAuth default of five seconds.
            token: Cancellation signal; observed during every wait and before
                every request.
            expires_at: Absolute grant expiry; only consulted when the client
                was built with ``enforce_grant_expiry=True``.

        Raises:
            CancelledError: when ``token`` is cancelled.
            ProviderError: on transport, status, decode or terminal OAuth errors.
        """
        token = token or CancellationToken()
        state = PollState(interval=float(interval) if interval and interval > 0 else DEFAULT_POLL_INTERVAL_SECONDS)
        normalized_log_event(
            self._logger, "auth.device.poll_start", self._ctx, phase="poll", interval=state.interval
        )
        while True:
            if self._clock.sleep(state.interval, token):
                self._log_cancelled(state, token)
                raise CancelledError(token.reason or "device authorization cancelled", deadline=token.deadline_exceeded)
            if token.cancelled:
                self._log_cancelled(state, token)
                token.raise_if_cancelled()
            if self._enforce_grant_expiry and expires_at is not None and self._clock.now() >= expires_at:
                raise ProviderError(
                    code=ErrorCode.AUTH,
                    message="device code expired before authorization completed",
                    provider=PROVIDER_NAME,
                )
            response = self.check_access_token(device_code, token)
            try:
                state, outcome = next_state(state, response)
            except ProviderError as e:
                normalized_log_event(
                    self._logger,
                    "auth.device.error",
                    self._ctx,
                    phase="poll",
                    attempt=state.attempts + 1,
                    error_code=e.code.value,
                    oauth_error=response.error,
                    level=logging.ERROR,
                )
                raise
            if outcome is PollOutcome.SUCCESS:
                normalized_log_event(
                    self._logger, "auth.device.authorized", self._ctx, phase="finalize", attempt=state.attempts
                )
                return response.access_token
            if outcome is PollOutcome.SLOW_DOWN:
                normalized_log_event(
                    self._logger,
                    "auth.device.slow_down",
                    self._ctx,
                    phase="poll",
                    attempt=state.attempts,
                    interval=state.interval,
                    level=logging.WARNING,
                )

    def _log_cancelled(self, state: PollState, token: CancellationToken) -> None:
        normalized_log_event(
            self._logger,
            "auth.device.cancelled",
            self._ctx,
            phase="poll",
            attempt=state.attempts,
            error_code=ErrorCode.CANCELLED.value,
            reason=token.reason,
            level=logging.WARNING,
        )

    def authenticate(
        self,
        token: Optional[CancellationToken] = None,
        *,
        prompt: Callable[[DeviceGrant], None] = print_instructions,
    ) -> str:
        """Run the whole grant and return the held access token."""
        token = token or CancellationToken()
        grant = self.start_device_flow(token)
        prompt(grant)
        access_token = self.poll_for_access_token(
            grant.device_code, grant.interval, token, expires_at=grant.expires_at
        )
        normalized_log_event(self._logger, "auth.device.complete", self._ctx, phase="finalize", emitted=True)
        return access_token


__all__ = [
    "DeviceGrant",
    "AccessTokenResponse",
    "PollOutcome",
    "PollState",
    "next_state",
    "print_instructions",
    "DeviceAuthorizationClient",
]

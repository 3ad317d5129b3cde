"""Credential exchanger: trade a held GitHub token for a short-lived Copilot token.

One ``GET`` against the exchange endpoint with the held token as bearer and
the editor integration headers. The response ``{token, expires_at}`` becomes
an EXCHANGED :class:`Credential`. Failures are classified and raised; this
module never retries and never caches (caching belongs to the lifecycle
manager).
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError, field_validator

from ..base.cancellation import CancellationToken
from ..base.concurrency import run_cancellable
from ..base.errors import decode_error, network_error, status_error
from ..base.http import editor_headers, get_httpx_client
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..config.defaults import COPILOT_DEFAULT_EXCHANGE_URL, PROVIDER_NAME
from .credentials import Credential


class ExchangeResponse(BaseModel):
    """Exchange endpoint payload; unknown keys are ignored."""

    token: str
    expires_at: float
    refresh_in: Optional[float] = None

    @field_validator("token")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("token must be non-empty")
        return v


class CredentialExchanger:
    """Calls the token exchange endpoint."""

    def __init__(self, url: str = COPILOT_DEFAULT_EXCHANGE_URL, http_client: Optional[httpx.Client] = None) -> None:
        self._url = url
        self._http = http_client
        self._logger = get_logger("copilot_providers.auth")
        self._ctx = LogContext(provider=PROVIDER_NAME, extra={"component": "exchange"})

    @property
    def url(self) -> str:
        return self._url

    def exchange(self, held_token: str, token: Optional[CancellationToken] = None) -> Credential:
        """Exchange ``held_token`` for a service credential.

        Raises:
            CancelledError: ``token`` cancelled before or while the request is
                in flight; nothing is sent once it is cancelled.
            ProviderError: ``NETWORK``/``TIMEOUT`` when unreachable, a status
                error carrying status and body on non-2xx, ``DECODE`` when the
                body is not ``{token, expires_at}``.
        """
        if token is not None:
            token.raise_if_cancelled()
        client = self._http or get_httpx_client(None, purpose="copilot.auth")
        normalized_log_event(self._logger, "auth.exchange.start", self._ctx, phase="start", url=self._url)
        try:
            resp = run_cancellable(
                lambda: client.get(self._url, headers=editor_headers(bearer=held_token)),
                token,
                name="copilot-token-exchange",
            )
        except httpx.HTTPError as e:
            err = network_error(e, provider=PROVIDER_NAME, action="send token exchange request")
            self._log_failure(err.code.value)
            raise err from e
        if not resp.is_success:
            err = status_error(resp, provider=PROVIDER_NAME, action="token exchange")
            self._log_failure(err.code.value, status=resp.status_code)
            raise err
        try:
            parsed = ExchangeResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            err = decode_error(e, provider=PROVIDER_NAME, action="token exchange")
            self._log_failure(err.code.value)
            raise err from e
        normalized_log_event(
            self._logger,
            "auth.exchange.end",
            self._ctx,
            phase="finalize",
            emitted=True,
            expires_at=parsed.expires_at,
        )
        return Credential.exchanged(parsed.token, parsed.expires_at, parsed.refresh_in)

    def _log_failure(self, code: str, *, status: Optional[int] = None) -> None:
        normalized_log_event(
            self._logger,
            "auth.exchange.error",
            self._ctx,
            phase="finalize",
            emitted=False,
            error_code=code,
            status=status,
            level=logging.ERROR,
        )


__all__ = ["ExchangeResponse", "CredentialExchanger"]

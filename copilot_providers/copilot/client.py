"""GitHub Copilot provider (chat-completions over HTTPS).

Purpose:
    Public entry point for generations against the Copilot completion API.
    Each generation ensures a usable credential, converts the request, POSTs
    ``/chat/completions`` and turns the reply into a lazy sequence of
    :class:`ResponseFragment` values.

External dependencies:
    - ``httpx`` only (pooled client from ``base.http`` unless one is injected).

Credentials:
    - A ``github_pat_`` token is used directly.
    - Any other held token (OAuth token from the device flow, ``gho_...``) is
      exchanged for a short-lived Copilot token which is cached until expiry
      by the :class:`CredentialLifecycleManager` owned by this instance.

Streaming:
    - ``stream=False``: one request, one turn-complete fragment.
    - ``stream=True``: the SSE body is decoded incrementally and bridged by
      :class:`StreamBridge`; partial fragments per delta, one turn-complete
      fragment on ``finish_reason``, and the sequence simply ends on
      ``[DONE]`` when no finish reason was sent.

Failure semantics:
    - Errors are raised from the generator (``ProviderError`` with a
      normalized ``ErrorCode``, or ``CancelledError``); nothing is retried.
    - Blocking network reads run off the caller's thread (a worker for the
      single completion request, the bridge's reader thread for SSE), so
      cancelling the token raises ``CancelledError`` at once even while the
      server is silent. The abandoned read ends with its own timeout.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterator, Optional, Tuple

import httpx

from ..auth import (
    Clock,
    CredentialExchanger,
    CredentialLifecycleManager,
    CredentialStore,
    DeviceAuthorizationClient,
)
from ..auth.device_flow import DeviceGrant, print_instructions
from ..base.cancellation import CancellationToken, CancelledError
from ..base.concurrency import run_cancellable
from ..base.errors import ErrorCode, ProviderError, decode_error, network_error, status_error
from ..base.http import get_httpx_client
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import ChatRequest, ChatResponse, ProviderMetadata, ResponseFragment
from ..base.streaming import BridgeEvent, StreamBridge, chunk_events, iter_frames
from ..base.timeouts import get_timeout_config
from ..config import get_provider_config
from ..config.defaults import (
    COPILOT_CHAT_COMPLETIONS_PATH,
    COPILOT_DEFAULT_MODEL,
    EVENT_QUEUE_CAPACITY,
    PROVIDER_NAME,
)
from ..config.env import resolve_github_token
from .endpoints import Endpoints
from .helpers import (
    chunk_to_event,
    convert_request,
    convert_response,
    request_headers,
    to_chat_response,
)


class CopilotProvider:
    """Chat-completions client for GitHub Copilot."""

    def __init__(
        self,
        github_token: Optional[str] = None,
        *,
        model: Optional[str] = None,
        enterprise_url: Optional[str] = None,
        base_url: Optional[str] = None,
        streaming: Optional[bool] = None,
        http_client: Optional[httpx.Client] = None,
        clock: Optional[Clock] = None,
        store: Optional[CredentialStore] = None,
        queue_capacity: Optional[int] = None,
    ) -> None:
        """Resolve configuration and build the credential manager.

        Parameters
        ----------
        github_token:
            Held token. When omitted, ``COPILOT_GITHUB_TOKEN``/``GITHUB_TOKEN``/
            ``GH_TOKEN`` are consulted; with none set a ``VALIDATION`` error
            is raised (use :meth:`from_device_flow` to obtain one).
        model, enterprise_url, base_url, streaming, queue_capacity:
            Overrides on top of the layered configuration.
        http_client:
            Custom ``httpx.Client`` for every call (proxies, TLS, tests).
        clock, store:
            Injected time source and credential store.
        """
        cfg = get_provider_config(
            PROVIDER_NAME,
            overrides={
                "model": model,
                "enterprise_url": enterprise_url,
                "base_url": base_url,
                "streaming": streaming,
                "queue_capacity": queue_capacity,
            },
        )
        if not github_token:
            github_token, _ = resolve_github_token()
        self._endpoints = Endpoints.resolve(cfg.get("enterprise_url"), base_url=cfg.get("base_url"))
        self._model = str(cfg.get("model") or COPILOT_DEFAULT_MODEL)
        self._streaming = bool(cfg.get("streaming", False))
        self._queue_capacity = int(cfg.get("queue_capacity") or EVENT_QUEUE_CAPACITY)
        self._http = http_client
        self._credentials = CredentialLifecycleManager(
            github_token or "",
            CredentialExchanger(self._endpoints.exchange_url, http_client),
            store,
            clock,
        )
        self._closed = False
        self._logger = get_logger("copilot_providers.copilot")

    @classmethod
    def from_device_flow(
        cls,
        token: Optional[CancellationToken] = None,
        *,
        prompt: Callable[[DeviceGrant], None] = print_instructions,
        enterprise_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        clock: Optional[Clock] = None,
        **kwargs: Any,
    ) -> "CopilotProvider":
        """Run the interactive device flow, then build a provider with the token."""
        endpoints = Endpoints.resolve(enterprise_url or get_provider_config(PROVIDER_NAME).get("enterprise_url"))
        authenticator = DeviceAuthorizationClient.from_endpoints(endpoints, http_client=http_client, clock=clock)
        held = authenticator.authenticate(token, prompt=prompt)
        return cls(held, enterprise_url=enterprise_url, http_client=http_client, clock=clock, **kwargs)

    @property
    def provider_name(self) -> str:
        """Return the stable provider identifier string."""
        return PROVIDER_NAME

    @property
    def endpoints(self) -> Endpoints:
        return self._endpoints

    @property
    def credentials(self) -> CredentialLifecycleManager:
        return self._credentials

    def default_model(self) -> Optional[str]:
        return self._model

    def supports_streaming(self) -> bool:
        return True

    # ---- Generation ----
    def generate(
        self,
        request: ChatRequest,
        stream: Optional[bool] = None,
        token: Optional[CancellationToken] = None,
    ) -> Iterator[ResponseFragment]:
        """Lazy fragment sequence for ``request``.

        Nothing happens until the first ``next()``. Exactly one fragment has
        ``turn_complete=True`` when the service reports a finish reason, and
        nothing follows it.
        """
        if self._closed:
            raise ProviderError(code=ErrorCode.VALIDATION, message="provider is closed", provider=PROVIDER_NAME)
        use_stream = self._streaming if stream is None else stream
        model = request.model or self._model
        ctx = LogContext(provider=PROVIDER_NAME, model=model, transport="http")
        return self._generate(request, model, use_stream, token or CancellationToken(), ctx)

    def _generate(
        self,
        request: ChatRequest,
        model: str,
        stream: bool,
        token: CancellationToken,
        ctx: LogContext,
    ) -> Iterator[ResponseFragment]:
        normalized_log_event(
            self._logger,
            "chat.start",
            ctx,
            phase="start",
            stream=stream,
            messages=len(request.messages),
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )
        try:
            api_key = self._credentials.ensure_credential(token)
            payload = convert_request(request, model=model, stream=stream)
            token.raise_if_cancelled()
            if stream:
                yield from self._stream(payload, api_key, model, token, ctx)
            else:
                yield self._complete(payload, api_key, model, token, ctx)
        except (ProviderError, CancelledError) as e:
            code = e.code.value if isinstance(e, ProviderError) else ErrorCode.CANCELLED.value
            normalized_log_event(
                self._logger,
                "chat.error",
                ctx,
                phase="finalize",
                emitted=False,
                error_code=code,
                error=str(e),
                level=logging.WARNING,
            )
            raise

    def _url(self) -> str:
        return self._endpoints.base_url + COPILOT_CHAT_COMPLETIONS_PATH

    def _client(self) -> httpx.Client:
        return self._http or get_httpx_client(None, purpose="copilot.chat")

    def _complete(
        self,
        payload: dict,
        api_key: str,
        model: str,
        token: CancellationToken,
        ctx: LogContext,
    ) -> ResponseFragment:
        t0 = time.perf_counter()

        def _send() -> Tuple[httpx.Response, dict]:
            try:
                resp = self._client().post(
                    self._url(),
                    json=payload,
                    headers=request_headers(api_key, False),
                    timeout=get_timeout_config().httpx_timeout(),
                )
            except httpx.HTTPError as e:
                raise network_error(e, provider=PROVIDER_NAME, action="send chat completion request", model=model) from e
            if not resp.is_success:
                raise status_error(resp, provider=PROVIDER_NAME, action="chat completion request", model=model)
            try:
                data = resp.json()
                if not isinstance(data, dict):
                    raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            except ValueError as e:
                raise decode_error(e, provider=PROVIDER_NAME, action="chat completion", model=model) from e
            return resp, data

        resp, data = run_cancellable(_send, token, name="copilot-chat-request")
        fragment = convert_response(data)
        normalized_log_event(
            self._logger,
            "chat.end",
            ctx,
            phase="finalize",
            emitted=True,
            tokens=fragment.usage,
            latency_ms=(time.perf_counter() - t0) * 1000.0,
            http_status=resp.status_code,
        )
        return fragment

    def _stream(
        self,
        payload: dict,
        api_key: str,
        model: str,
        token: CancellationToken,
        ctx: LogContext,
    ) -> Iterator[ResponseFragment]:
        bridge = StreamBridge(
            streaming=True,
            token=token,
            logger=self._logger,
            ctx=ctx,
            capacity=self._queue_capacity,
        )
        bridge.feed_from(lambda: self._read_stream(payload, api_key, model, token, ctx))
        yield from bridge.run()

    def _read_stream(
        self,
        payload: dict,
        api_key: str,
        model: str,
        token: CancellationToken,
        ctx: LogContext,
    ) -> Iterator[BridgeEvent]:
        """SSE body as bridge events; runs on the bridge's reader thread."""
        try:
            with self._client().stream(
                "POST",
                self._url(),
                json=payload,
                headers=request_headers(api_key, True),
                timeout=get_timeout_config().httpx_timeout(streaming=True),
            ) as resp:
                if not resp.is_success:
                    resp.read()
                    raise status_error(resp, provider=PROVIDER_NAME, action="chat completion request", model=model)
                yield from chunk_events(
                    iter_frames(resp.iter_bytes()),
                    chunk_to_event,
                    logger=self._logger,
                    ctx=ctx,
                )
        except (httpx.HTTPError, httpx.StreamError) as e:
            if token.cancelled:
                return
            raise network_error(e, provider=PROVIDER_NAME, action="read chat completion stream", model=model) from e

    # ---- Convenience wrappers ----
    def chat(self, request: ChatRequest, token: Optional[CancellationToken] = None) -> ChatResponse:
        """Non-streaming generation collected into a ``ChatResponse``."""
        t0 = time.perf_counter()
        model = request.model or self._model
        response = to_chat_response(
            self.generate(request, stream=False, token=token),
            meta=ProviderMetadata(provider_name=PROVIDER_NAME, model_name=model, transport="http"),
        )
        response.meta.latency_ms = (time.perf_counter() - t0) * 1000.0
        response.meta.extra["credential"] = "direct" if self._credentials.direct else "exchanged"
        return response

    def stream_chat(
        self, request: ChatRequest, token: Optional[CancellationToken] = None
    ) -> Iterator[ResponseFragment]:
        """Streaming generation: partial fragments, then the turn-complete one."""
        return self.generate(request, stream=True, token=token)

    # ---- Lifecycle ----
    def close(self) -> None:
        """Release the cached credential; safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        self._credentials.invalidate()
        normalized_log_event(self._logger, "provider.close", LogContext(provider=PROVIDER_NAME), phase="finalize")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "CopilotProvider":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["CopilotProvider"]

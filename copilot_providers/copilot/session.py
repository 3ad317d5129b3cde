"""GitHub Copilot provider over a push-style agent session.

The caller supplies a ``session_factory``: given a session config mapping
(``model``, ``streaming``, ``tools``) it returns a session object exposing

* ``on(handler) -> unsubscribe``: deliver events to ``handler`` on the
  session's own thread,
* ``send({"prompt": str})``: start a turn,
* optionally ``abort()`` (called on cancellation) and ``destroy()`` or
  ``close()`` (called when the generation ends).

Events are bridged into fragments through :class:`PushSubscription` and
:class:`StreamBridge`. Tool round trips run inside the session: each
:class:`Tool` is registered with a handler that wraps the caller's function
and reports ``{"result": ...}`` or ``{"error": "..."}`` back to the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from ..base.cancellation import CancellationToken
from ..base.errors import ErrorCode, ProviderError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import ChatRequest, ChatResponse, ProviderMetadata, ResponseFragment
from ..base.streaming import PushSubscription, StreamBridge
from ..base.timeouts import get_timeout_config
from ..config import get_provider_config
from ..config.defaults import COPILOT_DEFAULT_MODEL, EVENT_QUEUE_CAPACITY, PROVIDER_NAME
from .helpers import format_prompt, to_chat_response

SessionFactory = Callable[[Dict[str, Any]], Any]


@dataclass
class ToolInvocation:
    """One tool call requested by the session."""

    tool_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    tool_call_id: Optional[str] = None
    session_id: Optional[str] = None


@dataclass
class Tool:
    """A function the assistant may call during a session turn.

    ``parameters`` is a ready-made JSON schema; ``handler`` receives the
    decoded arguments and the invocation, and returns any JSON-serializable
    value.
    """

    name: str
    description: str
    handler: Callable[[Dict[str, Any], ToolInvocation], Any]
    parameters: Optional[Dict[str, Any]] = None

    def invoke(self, invocation: ToolInvocation) -> Dict[str, Any]:
        """Run the handler; failures are reported to the session, not raised."""
        logger = get_logger("copilot_providers.copilot")
        ctx = LogContext(provider=PROVIDER_NAME, transport="session", extra={"tool": self.name})
        try:
            result = self.handler(dict(invocation.arguments or {}), invocation)
        except Exception as e:  # handler errors go back to the model as tool output
            normalized_log_event(
                logger,
                "tool.error",
                ctx,
                phase="mid_stream",
                error=str(e),
                error_code=ErrorCode.INTERNAL.value,
                tool_call_id=invocation.tool_call_id,
                level=logging.WARNING,
            )
            return {"error": str(e)}
        normalized_log_event(
            logger, "tool.end", ctx, phase="mid_stream", emitted=True, tool_call_id=invocation.tool_call_id
        )
        return {"result": result}

    def definition(self) -> Dict[str, Any]:
        """Session-side registration record."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters or {"type": "object", "properties": {}},
            "handler": self._session_handler,
        }

    def _session_handler(self, invocation: Any) -> Dict[str, Any]:
        if isinstance(invocation, ToolInvocation):
            return self.invoke(invocation)
        get = invocation.get if isinstance(invocation, dict) else lambda k: getattr(invocation, k, None)
        return self.invoke(
            ToolInvocation(
                tool_name=get("tool_name") or self.name,
                arguments=get("arguments") or {},
                tool_call_id=get("tool_call_id"),
                session_id=get("session_id"),
            )
        )


class CopilotSessionProvider:
    """Copilot generations through a caller-supplied agent session."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        model: Optional[str] = None,
        tools: Optional[Sequence[Tool]] = None,
        streaming: Optional[bool] = None,
        queue_capacity: Optional[int] = None,
        idle_timeout: Optional[float] = None,
    ) -> None:
        cfg = get_provider_config(
            PROVIDER_NAME,
            overrides={"model": model, "streaming": streaming, "queue_capacity": queue_capacity},
        )
        self._factory = session_factory
        self._model = str(cfg.get("model") or COPILOT_DEFAULT_MODEL)
        self._streaming = bool(cfg.get("streaming", False))
        self._queue_capacity = int(cfg.get("queue_capacity") or EVENT_QUEUE_CAPACITY)
        self._idle_timeout = idle_timeout if idle_timeout is not None else get_timeout_config().stream_timeout_seconds
        self._tools: List[Tool] = list(tools or [])
        self._closed = False
        self._logger = get_logger("copilot_providers.copilot")

    @property
    def provider_name(self) -> str:
        return PROVIDER_NAME

    @property
    def tools(self) -> List[Tool]:
        return list(self._tools)

    def default_model(self) -> Optional[str]:
        return self._model

    def supports_streaming(self) -> bool:
        return True

    def generate(
        self,
        request: ChatRequest,
        stream: Optional[bool] = None,
        token: Optional[CancellationToken] = None,
    ) -> Iterator[ResponseFragment]:
        """Lazy fragment sequence; the session is opened on the first ``next()``."""
        if self._closed:
            raise ProviderError(code=ErrorCode.VALIDATION, message="provider is closed", provider=PROVIDER_NAME)
        use_stream = self._streaming if stream is None else stream
        model = request.model or self._model
        return self._generate(request, model, use_stream, token or CancellationToken())

    def _session_config(self, request: ChatRequest, model: str, stream: bool) -> Dict[str, Any]:
        tools = list(self._tools) + [t for t in (request.tools or []) if isinstance(t, Tool)]
        config: Dict[str, Any] = {"model": model, "streaming": stream}
        if tools:
            config["tools"] = [t.definition() for t in tools]
        return config

    def _generate(
        self,
        request: ChatRequest,
        model: str,
        stream: bool,
        token: CancellationToken,
    ) -> Iterator[ResponseFragment]:
        ctx = LogContext(provider=PROVIDER_NAME, model=model, transport="session")
        token.raise_if_cancelled()
        session = self._factory(self._session_config(request, model, stream))
        bridge = StreamBridge(
            streaming=stream,
            token=token,
            logger=self._logger,
            ctx=ctx,
            capacity=self._queue_capacity,
            idle_timeout=self._idle_timeout,
        )
        abort = getattr(session, "abort", None)
        unregister = token.on_cancel(abort) if callable(abort) else (lambda: None)
        try:
            with PushSubscription(session, bridge.listener):
                prompt = format_prompt(request.messages)
                normalized_log_event(
                    self._logger, "chat.start", ctx, phase="start", stream=stream, prompt_chars=len(prompt)
                )
                session.send({"prompt": prompt})
                yield from bridge.run()
        finally:
            unregister()
            release = getattr(session, "destroy", None) or getattr(session, "close", None)
            if callable(release):
                release()

    def chat(self, request: ChatRequest, token: Optional[CancellationToken] = None) -> ChatResponse:
        model = request.model or self._model
        return to_chat_response(
            self.generate(request, stream=False, token=token),
            meta=ProviderMetadata(provider_name=PROVIDER_NAME, model_name=model, transport="session"),
        )

    def stream_chat(
        self, request: ChatRequest, token: Optional[CancellationToken] = None
    ) -> Iterator[ResponseFragment]:
        return self.generate(request, stream=True, token=token)

    def close(self) -> None:
        """Idempotent; sessions are per-generation so nothing else is held."""
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "CopilotSessionProvider":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["Tool", "ToolInvocation", "CopilotSessionProvider", "SessionFactory"]

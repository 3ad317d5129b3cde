"""copilot_providers package

GitHub Copilot client: credential lifecycle (direct token, device flow,
token exchange) and a streaming bridge that turns push or pull transports
into one ordered, cancellable sequence of response fragments.

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`ProviderError`, :class:`ErrorCode`,
      :class:`CancelledError`
    - Cancellation: :class:`CancellationToken`
    - Models: :class:`ChatRequest`, :class:`Message`,
      :class:`ResponseFragment`, :class:`ChatResponse`
    - Providers: :class:`CopilotProvider`, :class:`CopilotSessionProvider`,
      :class:`Tool`
    - Factory: :func:`create`, :class:`ProviderFactory`

Example::

    from copilot_providers import ChatRequest, Message, create

    with create("github-copilot", model="gpt-4o") as provider:
        for fragment in provider.stream_chat(ChatRequest(messages=[Message.user("hi")])):
            print(fragment.text, end="")
"""

from typing import Any

from .base.cancellation import CancellationToken, CancelledError
from .base.errors import ErrorCode, ProviderError
from .base.factory import ProviderFactory, UnknownProviderError
from .base.interfaces import HasDefaultModel, LLMProvider, SupportsStreaming
from .base.models import ChatRequest, ChatResponse, FinishReason, Message, ResponseFragment, Usage
from .copilot import CopilotProvider, CopilotSessionProvider, Tool, ToolInvocation

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "ProviderError",
    "ErrorCode",
    "CancelledError",
    # Cancellation
    "CancellationToken",
    # Models
    "ChatRequest",
    "ChatResponse",
    "FinishReason",
    "Message",
    "ResponseFragment",
    "Usage",
    # Providers
    "CopilotProvider",
    "CopilotSessionProvider",
    "Tool",
    "ToolInvocation",
    # Factory
    "create",
    "ProviderFactory",
    # Interfaces
    "LLMProvider",
    "SupportsStreaming",
    "HasDefaultModel",
]


def create(kind: str = "github-copilot", **kwargs: Any) -> Any:
    """Instantiate a provider via :class:`ProviderFactory`.

    Parameters
    ----------
    kind:
        ``"github-copilot"`` (HTTP transport) or ``"github-copilot-session"``
        (push transport over a caller-supplied session factory).
    **kwargs:
        Provider constructor keyword arguments.

    Raises
    ------
    ProviderError
        ``VALIDATION`` for an unknown kind or bad arguments; errors raised by
        the provider constructor itself propagate unchanged.
    """
    try:
        return ProviderFactory.create(kind, **kwargs)
    except UnknownProviderError as e:
        raise ProviderError(
            code=ErrorCode.VALIDATION,
            message=f"Failed to create provider '{kind}': {e}",
            provider=kind,
        ) from e

"""GitHub Copilot providers: HTTP chat-completions and push sessions."""

from .client import CopilotProvider
from .endpoints import Endpoints, normalize_domain
from .session import CopilotSessionProvider, Tool, ToolInvocation

__all__ = [
    "CopilotProvider",
    "CopilotSessionProvider",
    "Endpoints",
    "Tool",
    "ToolInvocation",
    "normalize_domain",
]

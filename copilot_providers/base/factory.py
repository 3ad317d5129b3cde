"""Provider Factory utilities.

Purpose
-------
Create provider instances by a canonical kind name. Provider modules are
imported lazily with ``importlib`` so importing the package stays cheap.

Kinds
-----
- ``"github-copilot"`` (alias ``"http"``): :class:`CopilotProvider`,
  chat-completions over HTTPS.
- ``"github-copilot-session"`` (alias ``"session"``):
  :class:`CopilotSessionProvider`, push transport over a caller session.

No timeouts, retries or fallbacks are introduced here; the factory either
returns an instance or raises :class:`UnknownProviderError`.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple, Type


class UnknownProviderError(Exception):
    """Raised when a provider kind cannot be resolved or initialized."""


class ProviderFactory:
    """Create providers based on a canonical kind name."""

    _PROVIDERS: Dict[str, Dict[str, str]] = {
        "github-copilot": {"module": "copilot_providers.copilot.client", "class": "CopilotProvider"},
        "github-copilot-session": {"module": "copilot_providers.copilot.session", "class": "CopilotSessionProvider"},
    }
    _ALIASES: Dict[str, str] = {
        "copilot": "github-copilot",
        "http": "github-copilot",
        "session": "github-copilot-session",
    }

    @classmethod
    def create(cls, kind: str, **kwargs: Any) -> Any:
        """Instantiate the provider registered for ``kind``.

        Raises
        ------
        UnknownProviderError
            Unknown kind, missing class, or bad constructor arguments.
        """
        name = (kind or "").lower().strip()
        name = cls._ALIASES.get(name, name)
        spec = cls._PROVIDERS.get(name)
        if not spec:
            raise UnknownProviderError(f"Unknown provider '{kind}'")

        module_path, class_name = spec["module"], spec["class"]
        mod = import_module(module_path)
        try:
            klass: Type = getattr(mod, class_name)
        except AttributeError as exc:
            raise UnknownProviderError(
                f"Provider class '{class_name}' not found in '{module_path}' for '{kind}'"
            ) from exc

        try:
            return klass(**kwargs)
        except TypeError as exc:
            raise UnknownProviderError(f"Invalid arguments for '{kind}' provider constructor: {exc}") from exc

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        """Canonical provider kinds in deterministic order."""
        return tuple(cls._PROVIDERS.keys())


def create_provider(kind: str, **kwargs: Any) -> Any:
    """Shortcut for :meth:`ProviderFactory.create`."""
    return ProviderFactory.create(kind, **kwargs)


__all__ = ["ProviderFactory", "UnknownProviderError", "create_provider"]

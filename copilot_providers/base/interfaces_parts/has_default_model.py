"""HasDefaultModel Protocol (single-class module)."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class HasDefaultModel(Protocol):
    """Providers that fall back to a configured model when a request names none."""

    def default_model(self) -> Optional[str]:  # pragma: no cover - trivial
        """Return the default model identifier for the provider, if available."""
        return None

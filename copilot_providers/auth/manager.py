"""Credential lifecycle manager.

Single entry point for the generation path: ``ensure_credential`` returns a
bearer value usable against the completion API right now.

Decision order:
1. Held token classified as direct (structural prefix check, done once at
   construction) -> returned as-is; no network call, no expiry tracking.
2. Cached exchanged credential still valid (``now < expires_at``) -> returned
   under a shared read.
3. Otherwise take the store exclusively, re-check (another caller may have
   refreshed while we waited), and exchange at most once.

Errors from the exchanger propagate unchanged; the manager does not retry.
"""

from __future__ import annotations

from typing import Optional

from ..base.cancellation import CancellationToken
from ..base.errors import ErrorCode, ProviderError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..config.defaults import DIRECT_TOKEN_PREFIXES, PROVIDER_NAME
from .clock import Clock, SystemClock
from .credentials import Credential, CredentialStore, Provenance
from .exchange import CredentialExchanger


def is_direct_token(token: str) -> bool:
    """True when ``token`` is usable against the completion API without exchange."""
    return bool(token) and token.startswith(DIRECT_TOKEN_PREFIXES)


class CredentialLifecycleManager:
    """Owns one :class:`CredentialStore` and decides when to exchange."""

    def __init__(
        self,
        held_token: str,
        exchanger: Optional[CredentialExchanger] = None,
        store: Optional[CredentialStore] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        if not held_token:
            raise ProviderError(
                code=ErrorCode.VALIDATION,
                message="a GitHub token is required (set COPILOT_GITHUB_TOKEN or run the device flow)",
                provider=PROVIDER_NAME,
            )
        self._held_token = held_token
        self._direct = is_direct_token(held_token)
        self._exchanger = exchanger or CredentialExchanger()
        self._store = store or CredentialStore()
        self._clock: Clock = clock or SystemClock()
        self._logger = get_logger("copilot_providers.auth")
        self._ctx = LogContext(provider=PROVIDER_NAME, extra={"component": "lifecycle"})

    @property
    def direct(self) -> bool:
        return self._direct

    @property
    def store(self) -> CredentialStore:
        return self._store

    def ensure_credential(self, token: Optional[CancellationToken] = None) -> str:
        """Return a currently valid credential value, exchanging if needed."""
        if self._direct:
            return self._held_token

        with self._store.shared() as store:
            cached = store.get_locked()
            if cached is not None and cached.is_valid(self._clock.now()):
                return cached.value

        with self._store.exclusive() as store:
            cached = store.get_locked()
            if cached is not None and cached.is_valid(self._clock.now()):
                return cached.value
            normalized_log_event(
                self._logger,
                "auth.refresh",
                self._ctx,
                phase="start",
                reason="expired" if cached is not None else "missing",
            )
            fresh = self._exchanger.exchange(self._held_token, token)
            store.set_locked(fresh)
            return fresh.value

    def current(self) -> Optional[Credential]:
        """The credential the manager would hand out, without refreshing."""
        if self._direct:
            return Credential.direct(self._held_token)
        return self._store.read()

    def invalidate(self) -> None:
        """Drop the cached exchanged credential; the next call exchanges again."""
        with self._store.exclusive() as store:
            cached = store.get_locked()
            if cached is not None and cached.provenance is Provenance.EXCHANGED:
                store.set_locked(None)


__all__ = ["is_direct_token", "CredentialLifecycleManager"]

"""Credential value type and the thread-safe credential store.

A ``Credential`` is an opaque string plus an absolute expiry and a provenance
tag. Direct credentials (long-lived tokens used as-is) never expire from the
manager's point of view; exchanged credentials are valid only while
``now < expires_at``.

The store is owned by one lifecycle manager instance (no module-level cache),
so independent clients and tests never share credentials.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from ..base.concurrency import ReadWriteLock


class Provenance(str, Enum):
    """Where a credential came from."""

    DIRECT = "direct"
    EXCHANGED = "exchanged"


@dataclass(frozen=True)
class Credential:
    """A usable service credential.

    Attributes:
        value: Opaque bearer value sent to the completion API.
        expires_at: Absolute expiry as epoch seconds; ``None`` for direct
            credentials.
        provenance: :class:`Provenance` tag.
        refresh_in: Server-suggested refresh delay in seconds, informational.
    """

    value: str
    expires_at: Optional[float]
    provenance: Provenance
    refresh_in: Optional[float] = None

    @classmethod
    def direct(cls, value: str) -> "Credential":
        return cls(value=value, expires_at=None, provenance=Provenance.DIRECT)

    @classmethod
    def exchanged(cls, value: str, expires_at: float, refresh_in: Optional[float] = None) -> "Credential":
        return cls(value=value, expires_at=expires_at, provenance=Provenance.EXCHANGED, refresh_in=refresh_in)

    def is_valid(self, now: float) -> bool:
        """Direct credentials are always valid; exchanged ones until expiry."""
        if self.provenance is Provenance.DIRECT:
            return True
        if not self.value or self.expires_at is None:
            return False
        return now < self.expires_at

    def __repr__(self) -> str:
        # Never render the secret.
        return f"Credential(provenance={self.provenance.value}, expires_at={self.expires_at!r})"


class CredentialStore:
    """Holds at most one credential behind a shared/exclusive lock.

    ``read``/``write`` take the lock themselves. ``shared()``/``exclusive()``
    let a caller hold the lock across a check-then-act sequence and use the
    ``*_locked`` accessors inside it.
    """

    def __init__(self, credential: Optional[Credential] = None) -> None:
        self._lock = ReadWriteLock()
        self._credential = credential

    def read(self) -> Optional[Credential]:
        with self._lock.read_locked():
            return self._credential

    def write(self, credential: Optional[Credential]) -> None:
        with self._lock.write_locked():
            self._credential = credential

    def clear(self) -> None:
        self.write(None)

    @contextmanager
    def shared(self) -> Iterator["CredentialStore"]:
        with self._lock.read_locked():
            yield self

    @contextmanager
    def exclusive(self) -> Iterator["CredentialStore"]:
        with self._lock.write_locked():
            yield self

    def get_locked(self) -> Optional[Credential]:
        """Read without locking; only inside ``shared()``/``exclusive()``."""
        return self._credential

    def set_locked(self, credential: Optional[Credential]) -> None:
        """Write without locking; only inside ``exclusive()``."""
        self._credential = credential


__all__ = ["Provenance", "Credential", "CredentialStore"]

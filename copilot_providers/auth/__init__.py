"""Credential acquisition: device flow, token exchange and lifecycle management."""

from .clock import Clock, SystemClock
from .credentials import Credential, CredentialStore, Provenance
from .device_flow import (
    AccessTokenResponse,
    DeviceAuthorizationClient,
    DeviceGrant,
    PollOutcome,
    PollState,
    next_state,
)
from .exchange import CredentialExchanger, ExchangeResponse
from .manager import CredentialLifecycleManager, is_direct_token

__all__ = [
    "Clock",
    "SystemClock",
    "Credential",
    "CredentialStore",
    "Provenance",
    "AccessTokenResponse",
    "DeviceAuthorizationClient",
    "DeviceGrant",
    "PollOutcome",
    "PollState",
    "next_state",
    "CredentialExchanger",
    "ExchangeResponse",
    "CredentialLifecycleManager",
    "is_direct_token",
]

"""Endpoint resolution for github.com and GitHub Enterprise hosts.

An enterprise URL may be given with or without scheme and trailing slash
(``https://company.ghe.com/``, ``company.ghe.com``); it is reduced to the bare
domain before the four service URLs are derived from it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config.defaults import (
    COPILOT_DEFAULT_BASE_URL,
    COPILOT_DEFAULT_EXCHANGE_URL,
    GITHUB_DEFAULT_ACCESS_TOKEN_URL,
    GITHUB_DEFAULT_DEVICE_CODE_URL,
)


def normalize_domain(url: str) -> str:
    """Strip ``http(s)://`` and a trailing slash; surrounding spaces too."""
    domain = url.strip()
    for scheme in ("https://", "http://"):
        if domain.startswith(scheme):
            domain = domain[len(scheme):]
            break
    return domain.rstrip("/")


@dataclass(frozen=True)
class Endpoints:
    """The four URLs one client talks to."""

    base_url: str = COPILOT_DEFAULT_BASE_URL
    exchange_url: str = COPILOT_DEFAULT_EXCHANGE_URL
    device_code_url: str = GITHUB_DEFAULT_DEVICE_CODE_URL
    access_token_url: str = GITHUB_DEFAULT_ACCESS_TOKEN_URL

    @classmethod
    def resolve(cls, enterprise_url: Optional[str] = None, *, base_url: Optional[str] = None) -> "Endpoints":
        """Public github.com endpoints, or the enterprise ones for ``enterprise_url``.

        ``base_url`` overrides only the completion API base.
        """
        if enterprise_url and enterprise_url.strip():
            domain = normalize_domain(enterprise_url)
            resolved = cls(
                base_url=f"https://copilot-api.{domain}",
                exchange_url=f"https://api.{domain}/copilot_internal/v2/token",
                device_code_url=f"https://{domain}/login/device/code",
                access_token_url=f"https://{domain}/login/oauth/access_token",
            )
        else:
            resolved = cls()
        if base_url:
            resolved = cls(
                base_url=base_url.rstrip("/"),
                exchange_url=resolved.exchange_url,
                device_code_url=resolved.device_code_url,
                access_token_url=resolved.access_token_url,
            )
        return resolved


__all__ = ["normalize_domain", "Endpoints"]

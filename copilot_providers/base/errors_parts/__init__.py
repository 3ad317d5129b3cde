"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `copilot_providers.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .classification import classify_exception, decode_error, network_error, status_error

__all__ = ["ErrorCode", "ProviderError", "classify_exception", "network_error", "status_error", "decode_error"]

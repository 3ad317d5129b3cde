"""Unified provider error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``copilot_providers.base.errors_parts`` to maintain a stable import path while
enforcing the one-class-per-file governance rule.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import classify_exception, decode_error, network_error, status_error

__all__ = ["ErrorCode", "ProviderError", "classify_exception", "network_error", "status_error", "decode_error"]

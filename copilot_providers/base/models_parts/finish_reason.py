"""
Normalized finish reasons for a completed turn.
"""
from __future__ import annotations

from enum import Enum


class FinishReason(str, Enum):
    """Why the model stopped generating."""

    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"
    SAFETY = "SAFETY"
    OTHER = "OTHER"


__all__ = ["FinishReason"]

"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose stable cancellation constructs via the canonical
``copilot_providers.base.cancellation`` import path while the concrete
implementations live under ``cancellation_parts`` for organization.

Notes
-----
- ``CancellationToken`` is the cancellation/deadline signal accepted by every
  network call and every blocking wait in the package.
- ``CancelledError`` is raised by operations that observe a cancellation
  request; it always takes priority over queued stream events.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken, DEADLINE_REASON

__all__ = ["CancellationToken", "CancelledError", "DEADLINE_REASON"]

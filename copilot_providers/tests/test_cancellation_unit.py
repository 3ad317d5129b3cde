"""Unit tests for cooperative cancellation primitives.

Covers idempotent cancel, cascade to children, late link of child after
parent cancel, on_cancel callbacks, deadlines and raise_if_cancelled.
"""
from __future__ import annotations

import threading

import pytest

from copilot_providers.base.cancellation import (
    CancellationToken,
    CancelledError,
)


def test_cancel_cascades_to_children_and_is_idempotent():
    parent = CancellationToken()
    child1 = parent.child()
    child2 = parent.child()

    parent.cancel(reason="stop")
    # idempotent second call
    parent.cancel(reason="ignored")

    assert parent.cancelled is True and parent.reason == "stop"  # nosec B101 - pytest assert in tests
    assert child1.cancelled is True and child1.reason == "stop"  # nosec B101 - pytest assert in tests
    assert child2.cancelled is True and child2.reason == "stop"  # nosec B101 - pytest assert in tests


def test_link_child_after_parent_cancel_immediately_cancels_child():
    parent = CancellationToken()
    parent.cancel("done")
    late_child = CancellationToken(parent=parent)
    assert late_child.cancelled is True and late_child.reason == "done"  # nosec B101 - pytest assert in tests


def test_raise_if_cancelled_raises_custom_error():
    token = CancellationToken()
    token.cancel("terminate")
    with pytest.raises(CancelledError) as info:
        token.raise_if_cancelled()
    assert "terminate" in str(info.value)  # nosec B101
    assert info.value.deadline is False  # nosec B101


def test_on_cancel_runs_once_and_can_be_unregistered():
    token = CancellationToken()
    calls = []
    token.on_cancel(lambda: calls.append("a"))
    unregister = token.on_cancel(lambda: calls.append("b"))
    unregister()

    token.cancel()
    token.cancel()

    assert calls == ["a"]  # nosec B101


def test_on_cancel_after_cancellation_runs_immediately():
    token = CancellationToken()
    token.cancel()
    calls = []
    token.on_cancel(lambda: calls.append(1))
    assert calls == [1]  # nosec B101


def test_cancel_after_marks_deadline():
    token = CancellationToken().cancel_after(0.01)
    assert token.wait(5.0) is True  # nosec B101
    assert token.deadline_exceeded is True  # nosec B101
    with pytest.raises(CancelledError) as info:
        token.raise_if_cancelled()
    assert info.value.deadline is True  # nosec B101


def test_wait_is_released_by_cancel_from_another_thread():
    token = CancellationToken()
    timer = threading.Timer(0.01, token.cancel, args=("late",))
    timer.start()
    try:
        assert token.wait(5.0) is True  # nosec B101
    finally:
        timer.cancel()
    assert token.reason == "late"  # nosec B101

from __future__ import annotations

"""
Unit tests for the Cancellable Request Context.
"""

import time

import pytest

from gitfs.domain.context import RequestContext
from gitfs.domain.errors import ContextCancelledError, DeadlineExceededError


def test_background_is_never_done() -> None:
    """TC-01: The background context cannot be cancelled."""
    bg = RequestContext.background()
    bg.cancel()
    assert not bg.cancelled
    assert bg.error() is None
    assert bg.deadline is None
    assert RequestContext.background() is bg


def test_cancel_propagates_to_children_only() -> None:
    """TC-02: Cancelling a parent cancels its children, not vice versa."""
    parent, cancel_parent = RequestContext.background().with_cancel()
    child, cancel_child = parent.with_cancel()

    cancel_child()
    assert child.cancelled
    assert not parent.cancelled

    other, _ = parent.with_cancel()
    cancel_parent()
    assert other.cancelled
    with pytest.raises(ContextCancelledError):
        other.raise_if_cancelled()


def test_deadline_expiry() -> None:
    """TC-03: A passed deadline is reported as DeadlineExceededError."""
    ctx = RequestContext.background().with_timeout(0.01)
    time.sleep(0.02)
    err = ctx.error()
    assert isinstance(err, DeadlineExceededError)
    assert isinstance(err, ContextCancelledError)


def test_child_cannot_extend_parent_deadline() -> None:
    """TC-04: A child keeps the earlier of its own and its parent's deadline."""
    parent = RequestContext.background().with_timeout(1)
    child = parent.with_timeout(100)
    assert child.deadline == parent.deadline


def test_remaining() -> None:
    """TC-05: remaining() bounds blocking calls by the deadline."""
    assert RequestContext.background().remaining(7) == 7
    assert RequestContext.background().remaining() is None

    ctx = RequestContext.background().with_timeout(5)
    left = ctx.remaining(10)
    assert 0 < left <= 5
    assert ctx.remaining(1) == 1

    expired = RequestContext.background().with_timeout(0)
    assert expired.remaining(10) == 0.0

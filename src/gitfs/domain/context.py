from __future__ import annotations

"""
Cancellable Request Context.

A RequestContext carries a cancellation signal and an optional deadline
through every remote call and every file read. Contexts form a chain: a
child derived through with_cancel() or with_timeout() is done as soon as
its parent is.
"""

import threading
import time
from typing import Callable, Optional, Tuple

from gitfs.domain.errors import ContextCancelledError, DeadlineExceededError


class RequestContext:
    """
    Request-scoped cancellation and deadline holder.

    Instances are cheap and immutable apart from their cancellation event,
    so they can be shared freely between threads.
    """

    def __init__(
            self,
            parent: Optional[RequestContext] = None,
            deadline: Optional[float] = None,
            cancellable: bool = True
    ) -> None:
        self._parent = parent
        self._event: Optional[threading.Event] = threading.Event() if cancellable else None

        # A child can only shorten the deadline inherited from its parent.
        parent_deadline = parent.deadline if parent else None
        if deadline is None:
            self._deadline = parent_deadline
        elif parent_deadline is None:
            self._deadline = deadline
        else:
            self._deadline = min(deadline, parent_deadline)

    @classmethod
    def background(cls) -> RequestContext:
        """Return a context that is never cancelled and has no deadline."""
        return _BACKGROUND

    def with_cancel(self) -> Tuple[RequestContext, Callable[[], None]]:
        """Derive a child context together with the function that cancels it."""
        child = RequestContext(parent=self)
        return child, child.cancel

    def with_timeout(self, seconds: float) -> RequestContext:
        """Derive a child context that expires after `seconds`."""
        return RequestContext(parent=self, deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self) -> None:
        if self._event is not None:
            self._event.set()

    def error(self) -> Optional[ContextCancelledError]:
        """Return the reason this context is done, or None while it is live."""
        if self._event is not None and self._event.is_set():
            return ContextCancelledError("context canceled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError("context deadline exceeded")
        if self._parent is not None:
            return self._parent.error()
        return None

    @property
    def cancelled(self) -> bool:
        return self.error() is not None

    def raise_if_cancelled(self) -> None:
        err = self.error()
        if err is not None:
            raise err

    def remaining(self, default: Optional[float] = None) -> Optional[float]:
        """
        Compute a timeout for a blocking call made under this context.

        Args:
            default: Timeout used when the context carries no deadline.

        Returns:
            Optional[float]: Seconds left (never negative), or `default`.
        """
        if self._deadline is None:
            return default
        left = max(0.0, self._deadline - time.monotonic())
        if default is not None:
            return min(left, default)
        return left


_BACKGROUND = RequestContext(cancellable=False)

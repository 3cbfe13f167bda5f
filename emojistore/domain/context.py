from __future__ import annotations

import threading
import time
from typing import Optional

from .errors import OperationCancelledError


class OperationContext:
    """Deadline and cancellation carrier threaded through every storage call.

    Contexts derived with :meth:`with_timeout` share the parent's cancel event,
    so cancelling the parent also cancels the child. Cache lookups never consult
    the context.

    >>> ctx = OperationContext.background()
    >>> ctx.done()
    False
    >>> ctx.cancel()
    >>> ctx.done()
    True
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        if timeout is not None:
            by_timeout = time.monotonic() + float(timeout)
            deadline = by_timeout if deadline is None else min(deadline, by_timeout)
        self._deadline = deadline
        self._event = cancel_event if cancel_event is not None else threading.Event()

    @classmethod
    def background(cls) -> "OperationContext":
        """Return a context with no deadline that is never cancelled implicitly."""
        return cls()

    def with_timeout(self, seconds: float) -> "OperationContext":
        return OperationContext(timeout=seconds, deadline=self._deadline, cancel_event=self._event)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, ``None`` when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """Raise :class:`OperationCancelledError` if the context is done."""
        if self.cancelled:
            raise OperationCancelledError("operation cancelled")
        if self.expired:
            raise OperationCancelledError("operation deadline exceeded")


def ensure_context(ctx: Optional[OperationContext]) -> OperationContext:
    return ctx if ctx is not None else OperationContext.background()

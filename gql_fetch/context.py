"""
Cancellation and deadline carrier for GraphQL exchanges.

An :class:`ExchangeContext` is handed to :meth:`GraphQLClient.run`. If it is
already done when the exchange starts, the exchange fails immediately without
touching the network. Otherwise its deadline and cancellation are bound to the
blocking steps of the exchange (the transport call and the body drain).

Examples:
    ```python
    ctx = ExchangeContext.with_timeout(5.0)
    response = await client.run(request, dict, context=ctx)

    ctx = ExchangeContext()
    asyncio.get_running_loop().call_later(1.0, ctx.cancel)
    ```
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Optional, TypeVar

from .exceptions import ContextCancelled, ContextDeadlineExceeded, ContextError

T = TypeVar("T")

_CANCELLED = "cancelled"
_DEADLINE = "deadline"


class ExchangeContext:
    """
    Cancellation/deadline context for a single exchange.

    A context without a deadline that is never cancelled behaves as a
    background context: it never interrupts anything.
    """

    def __init__(self, deadline: Optional[float] = None) -> None:
        """
        Initialize exchange context.

        Args:
            deadline: Absolute deadline on the ``time.monotonic()`` clock,
                or None for no deadline
        """
        self.deadline = deadline
        self._timeout: Optional[float] = None
        self._reason: Optional[str] = None
        self._done_event = asyncio.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> "ExchangeContext":
        """Create a context whose deadline is ``seconds`` from now."""
        ctx = cls(deadline=time.monotonic() + seconds)
        ctx._timeout = seconds
        return ctx

    def cancel(self) -> None:
        """Mark the context as cancelled. Idempotent; the first reason wins."""
        self._finish(_CANCELLED)

    def done(self) -> bool:
        """Check whether the context is cancelled or past its deadline."""
        self._check_deadline()
        return self._reason is not None

    def err(self) -> Optional[ContextError]:
        """Return the error describing why the context is done, or None."""
        self._check_deadline()
        if self._reason == _CANCELLED:
            return ContextCancelled()
        if self._reason == _DEADLINE:
            return ContextDeadlineExceeded(timeout_value=self._timeout)
        return None

    def raise_if_done(self) -> None:
        """Raise the context's error if it is done."""
        error = self.err()
        if error is not None:
            raise error

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    async def bind(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` under this context.

        Returns the awaitable's result if it finishes first. If the deadline
        passes or the context is cancelled first, the inner task is cancelled
        and the context's error is raised. Callers that must not start any
        work on a done context check :meth:`done` first.

        Raises:
            ContextCancelled: If the context was cancelled
            ContextDeadlineExceeded: If the deadline passed
        """
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._done_event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.wait({task})
        if not task.cancelled():
            # Retrieve the outcome so it is not reported as unhandled.
            task.exception()

        if self._reason is None:
            # asyncio.wait timed out; the loop clock may fire a hair early.
            self._finish(_DEADLINE)
        error = self.err()
        assert error is not None
        raise error

    def _check_deadline(self) -> None:
        if (
            self._reason is None
            and self.deadline is not None
            and time.monotonic() >= self.deadline
        ):
            self._finish(_DEADLINE)

    def _finish(self, reason: str) -> None:
        if self._reason is None:
            self._reason = reason
            self._done_event.set()

    def __repr__(self) -> str:
        state = self._reason or "active"
        return f"<ExchangeContext {state} deadline={self.deadline!r}>"

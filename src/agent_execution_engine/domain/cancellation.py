"""Cooperative cancellation signal shared by the loop and the aggregator."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from agent_execution_engine.domain.exceptions import OperationCancelledError

T = TypeVar("T")


class CancellationToken:
    """One-shot cancellation signal backed by an asyncio.Event."""

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation. Calling it again has no effect."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError()

    async def wait(self) -> None:
        """Suspend until cancellation is signalled."""
        await self._event.wait()

    async def race(self, awaitable: Awaitable[T]) -> T:
        """
        Await a result unless cancellation is signalled first.

        The pending awaitable is cancelled when the signal wins.

        Raises:
            OperationCancelledError: If cancellation was signalled before the
                awaitable finished.
        """
        work = asyncio.ensure_future(awaitable)
        if self._event.is_set():
            work.cancel()
            await asyncio.wait({work})
            raise OperationCancelledError()

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if work in done:
            return work.result()

        work.cancel()
        await asyncio.wait({work})
        if not work.cancelled():
            # Retrieve a late failure so it is not reported as unhandled.
            work.exception()
        raise OperationCancelledError()

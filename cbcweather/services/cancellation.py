"""Cooperative cancellation for the count-day lookups."""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


class OperationCancelled(Exception):
    """Raised when a superseded operation tries to hand back its result."""


class CancellationToken:
    """Abort signal handed to one in-flight lookup or fetch.

    A token starts live and can only move to cancelled. Results are checked
    against the token before they are committed, so a request that finishes
    after it was superseded never reaches shared state.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token is cancelled first.

        Whichever finishes first wins. On cancellation the pending call is
        cancelled and its eventual outcome, success or failure, is dropped.
        """

        self.raise_if_cancelled()
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if self._event.is_set():
            if not work.done():
                work.cancel()
            elif not work.cancelled():
                # mark the outcome as retrieved; it is discarded
                work.exception()
            raise OperationCancelled()
        return work.result()


__all__ = ["CancellationToken", "OperationCancelled"]

"""Debounce a rapidly changing value on the running event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Hold back a value until it has been stable for ``delay`` seconds.

    Every :meth:`push` restarts the timer and cancels the pending one, so a
    burst of updates settles exactly once, on the last value, ``delay``
    seconds after the last update. The settled value is available as
    :attr:`value` and is passed to every listener.

    Must be used from inside a running event loop.

    Example:
        >>> search = Debouncer(0.5, "")
        >>> settled = await search.submit("red fox")  # False if superseded
    """

    def __init__(self, delay: float, initial: T):
        self.delay = delay
        self.value: T = initial
        self._handle: asyncio.TimerHandle | None = None
        self._waiter: asyncio.Future[bool] | None = None
        self._listeners: list[Callable[[T], None]] = []

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def subscribe(self, listener: Callable[[T], None]) -> None:
        self._listeners.append(listener)

    def push(self, value: T) -> asyncio.Future[bool]:
        """Schedule ``value`` to settle after the delay.

        Returns:
            Future resolving to True when ``value`` settles, or False when a
            later push (or :meth:`cancel`) supersedes it
        """
        loop = asyncio.get_running_loop()
        self.cancel()

        waiter: asyncio.Future[bool] = loop.create_future()
        self._waiter = waiter
        self._handle = loop.call_later(self.delay, self._settle, value, waiter)
        return waiter

    async def submit(self, value: T) -> bool:
        """Push ``value`` and wait until it settles or is superseded."""
        return await self.push(value)

    def cancel(self) -> None:
        """Drop the pending value, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._waiter is not None and not self._waiter.done():
            self._waiter.set_result(False)
        self._waiter = None

    def _settle(self, value: T, waiter: asyncio.Future[bool]) -> None:
        self._handle = None
        self._waiter = None
        self.value = value
        if not waiter.done():
            waiter.set_result(True)
        logger.debug(f"Debounced value settled: {value!r}")
        for listener in self._listeners:
            listener(value)

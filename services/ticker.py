"""Periodic callbacks on the running asyncio loop."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


class Ticker(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...

    @property
    def active(self) -> bool: ...


TickerFactory = Callable[[Callable[[], None], float], Ticker]


class AsyncioTicker:
    """Calls ``callback`` every ``interval`` seconds until cancelled.

    Deadlines are computed from the first start so the period does not drift.
    The next deadline is scheduled before the callback runs, which lets the
    callback cancel the ticker from inside.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        interval: float = 1.0,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._callback = callback
        self._interval = interval
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._deadline = 0.0

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is not None:
            return
        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        self._deadline = loop.time() + self._interval
        self._handle = loop.call_at(self._deadline, self._fire)

    def _fire(self) -> None:
        if self._handle is None or self._loop is None:
            return
        self._deadline += self._interval
        self._handle = self._loop.call_at(self._deadline, self._fire)
        self._callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def asyncio_ticker(callback: Callable[[], None], interval: float) -> AsyncioTicker:
    return AsyncioTicker(callback, interval)


__all__ = ["AsyncioTicker", "Ticker", "TickerFactory", "asyncio_ticker"]

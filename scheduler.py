"""Timers for the client widgets.

Widgets never sleep; they ask a scheduler to call them back later and keep
the handle so the call can be cancelled. ``LoopScheduler`` puts every
callback on the running asyncio loop, the same loop the UI events arrive
on, so widget state is only ever touched from one thread. Anything with
``call_later`` and ``cancel`` works, tests pass a fake clock.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

FRAME = 1 / 60


class LoopScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, fn: Callable[[], Any]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, fn)

    def cancel(self, handle: Optional[asyncio.TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()

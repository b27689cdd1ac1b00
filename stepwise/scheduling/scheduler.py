"""
Schedulers
==========

Host "run later" hooks. The driver never re-enters a computation from
inside its own resume; every step goes through one of these.
"""

from __future__ import annotations

import asyncio
import typing
from collections import deque
from collections.abc import Callable


@typing.runtime_checkable
class Scheduler(typing.Protocol):
    """Defers a callback to a later turn of the host loop."""

    def call_soon(self, callback: Callable[..., typing.Any], /, *args: typing.Any) -> None: ...


class LoopScheduler:
    """
    Scheduler backed by an asyncio event loop.

    If no loop is given, the running loop is looked up at each call,
    so the scheduler can be created outside of a loop and used inside one.
    """

    __slots__ = ("_loop",)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_soon(self, callback: Callable[..., typing.Any], /, *args: typing.Any) -> None:
        self.loop.call_soon(callback, *args)

    def __repr__(self) -> str:
        return f"LoopScheduler({self._loop!r})"


class QueueScheduler:
    """
    Deterministic FIFO scheduler.

    Callbacks pile up in a ready queue until run_until_idle() drains it.
    Useful for tests and for hosts without an event loop.
    """

    __slots__ = ("_ready",)

    def __init__(self) -> None:
        self._ready: deque[tuple[Callable[..., typing.Any], tuple[typing.Any, ...]]] = deque()

    def call_soon(self, callback: Callable[..., typing.Any], /, *args: typing.Any) -> None:
        self._ready.append((callback, args))

    @property
    def pending(self) -> int:
        return len(self._ready)

    def run_once(self) -> bool:
        """Run one queued callback. Returns False if the queue was empty."""
        if not self._ready:
            return False
        callback, args = self._ready.popleft()
        callback(*args)
        return True

    def run_until_idle(self, max_steps: int | None = None) -> int:
        """
        Drain the queue, including callbacks scheduled while draining.

        Returns number of callbacks run. Stops early after max_steps.
        """
        if max_steps is not None and max_steps < 0:
            raise ValueError("max_steps must be >= 0")
        steps = 0
        while self._ready and (max_steps is None or steps < max_steps):
            self.run_once()
            steps += 1
        return steps


__all__ = ("LoopScheduler", "QueueScheduler", "Scheduler")

"""
Подъём генераторного тела в kungfu LazyCoroResult.
"""

from __future__ import annotations

import typing
from collections.abc import Callable

from kungfu import Error, LazyCoroResult, Ok, Result

from .._errors import ComputationError
from .._types import Body
from ..computation import PausableComputation
from ..scheduling import LoopScheduler
from .driver import Driver
from .policy import DriverPolicy


def drive[R, **P](
    fn: Callable[P, Body[R] | PausableComputation[R]],
    *args: P.args,
    **kwargs: P.kwargs,
) -> LazyCoroResult[R, ComputationError]:
    """
    Lazily run fn(*args, **kwargs) on the running asyncio loop.

    Nothing happens until the result is awaited; every await starts a
    fresh body. Unhandled errors come back as Error(ComputationError).

    Example:
        result = await drive(main, "http://whatever")
        match result:
            case Ok(text):
                ...
            case Error(err):
                print(err.cause)
    """
    async def run() -> Result[R, ComputationError]:
        driver = Driver(LoopScheduler(), DriverPolicy())
        try:
            value = await driver.run(fn(*args, **kwargs))
        except ComputationError as exc:
            return Error(exc)
        return Ok(typing.cast(R, value))

    return LazyCoroResult(run)


__all__ = ("drive",)

"""
AsyncRequest
============

One-shot settlement cell. Outcome is stored as kungfu Result:
Ok(value) when resolved, Error(reason) when rejected.
"""

from __future__ import annotations

import asyncio
import typing
from collections.abc import Generator
from dataclasses import dataclass

from kungfu import Error, Ok

from .._errors import InvalidStateError
from .._types import Outcome, SettleCallback
from ..scheduling import LoopScheduler, Scheduler


@dataclass(frozen=True, slots=True)
class RequestPolicy:
    """
    Settlement rules for AsyncRequest.

    strict=False: second resolve/reject is ignored (returns False).
    strict=True: second resolve/reject raises InvalidStateError.
    """

    strict: bool = False


class AsyncRequest[T]:
    """
    Handle for a pending external operation.

    Settles at most once. Listeners registered with on_settle always run
    through the scheduler, never inside resolve()/reject()/on_settle() itself.
    """

    __slots__ = ("_outcome", "_callbacks", "_waiters", "_scheduler", "_policy", "label")

    def __init__(
        self,
        *,
        scheduler: Scheduler | None = None,
        policy: RequestPolicy = RequestPolicy(),
        label: str | None = None,
    ) -> None:
        self._outcome: Outcome[T] | None = None
        self._callbacks: list[SettleCallback[T]] = []
        self._waiters: list[asyncio.Future[T]] = []
        self._scheduler = scheduler if scheduler is not None else LoopScheduler()
        self._policy = policy
        self.label = label

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def outcome(self) -> Outcome[T] | None:
        """Ok/Error once settled, None while pending."""
        return self._outcome

    @property
    def pending(self) -> bool:
        return self._outcome is None

    @property
    def resolved(self) -> bool:
        match self._outcome:
            case Ok(_):
                return True
            case _:
                return False

    @property
    def rejected(self) -> bool:
        match self._outcome:
            case Error(_):
                return True
            case _:
                return False

    def resolve(self, value: T, /) -> bool:
        return self.settle(Ok(value))

    def reject(self, error: BaseException, /) -> bool:
        if not isinstance(error, BaseException):
            raise TypeError(f"reject() expects an exception, got {type(error).__name__}")
        return self.settle(Error(error))

    def settle(self, outcome: Outcome[T], /) -> bool:
        """
        Settle from a ready Result.

        Returns True if this call settled the request.
        """
        if self._outcome is not None:
            if self._policy.strict:
                raise InvalidStateError(f"{self!r} is already settled")
            return False

        self._outcome = outcome
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            self._scheduler.call_soon(callback, outcome)

        waiters, self._waiters = self._waiters, []
        for fut in waiters:
            _transfer(outcome, fut)
        return True

    def on_settle(self, callback: SettleCallback[T], /) -> None:
        if self._outcome is None:
            self._callbacks.append(callback)
        else:
            self._scheduler.call_soon(callback, self._outcome)

    def __await__(self) -> Generator[typing.Any, None, T]:
        fut: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        if self._outcome is None:
            self._waiters.append(fut)
        else:
            _transfer(self._outcome, fut)
        return (yield from fut)

    def __repr__(self) -> str:
        name = f" {self.label!r}" if self.label is not None else ""
        match self._outcome:
            case None:
                state = "pending"
            case Ok(value):
                state = f"resolved={value!r}"
            case Error(error):
                state = f"rejected={error!r}"
        return f"<AsyncRequest{name} {state}>"


def _transfer[T](outcome: Outcome[T], fut: asyncio.Future[T]) -> None:
    if fut.done():
        return
    match outcome:
        case Ok(value):
            fut.set_result(value)
        case Error(error):
            fut.set_exception(error)


__all__ = ("AsyncRequest", "RequestPolicy")

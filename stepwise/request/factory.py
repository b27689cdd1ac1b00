"""
Request factories
=================

Подъём внешних операций в AsyncRequest.

Callback style, coroutines, asyncio futures and kungfu LazyCoroResult
all end up as the same waitable the driver understands.
"""

from __future__ import annotations

import asyncio
import typing
from collections.abc import Awaitable, Callable

from kungfu import Error, LazyCoroResult, Ok, Result

from .._errors import Cancelled, ErrorValue
from .._types import Outcome, Waitable
from ..scheduling import Scheduler
from .request import AsyncRequest, RequestPolicy


def _lift_error[T](outcome: Result[T, typing.Any]) -> Outcome[T]:
    # Error payloads that are not exceptions cannot be thrown into a body
    match outcome:
        case Error(err) if not isinstance(err, BaseException):
            return Error(ErrorValue(err))
        case _:
            return outcome


# the loop keeps only weak references to tasks
_background: set[asyncio.Future[typing.Any]] = set()


def _spawn[T](aw: Awaitable[T]) -> asyncio.Future[T]:
    task = asyncio.ensure_future(aw)
    _background.add(task)
    task.add_done_callback(_background.discard)
    return task


def resolved[T](value: T, *, scheduler: Scheduler | None = None) -> AsyncRequest[T]:
    """Already resolved request."""
    request: AsyncRequest[T] = AsyncRequest(scheduler=scheduler)
    request.resolve(value)
    return request


def rejected(error: BaseException, *, scheduler: Scheduler | None = None) -> AsyncRequest[typing.Any]:
    """Already rejected request."""
    request: AsyncRequest[typing.Any] = AsyncRequest(scheduler=scheduler)
    request.reject(error)
    return request


def from_callback[T](
    fn: Callable[..., typing.Any],
    *args: typing.Any,
    scheduler: Scheduler | None = None,
    policy: RequestPolicy = RequestPolicy(),
) -> AsyncRequest[T]:
    """
    Call fn(*args, callback) where callback is error-first: callback(err, value).

    A truthy err rejects, otherwise the value resolves. If fn raises before
    calling back, the request is rejected with that exception.

    Example:
        def make_ajax_call(url, cb):
            ...
            cb(None, text)

        request = from_callback(make_ajax_call, "http://whatever")

    NOTE: Callback fired twice is settled only once (see RequestPolicy).
    """
    request: AsyncRequest[T] = AsyncRequest(scheduler=scheduler, policy=policy)

    def callback(err: BaseException | None, value: T | None = None) -> None:
        if err:
            request.reject(err if isinstance(err, BaseException) else ErrorValue(err))
        else:
            request.resolve(typing.cast(T, value))

    try:
        fn(*args, callback)
    except Exception as exc:
        request.reject(exc)
    return request


def from_future[T](
    fut: asyncio.Future[T],
    *,
    scheduler: Scheduler | None = None,
) -> AsyncRequest[T]:
    """Mirror an asyncio future (or task). A cancelled future rejects with Cancelled."""
    request: AsyncRequest[T] = AsyncRequest(scheduler=scheduler)

    def done(f: asyncio.Future[T]) -> None:
        if f.cancelled():
            request.reject(Cancelled("future cancelled"))
            return
        exc = f.exception()
        if exc is not None:
            request.reject(exc)
        else:
            request.resolve(f.result())

    fut.add_done_callback(done)
    return request


def from_coroutine[T](
    fn: Callable[..., Awaitable[T]],
    *args: typing.Any,
    scheduler: Scheduler | None = None,
    **kwargs: typing.Any,
) -> AsyncRequest[T]:
    """
    Schedule fn(*args, **kwargs) on the running loop.

    NOTE: Must be called while an asyncio loop is running; the coroutine
          starts right away (eager), unlike LazyCoroResult.
    """
    return from_future(_spawn(fn(*args, **kwargs)), scheduler=scheduler)


def from_result[T, E](
    result: Result[T, E],
    *,
    scheduler: Scheduler | None = None,
) -> AsyncRequest[T]:
    """Settled request from a kungfu Result. Non-exception errors are wrapped in ErrorValue."""
    request: AsyncRequest[T] = AsyncRequest(scheduler=scheduler)
    request.settle(_lift_error(result))
    return request


def from_lazy[T, E](
    lazy: LazyCoroResult[T, E],
    *,
    scheduler: Scheduler | None = None,
) -> AsyncRequest[T]:
    """
    Run a kungfu LazyCoroResult on the running loop.

    Ok resolves, Error rejects (wrapped in ErrorValue unless already an exception).
    A task cancelled before the result arrives rejects with Cancelled.
    """

    async def run() -> T:
        match _lift_error(await lazy()):
            case Ok(value):
                return value
            case Error(err):
                raise err

    return from_future(_spawn(run()), scheduler=scheduler)


def is_waitable(obj: object) -> bool:
    """True for anything as_request() accepts."""
    return (
        isinstance(obj, AsyncRequest)
        or asyncio.isfuture(obj)
        or isinstance(obj, LazyCoroResult)
        or isinstance(obj, Waitable)
    )


def as_request[T](obj: typing.Any, *, scheduler: Scheduler | None = None) -> AsyncRequest[T]:
    """
    Coerce a waitable into AsyncRequest.

    AsyncRequest passes through untouched; duck-typed objects with on_settle
    are bridged by subscribing a fresh request to them (non-exception
    errors they report become ErrorValue).
    """
    if isinstance(obj, AsyncRequest):
        return typing.cast(AsyncRequest[T], obj)
    if asyncio.isfuture(obj):
        return from_future(obj, scheduler=scheduler)
    if isinstance(obj, LazyCoroResult):
        return from_lazy(obj, scheduler=scheduler)
    if isinstance(obj, Waitable):
        request: AsyncRequest[T] = AsyncRequest(scheduler=scheduler)
        obj.on_settle(lambda outcome: request.settle(_lift_error(outcome)))
        return request
    raise TypeError(f"{type(obj).__name__!r} object is not waitable")


__all__ = (
    "as_request",
    "from_callback",
    "from_coroutine",
    "from_future",
    "from_lazy",
    "from_result",
    "is_waitable",
    "rejected",
    "resolved",
)

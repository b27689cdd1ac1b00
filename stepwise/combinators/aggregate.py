"""
all_ combinator
===============

Ждём все запросы, результаты в порядке входа, fail-fast на первой ошибке.
"""

from __future__ import annotations

import typing
from collections.abc import Iterable
from functools import partial

from kungfu import Error, Ok

from .._errors import AggregateRejection
from .._types import Outcome
from ..request import AsyncRequest, as_request
from ..scheduling import Scheduler


class _Aggregate:
    """Result slots for all_(); settles its request exactly once."""

    __slots__ = ("request", "slots", "settled")

    def __init__(self, request: AsyncRequest[list[typing.Any]], size: int) -> None:
        self.request = request
        self.slots: list[typing.Any] = [None] * size
        self.settled = 0

    def child_settled(self, index: int, outcome: Outcome[typing.Any]) -> None:
        if not self.request.pending:
            return
        match outcome:
            case Ok(value):
                self.slots[index] = value
                self.settled += 1
                if self.settled == len(self.slots):
                    self.request.resolve(list(self.slots))
            case Error(reason):
                self.request.reject(AggregateRejection(index, reason))


def all_(
    requests: Iterable[typing.Any],
    *,
    scheduler: Scheduler | None = None,
) -> AsyncRequest[list[typing.Any]]:
    """
    Wait for every request; resolve with their values in input order.

    First rejection rejects the aggregate with AggregateRejection(index, reason);
    siblings settling afterwards are ignored. Empty input resolves with [].

    Example:
        terms = yield all_([request(u) for u in urls])
        results = yield request("http://url04?search=" + "+".join(terms))

    NOTE: Children may be any waitable (AsyncRequest, asyncio future,
          LazyCoroResult, on_settle duck type). Without an explicit scheduler
          the aggregate uses the first child's one.
    """
    children = [as_request(r, scheduler=scheduler) for r in requests]
    if scheduler is None and children:
        scheduler = children[0].scheduler

    request: AsyncRequest[list[typing.Any]] = AsyncRequest(
        scheduler=scheduler,
        label=f"all_[{len(children)}]",
    )
    if not children:
        request.resolve([])
        return request

    aggregate = _Aggregate(request, len(children))
    for index, child in enumerate(children):
        child.on_settle(partial(aggregate.child_settled, index))
    return request


__all__ = ("all_",)

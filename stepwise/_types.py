"""
Core type definitions for stepwise.

Типы и алиасы используемые по всей библиотеке.
"""

from __future__ import annotations

import typing
from collections.abc import Callable, Generator, Hashable

from kungfu import Result

# ============================================================================
# Type aliases
# ============================================================================

# Body = generator that yields values/requests and returns the final value
type Body[R] = Generator[typing.Any, typing.Any, R]

# Outcome = settled result of a request, error side is the rejection reason
type Outcome[T] = Result[T, BaseException]

# SettleCallback = listener registered via on_settle
type SettleCallback[T] = Callable[[Outcome[T]], None]

# KeyFn = maps request arguments to a cache key
type KeyFn = Callable[..., Hashable]


@typing.runtime_checkable
class Waitable[T](typing.Protocol):
    """Anything the driver can wait on: exposes on_settle(callback)."""

    def on_settle(self, callback: SettleCallback[T], /) -> None: ...


__all__ = (
    "Body",
    "KeyFn",
    "Outcome",
    "SettleCallback",
    "Waitable",
)

"""
Request cache
=============

Мемоизация запросов по ключу.

The cache stores the request itself, not its value, so lookups made while
the first request is still in flight share one underlying operation.
"""

from __future__ import annotations

import typing
from collections.abc import Callable, Hashable
from dataclasses import dataclass

from kungfu import Error

from .._types import KeyFn, Outcome
from ..request import AsyncRequest, as_request
from ..scheduling import Scheduler


@dataclass(frozen=True, slots=True)
class CachePolicy:
    """
    cache_failures=False: rejected requests are dropped so the next call retries.
    cache_failures=True: rejections stay cached like successes.
    """

    cache_failures: bool = False


class RequestCache[K: Hashable, T]:
    """Unbounded key -> AsyncRequest mapping. No eviction policy."""

    __slots__ = ("_entries", "hits", "misses")

    def __init__(self) -> None:
        self._entries: dict[K, AsyncRequest[T]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: K) -> AsyncRequest[T] | None:
        return self._entries.get(key)

    def store(self, key: K, request: AsyncRequest[T]) -> None:
        self._entries[key] = request

    def discard(self, key: K, request: AsyncRequest[T] | None = None) -> bool:
        """
        Remove key. With request given, only if it is still the cached one.
        """
        current = self._entries.get(key)
        if current is None or (request is not None and current is not request):
            return False
        del self._entries[key]
        return True

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[K]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<RequestCache size={len(self)} hits={self.hits} misses={self.misses}>"


def _default_key(*args: typing.Any, **kwargs: typing.Any) -> Hashable:
    if not kwargs and len(args) == 1:
        return typing.cast(Hashable, args[0])
    return (args, frozenset(kwargs.items()))


def caching_request_factory[T](
    cache: RequestCache[typing.Any, T],
    key_fn: KeyFn | None,
    make_request: Callable[..., typing.Any],
    *,
    policy: CachePolicy = CachePolicy(),
    scheduler: Scheduler | None = None,
) -> Callable[..., AsyncRequest[T]]:
    """
    Wrap make_request so that equal keys share one request.

    key_fn(*args, **kwargs) computes the key (None = the single positional
    argument, or all arguments). make_request may return any waitable.

    Example:
        cache = RequestCache()
        request = caching_request_factory(cache, None, fetch)

        def main():
            a = yield request("http://whatever")
            b = yield request("http://whatever")   # no second fetch
    """
    key_of = key_fn if key_fn is not None else _default_key

    def forget_failure(key: Hashable, request: AsyncRequest[T], outcome: Outcome[T]) -> None:
        match outcome:
            case Error(_):
                cache.discard(key, request)
            case _:
                pass

    def request(*args: typing.Any, **kwargs: typing.Any) -> AsyncRequest[T]:
        key = key_of(*args, **kwargs)
        cached = cache.get(key)
        if cached is not None:
            if policy.cache_failures or not cached.rejected:
                cache.hits += 1
                return cached
            cache.discard(key, cached)

        cache.misses += 1
        fresh: AsyncRequest[T] = as_request(make_request(*args, **kwargs), scheduler=scheduler)
        cache.store(key, fresh)
        if not policy.cache_failures:
            fresh.on_settle(lambda outcome: forget_failure(key, fresh, outcome))
        return fresh

    return request


__all__ = ("CachePolicy", "RequestCache", "caching_request_factory")

"""
Log - трасса прогона
====================
"""

from __future__ import annotations


class Log[A](list[A]):
    """
    Ordered trace of one driven run.

    The driver appends to a live Log while stepping; run_w hands out a
    Log.of(...) snapshot so late events never leak into a settled result.
    """

    @staticmethod
    def of[T](*items: T) -> Log[T]:
        return Log[T](items)


__all__ = ("Log",)

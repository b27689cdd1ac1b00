"""
WriterResult - outcome of a run with its trace
==============================================
"""

from __future__ import annotations

import typing
from dataclasses import dataclass

from kungfu import Result

TraceKind = typing.Literal[
    "start",
    "resume",
    "throw",
    "emit",
    "wait",
    "finish",
    "fail",
    "cancel",
]


@dataclass(frozen=True, slots=True)
class TraceEvent:
    """One driver action: kind of action and the value involved."""

    kind: TraceKind
    value: typing.Any = None


class WriterResult[T, E, W]:
    """
    Result paired with the log accumulated while producing it.

    The log is available for both Ok and Error outcomes.
    """

    __slots__ = ("_result", "_log")
    __match_args__ = ("result", "log")

    def __init__(self, result: Result[T, E], log: W) -> None:
        self._result = result
        self._log = log

    @property
    def result(self) -> Result[T, E]:
        return self._result

    @property
    def log(self) -> W:
        return self._log

    def __repr__(self) -> str:
        return f"WriterResult({self._result!r}, log={self._log!r})"


__all__ = ("TraceEvent", "TraceKind", "WriterResult")

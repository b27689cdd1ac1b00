"""
PausableComputation
===================

Explicit state machine over a generator body.

Delegation is handled by an explicit stack of generator frames instead of
`yield from`: the innermost frame receives inputs and errors, its return
value is sent into the frame below. Nesting depth costs list entries,
not Python stack frames.
"""

from __future__ import annotations

import inspect
import typing
from collections.abc import Callable, Generator
from dataclasses import dataclass
from functools import wraps

from kungfu import Error, Ok

from .._errors import InvalidStateError
from .._types import Body, Outcome
from .state import Completed, Emitted, Failed, Finished, State, Step, Suspended


@dataclass(frozen=True, slots=True)
class Delegate:
    """Marker yielded by a body to hand control to a nested body."""

    target: Body[typing.Any] | PausableComputation[typing.Any]


def delegate(target: Body[typing.Any] | PausableComputation[typing.Any]) -> Delegate:
    """
    Delegate to a nested body; `yield delegate(inner())` evaluates to inner's return value.

    Example:
        def catcher():
            yield 2
            yield 3
            return "im catcher"

        def pitcher():
            yield 1
            v = yield delegate(catcher())
            yield 4

    NOTE: Yielding a bare generator object is treated the same way.
    """
    if not (inspect.isgenerator(target) or isinstance(target, PausableComputation)):
        raise TypeError(f"cannot delegate to {type(target).__name__!r}")
    return Delegate(target)


class PausableComputation[R]:
    """
    Handle to one run of a generator body.

    States: Suspended(last_emitted) -> Completed(value) | Failed(error).
    Only resume()/throw_into() move it forward; both raise InvalidStateError
    once the computation is terminal.
    """

    __slots__ = ("_stack", "_state", "_started", "name")

    def __init__(self, body: Body[R], /, *, name: str | None = None) -> None:
        if not inspect.isgenerator(body):
            raise TypeError(f"body must be a generator, got {type(body).__name__!r}")
        self._stack: list[Generator[typing.Any, typing.Any, typing.Any]] = [body]
        self._state: State = Suspended()
        self._started = False
        self.name = name if name is not None else body.__qualname__

    @property
    def state(self) -> State:
        return self._state

    @property
    def started(self) -> bool:
        return self._started

    @property
    def done(self) -> bool:
        return not isinstance(self._state, Suspended)

    @property
    def depth(self) -> int:
        """Number of active frames (1 + active delegations), 0 once terminal."""
        return len(self._stack)

    def resume(self, value: typing.Any = None, /) -> Step[typing.Any, R]:
        """
        Continue from the last yield, delivering value as its result.

        The first resume starts the body; its value is ignored.
        """
        self._ensure_alive()
        if not self._started:
            self._started = True
            return self._advance(Ok(None))
        return self._advance(Ok(value))

    def throw_into(self, error: BaseException, /) -> Step[typing.Any, R]:
        """
        Raise error at the last yield.

        Innermost delegate sees it first. If nobody handles it the
        computation becomes Failed and error is re-raised here.
        """
        if not isinstance(error, BaseException):
            raise TypeError(f"throw_into() expects an exception, got {type(error).__name__}")
        self._ensure_alive()
        self._started = True
        return self._advance(Error(error))

    def close(self) -> None:
        """
        Close every frame, innermost first. Terminal computations are left alone.

        Every frame gets closed even if an inner one raises; the first such
        error is re-raised afterwards.
        """
        if self.done:
            return
        first_error: Exception | None = None
        while self._stack:
            frame = self._stack.pop()
            try:
                frame.close()
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        self._state = Completed(None)
        if first_error is not None:
            raise first_error

    def __iter__(self) -> PausableComputation[R]:
        return self

    def __next__(self) -> typing.Any:
        """Emitted values in order, delegates included; the return value is dropped."""
        if self.done:
            raise StopIteration
        match self.resume():
            case Emitted(value):
                return value
            case Finished(_):
                raise StopIteration

    def _ensure_alive(self) -> None:
        if self.done:
            raise InvalidStateError(f"{self!r} is already finished")

    def _advance(self, outcome: Outcome[typing.Any]) -> Step[typing.Any, R]:
        while True:
            frame = self._stack[-1]
            try:
                match outcome:
                    case Ok(value):
                        emitted = frame.send(value)
                    case Error(error):
                        emitted = frame.throw(error)
            except StopIteration as stop:
                self._stack.pop()
                if not self._stack:
                    self._state = Completed(stop.value)
                    return Finished(stop.value)
                outcome = Ok(stop.value)
                continue
            except BaseException as exc:
                self._stack.pop()
                if not self._stack:
                    self._state = Failed(exc)
                    raise
                outcome = Error(exc)
                continue

            try:
                inner = _delegate_target(emitted)
            except InvalidStateError as exc:
                # raised at the delegating yield, like any other error
                outcome = Error(exc)
                continue
            if inner is not None:
                self._stack.append(inner)
                outcome = Ok(None)
                continue

            self._state = Suspended(emitted)
            return Emitted(emitted)

    def _detach(self) -> Generator[typing.Any, typing.Any, R]:
        # handed over to another computation's stack; this handle is unusable afterwards
        if self._started or self.done:
            raise InvalidStateError(f"cannot delegate to {self!r}: already started")
        body = self._stack.pop()
        self._state = Failed(InvalidStateError(f"{self.name} was delegated"))
        return body

    def __repr__(self) -> str:
        return f"<PausableComputation {self.name} {self._state!r}>"


def _delegate_target(emitted: typing.Any) -> Generator[typing.Any, typing.Any, typing.Any] | None:
    if isinstance(emitted, Delegate):
        emitted = emitted.target
    if isinstance(emitted, PausableComputation):
        return emitted._detach()
    if inspect.isgenerator(emitted):
        return emitted
    return None


def computation[**P, R](fn: Callable[P, Body[R]]) -> Callable[P, PausableComputation[R]]:
    """
    Decorator: generator function -> factory of fresh PausableComputation handles.

    Example:
        @computation
        def main(url):
            text = yield request(url)
            return text.upper()

        handle = main("http://whatever")  # unstarted, independent per call
    """
    @wraps(fn)
    def factory(*args: P.args, **kwargs: P.kwargs) -> PausableComputation[R]:
        return PausableComputation(fn(*args, **kwargs), name=fn.__qualname__)

    return factory


__all__ = ("Delegate", "PausableComputation", "computation", "delegate")

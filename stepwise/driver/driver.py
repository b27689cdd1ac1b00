"""
Driver
======

Trampoline that walks a PausableComputation to completion.

Every step runs from the scheduler:
- emitted waitable -> subscribe, resume with its value or throw its reason in
- emitted plain value -> sent straight back in on the next tick
- Finished -> resolve the run's request, uncaught error -> reject it
"""

from __future__ import annotations

import inspect
import typing

from kungfu import Error, Ok

from .._errors import Cancelled, ComputationError, InvalidStateError
from .._types import Body, Outcome
from ..computation import Emitted, Finished, PausableComputation
from ..request import AsyncRequest, as_request, is_waitable
from ..scheduling import LoopScheduler, Scheduler
from ..writer import Log, TraceEvent, TraceKind, WriterResult
from .policy import DriverPolicy


class _Run[R]:
    """Book-keeping for one computation being driven."""

    __slots__ = ("computation", "result", "token", "log", "trace", "trace_limit")

    def __init__(
        self,
        computation: PausableComputation[R],
        result: AsyncRequest[R],
        *,
        trace: bool,
        trace_limit: int | None,
    ) -> None:
        self.computation = computation
        self.result = result
        # bumped on cancel/finish; scheduled steps carrying an older token are dropped
        self.token = 0
        self.log: Log[TraceEvent] = Log()
        self.trace = trace
        self.trace_limit = trace_limit

    def record(self, kind: TraceKind, value: typing.Any = None) -> None:
        if not self.trace:
            return
        self.log.append(TraceEvent(kind, value))
        if self.trace_limit is not None and len(self.log) > self.trace_limit:
            del self.log[0]


class Driver:
    """
    Runs computations to completion on a scheduler.

    Example:
        driver = Driver()

        def main():
            text = yield request("http://whatever")
            data = json.loads(text)
            return (yield request(f"http://whateverelse/{data['id']}"))

        value = await driver.run(main())

    NOTE: Default LoopScheduler needs a running asyncio loop at run() time.
    """

    __slots__ = ("_scheduler", "_policy", "_runs")

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        policy: DriverPolicy = DriverPolicy(),
    ) -> None:
        self._scheduler = scheduler if scheduler is not None else LoopScheduler()
        self._policy = policy
        self._runs: dict[int, _Run[typing.Any]] = {}

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def policy(self) -> DriverPolicy:
        return self._policy

    @property
    def active(self) -> int:
        """Number of runs that have not settled yet."""
        return len(self._runs)

    def run[R](self, computation: PausableComputation[R] | Body[R]) -> AsyncRequest[R]:
        """
        Drive computation to completion.

        Returned request resolves with the final value, or rejects with
        ComputationError wrapping the error the body did not handle.
        """
        return self._start(computation, trace=self._policy.trace).result

    def run_w[R](
        self,
        computation: PausableComputation[R] | Body[R],
    ) -> AsyncRequest[WriterResult[R, ComputationError, Log[TraceEvent]]]:
        """
        Drive with tracing; always resolves to WriterResult(Ok | Error, trace).
        """
        run = self._start(computation, trace=True)
        out: AsyncRequest[WriterResult[R, ComputationError, Log[TraceEvent]]] = AsyncRequest(
            scheduler=self._scheduler,
        )

        def settle(outcome: Outcome[R]) -> None:
            match outcome:
                case Ok(value):
                    out.resolve(WriterResult(Ok(value), Log.of(*run.log)))
                case Error(error):
                    failure = typing.cast(ComputationError, error)
                    out.resolve(WriterResult(Error(failure), Log.of(*run.log)))

        run.result.on_settle(settle)
        return out

    def cancel(self, computation: PausableComputation[typing.Any], reason: typing.Any = None) -> bool:
        """
        Throw Cancelled(reason) into a running computation on the next tick.

        Any request it is waiting on is abandoned. The body may catch
        Cancelled (e.g. in finally/except) and keep going.
        Returns False if computation is not being driven by this driver.
        """
        run = self._runs.get(id(computation))
        if run is None:
            return False
        run.token += 1
        run.record("cancel", reason)
        self._schedule(run, Error(Cancelled(reason)))
        return True

    # ------------------------------------------------------------------------
    # Trampoline
    # ------------------------------------------------------------------------

    def _start[R](self, computation: PausableComputation[R] | Body[R], *, trace: bool) -> _Run[R]:
        if inspect.isgenerator(computation):
            computation = PausableComputation(computation)
        if not isinstance(computation, PausableComputation):
            raise TypeError(f"cannot run {type(computation).__name__!r}")
        if computation.done or computation.started:
            raise InvalidStateError(f"{computation!r} was already started")
        if id(computation) in self._runs:
            raise InvalidStateError(f"{computation!r} is already being driven")

        run: _Run[R] = _Run(
            computation,
            AsyncRequest(scheduler=self._scheduler, label=computation.name),
            trace=trace,
            trace_limit=self._policy.trace_limit,
        )
        self._runs[id(computation)] = run
        run.record("start", computation.name)
        self._schedule(run, Ok(None))
        return run

    def _schedule(self, run: _Run[typing.Any], outcome: Outcome[typing.Any]) -> None:
        self._scheduler.call_soon(self._step, run, run.token, outcome)

    def _step(self, run: _Run[typing.Any], token: int, outcome: Outcome[typing.Any]) -> None:
        if token != run.token:
            return

        computation = run.computation
        try:
            match outcome:
                case Ok(value):
                    run.record("resume", value)
                    step = computation.resume(value)
                case Error(error):
                    run.record("throw", error)
                    step = computation.throw_into(error)
        except Exception as exc:
            self._finish(run, Error(ComputationError(exc)))
            return

        match step:
            case Finished(value):
                self._finish(run, Ok(value))
            case Emitted(value) if token == run.token:
                self._dispatch(run, value)
            case Emitted(value):
                # cancelled from inside the body; the scheduled Cancelled owns this yield
                run.record("emit", value)

    def _dispatch(self, run: _Run[typing.Any], value: typing.Any) -> None:
        run.record("emit", value)
        if not is_waitable(value):
            self._schedule(run, Ok(value))
            return

        try:
            request = as_request(value, scheduler=self._scheduler)
        except Exception as exc:
            # e.g. LazyCoroResult without a running loop: surfaces at the yield
            self._schedule(run, Error(exc))
            return

        run.record("wait", request)
        token = run.token

        def settled(outcome: Outcome[typing.Any]) -> None:
            if request.scheduler is self._scheduler:
                self._step(run, token, outcome)
            else:
                self._scheduler.call_soon(self._step, run, token, outcome)

        try:
            request.on_settle(settled)
        except Exception as exc:
            self._schedule(run, Error(exc))

    def _finish(self, run: _Run[typing.Any], outcome: Outcome[typing.Any]) -> None:
        self._runs.pop(id(run.computation), None)
        run.token += 1
        match outcome:
            case Ok(value):
                run.record("finish", value)
                run.result.resolve(value)
            case Error(error):
                run.record("fail", error)
                run.result.reject(error)

    def __repr__(self) -> str:
        return f"<Driver active={self.active} scheduler={self._scheduler!r}>"


__all__ = ("Driver",)

"""Tests for the Driver trampoline, on a deterministic QueueScheduler."""

import pytest
from kungfu import Error, Ok

from stepwise import (
    AsyncRequest,
    Cancelled,
    ComputationError,
    Driver,
    DriverPolicy,
    ErrorValue,
    InvalidStateError,
    Log,
    PausableComputation,
    QueueScheduler,
    WriterResult,
    delegate,
    resolved,
)


def value_of(request):
    match request.outcome:
        case Ok(value):
            return value
        case other:
            raise AssertionError(f"expected resolved request, got {other!r}")


def error_of(request):
    match request.outcome:
        case Error(error):
            return error
        case other:
            raise AssertionError(f"expected rejected request, got {other!r}")


class TestRun:
    def test_starts_on_scheduler_not_inline(self, sched, driver):
        c = PausableComputation(iter_values())
        result = driver.run(c)
        assert not c.started
        assert result.pending
        assert driver.active == 1
        sched.run_until_idle()
        assert value_of(result) == (1, "two")
        assert driver.active == 0

    def test_one_step_per_tick(self, sched, driver):
        result = driver.run(iter_values())
        ticks = 0
        while sched.run_once():
            ticks += 1
        # start + two echoed values
        assert ticks == 3
        assert value_of(result) == (1, "two")

    def test_waits_for_request(self, sched, driver):
        request = AsyncRequest(scheduler=sched)

        def body():
            v = yield request
            return v * 2

        result = driver.run(body())
        sched.run_until_idle()
        assert result.pending
        request.resolve(21)
        sched.run_until_idle()
        assert value_of(result) == 42

    def test_already_settled_request(self, sched, driver):
        def body():
            return (yield resolved("cached", scheduler=sched))

        result = driver.run(body())
        sched.run_until_idle()
        assert value_of(result) == "cached"

    def test_long_synchronous_chain_does_not_recurse(self, sched, driver):
        def counter(n):
            total = 0
            for i in range(n):
                total += yield i
            return total

        result = driver.run(counter(10_000))
        assert sched.run_until_idle() >= 10_001
        assert value_of(result) == sum(range(10_000))

    def test_request_from_another_scheduler(self, sched, driver):
        other = QueueScheduler()
        request = AsyncRequest(scheduler=other)

        def body():
            return (yield request)

        result = driver.run(body())
        sched.run_until_idle()
        request.resolve("elsewhere")
        other.run_until_idle()
        assert result.pending
        sched.run_until_idle()
        assert value_of(result) == "elsewhere"

    def test_duck_typed_waitable(self, sched, driver):
        class Deferred:
            callback = None

            def on_settle(self, callback):
                self.callback = callback

        deferred = Deferred()

        def body():
            return (yield deferred)

        result = driver.run(body())
        sched.run_until_idle()
        deferred.callback(Ok("duck"))
        sched.run_until_idle()
        assert value_of(result) == "duck"

    def test_delegated_requests(self, sched, driver):
        first = AsyncRequest(scheduler=sched)
        second = AsyncRequest(scheduler=sched)

        def fetch_pair():
            a = yield first
            b = yield second
            return a + b

        def main():
            total = yield delegate(fetch_pair())
            return total.upper()

        result = driver.run(main())
        sched.run_until_idle()
        first.resolve("a")
        sched.run_until_idle()
        second.resolve("b")
        sched.run_until_idle()
        assert value_of(result) == "AB"

    def test_rejects_started_computation(self, driver):
        c = PausableComputation(iter_values())
        c.resume()
        with pytest.raises(InvalidStateError):
            driver.run(c)

    def test_rejects_same_computation_twice(self, driver):
        c = PausableComputation(iter_values())
        driver.run(c)
        with pytest.raises(InvalidStateError):
            driver.run(c)

    def test_rejects_non_computation(self, driver):
        with pytest.raises(TypeError):
            driver.run(42)  # type: ignore[arg-type]


class TestErrors:
    def test_rejection_thrown_in_and_recovered(self, sched, driver):
        request = AsyncRequest(scheduler=sched)

        def body():
            try:
                text = yield request
            except OSError as err:
                text = f"fallback after {err}"
            return text

        result = driver.run(body())
        sched.run_until_idle()
        request.reject(OSError("timeout"))
        sched.run_until_idle()
        assert value_of(result) == "fallback after timeout"

    def test_unhandled_rejection_fails_run(self, sched, driver):
        request = AsyncRequest(scheduler=sched)
        err = OSError("timeout")

        def body():
            yield request

        result = driver.run(body())
        sched.run_until_idle()
        request.reject(err)
        sched.run_until_idle()
        error = error_of(result)
        assert isinstance(error, ComputationError)
        assert error.cause is err
        assert error.__cause__ is err
        assert driver.active == 0

    def test_body_bug_becomes_failure(self, sched, driver):
        def body():
            yield 1
            return 1 / 0

        result = driver.run(body())
        sched.run_until_idle()
        assert isinstance(error_of(result).cause, ZeroDivisionError)

    def test_subscription_failure_thrown_into_body(self, sched, driver):
        def body():
            try:
                # bound to the asyncio loop, which is not running here
                yield resolved(1)
            except RuntimeError:
                return "no loop"

        result = driver.run(body())
        sched.run_until_idle()
        assert value_of(result) == "no loop"
        assert driver.active == 0

    def test_unhandled_subscription_failure_fails_run(self, sched, driver):
        def body():
            yield resolved(1)

        result = driver.run(body())
        sched.run_until_idle()
        assert isinstance(error_of(result).cause, RuntimeError)
        assert driver.active == 0

    def test_duck_typed_non_exception_error_is_catchable(self, sched, driver):
        class Deferred:
            def on_settle(self, callback):
                self.callback = callback

        deferred = Deferred()

        def body():
            try:
                yield deferred
            except ErrorValue as err:
                return f"failed with {err.value}"

        result = driver.run(body())
        sched.run_until_idle()
        deferred.callback(Error("404"))
        sched.run_until_idle()
        assert value_of(result) == "failed with 404"

    def test_failure_before_first_yield(self, sched, driver):
        def body():
            raise KeyError("early")
            yield

        result = driver.run(body())
        sched.run_until_idle()
        assert isinstance(error_of(result).cause, KeyError)


class TestCancel:
    def test_cancel_throws_into_waiting_body(self, sched, driver):
        request = AsyncRequest(scheduler=sched)
        cleaned = []

        def body():
            try:
                yield request
            finally:
                cleaned.append(True)

        c = PausableComputation(body())
        result = driver.run(c)
        sched.run_until_idle()
        assert driver.cancel(c, "shutdown") is True
        sched.run_until_idle()
        error = error_of(result)
        assert isinstance(error.cause, Cancelled)
        assert error.cause.reason == "shutdown"
        assert cleaned == [True]

    def test_body_may_handle_cancellation(self, sched, driver):
        request = AsyncRequest(scheduler=sched)

        def body():
            try:
                yield request
            except Cancelled:
                return "stopped"
            return "finished"

        c = PausableComputation(body())
        result = driver.run(c)
        sched.run_until_idle()
        driver.cancel(c)
        sched.run_until_idle()
        assert value_of(result) == "stopped"
        request.resolve("too late")
        sched.run_until_idle()
        assert value_of(result) == "stopped"

    def test_abandoned_request_does_not_resume(self, sched, driver):
        abandoned = AsyncRequest(scheduler=sched)
        fresh = AsyncRequest(scheduler=sched)
        seen = []

        def body():
            try:
                yield abandoned
            except Cancelled:
                pass
            seen.append((yield fresh))

        c = PausableComputation(body())
        result = driver.run(c)
        sched.run_until_idle()
        driver.cancel(c)
        sched.run_until_idle()
        abandoned.resolve("stale")
        sched.run_until_idle()
        assert seen == []
        fresh.resolve("fresh")
        sched.run_until_idle()
        assert seen == ["fresh"]
        assert value_of(result) is None

    def test_cancel_from_inside_step_keeps_resume_order(self, sched, driver):
        handle = []
        seen = []

        def body():
            driver.cancel(handle[0], "self")
            try:
                yield "plain"
            except Cancelled:
                seen.append("cancelled")
            seen.append((yield "second"))
            return seen

        c = PausableComputation(body())
        handle.append(c)
        result = driver.run(c)
        sched.run_until_idle()
        assert value_of(result) == ["cancelled", "second"]

    def test_cancel_before_start(self, sched, driver):
        c = PausableComputation(iter_values())
        result = driver.run(c)
        driver.cancel(c)
        sched.run_until_idle()
        assert isinstance(error_of(result).cause, Cancelled)

    def test_cancel_unknown_or_finished(self, sched, driver):
        c = PausableComputation(iter_values())
        assert driver.cancel(c) is False
        driver.run(c)
        sched.run_until_idle()
        assert driver.cancel(c) is False


class TestTrace:
    def test_n_suspensions_take_n_plus_one_resumes(self, sched, driver):
        request = AsyncRequest(scheduler=sched)

        def body():
            a = yield 1
            b = yield request
            c = yield "three"
            d = yield resolved(4, scheduler=sched)
            return [a, b, c, d]

        out = driver.run_w(body())
        sched.run_until_idle()
        request.resolve(2)
        sched.run_until_idle()

        match value_of(out):
            case WriterResult(Ok(value), log):
                assert value == [1, 2, "three", 4]
                kinds = [event.kind for event in log]
                assert kinds.count("resume") + kinds.count("throw") == 5
                assert kinds[0] == "start"
                assert kinds[-1] == "finish"
                assert kinds.count("wait") == 2
            case other:
                pytest.fail(f"unexpected {other!r}")

    def test_recovered_error_counts_as_throw(self, sched, driver):
        request = AsyncRequest(scheduler=sched)

        def body():
            try:
                yield request
            except ValueError:
                pass
            return "ok"

        out = driver.run_w(body())
        sched.run_until_idle()
        request.reject(ValueError("x"))
        sched.run_until_idle()

        match value_of(out):
            case WriterResult(Ok("ok"), log):
                kinds = [event.kind for event in log]
                assert kinds == ["start", "resume", "emit", "wait", "throw", "finish"]
            case other:
                pytest.fail(f"unexpected {other!r}")

    def test_failed_run_keeps_trace(self, sched, driver):
        def body():
            yield 1
            raise RuntimeError("bug")

        out = driver.run_w(body())
        sched.run_until_idle()

        match value_of(out):
            case WriterResult(Error(error), log):
                assert isinstance(error, ComputationError)
                assert log[-1].kind == "fail"
            case other:
                pytest.fail(f"unexpected {other!r}")

    def test_trace_limit(self):
        sched = QueueScheduler()
        driver = Driver(sched, DriverPolicy(trace=True, trace_limit=3))
        out = driver.run_w(iter_values())
        sched.run_until_idle()
        match value_of(out):
            case WriterResult(Ok(_), log):
                assert len(log) == 3
                assert log[-1].kind == "finish"
            case other:
                pytest.fail(f"unexpected {other!r}")

    def test_trace_is_a_log(self, sched, driver):
        out = driver.run_w(iter_values())
        sched.run_until_idle()
        match value_of(out):
            case WriterResult(Ok(_), log):
                assert isinstance(log, Log)
                assert [event.kind for event in log][:2] == ["start", "resume"]
            case other:
                pytest.fail(f"unexpected {other!r}")

    def test_trace_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            DriverPolicy(trace=True, trace_limit=0)


def iter_values():
    a = yield 1
    b = yield "two"
    return (a, b)

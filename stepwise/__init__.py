"""
Stepwise: generator-driven async control flow.

Write sequential generator bodies that yield requests; the driver
resumes them with results or throws failures back in at the yield.

Architecture:
- PausableComputation: explicit state machine over a generator body (+ delegation stack)
- AsyncRequest: one-shot settlement cell with a kungfu Result outcome
- Driver: trampoline, one scheduler tick per step
- Combinators: all_ and a request cache
"""

# Core types
from ._types import Body, KeyFn, Outcome, SettleCallback, Waitable

# Errors
from ._errors import (
    AggregateRejection,
    Cancelled,
    ComputationError,
    ErrorValue,
    InvalidStateError,
)

# Scheduling
from .scheduling import LoopScheduler, QueueScheduler, Scheduler

# Computations
from .computation import (
    Completed,
    Delegate,
    Emitted,
    Failed,
    Finished,
    PausableComputation,
    State,
    Step,
    Suspended,
    computation,
    delegate,
)

# Requests
from . import request
from .request import (
    AsyncRequest,
    RequestPolicy,
    as_request,
    from_callback,
    from_coroutine,
    from_future,
    from_lazy,
    from_result,
    is_waitable,
    rejected,
    resolved,
)

# Writer (driver traces)
from .writer import Log, TraceEvent, TraceKind, WriterResult

# Driver
from .driver import Driver, DriverPolicy, drive

# Combinators
from .combinators import CachePolicy, RequestCache, all_, caching_request_factory

__all__ = (
    # Core types
    "Body",
    "KeyFn",
    "Outcome",
    "SettleCallback",
    "Waitable",
    # Errors
    "AggregateRejection",
    "Cancelled",
    "ComputationError",
    "ErrorValue",
    "InvalidStateError",
    # Scheduling
    "LoopScheduler",
    "QueueScheduler",
    "Scheduler",
    # Computations
    "Completed",
    "Delegate",
    "Emitted",
    "Failed",
    "Finished",
    "PausableComputation",
    "State",
    "Step",
    "Suspended",
    "computation",
    "delegate",
    # Requests
    "request",
    "AsyncRequest",
    "RequestPolicy",
    "as_request",
    "from_callback",
    "from_coroutine",
    "from_future",
    "from_lazy",
    "from_result",
    "is_waitable",
    "rejected",
    "resolved",
    # Writer
    "Log",
    "TraceEvent",
    "TraceKind",
    "WriterResult",
    # Driver
    "Driver",
    "DriverPolicy",
    "drive",
    # Combinators
    "CachePolicy",
    "RequestCache",
    "all_",
    "caching_request_factory",
)

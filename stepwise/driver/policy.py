from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DriverPolicy:
    """
    Driver configuration.

    trace: record a Log[TraceEvent] for every run (run_w always traces).
    trace_limit: keep only the newest N events per run.
    """

    trace: bool = False
    trace_limit: int | None = None

    def __post_init__(self) -> None:
        if self.trace_limit is not None and self.trace_limit < 1:
            raise ValueError("DriverPolicy.trace_limit must be >= 1")


__all__ = ("DriverPolicy",)

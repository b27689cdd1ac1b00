from __future__ import annotations

import typing


class InvalidStateError(Exception):
    """Operation attempted on a computation or request in the wrong state."""


class ComputationError(Exception):
    """Computation finished with an error its own body did not handle."""

    cause: BaseException

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Computation failed: {cause!r}")
        self.__cause__ = cause


class AggregateRejection(Exception):
    """all_() child rejected; only the first rejection is reported."""

    index: int
    reason: BaseException

    def __init__(self, index: int, reason: BaseException) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Request #{index} rejected: {reason!r}")
        self.__cause__ = reason


class Cancelled(Exception):
    """Injected into a running computation by Driver.cancel()."""

    reason: typing.Any

    def __init__(self, reason: typing.Any = None) -> None:
        self.reason = reason
        super().__init__("Cancelled" if reason is None else f"Cancelled: {reason}")


class ErrorValue(Exception):
    """Non-exception error of a kungfu Result, lifted so it can be raised."""

    value: typing.Any

    def __init__(self, value: typing.Any) -> None:
        self.value = value
        super().__init__(f"Error value: {value!r}")


__all__ = (
    "AggregateRejection",
    "Cancelled",
    "ComputationError",
    "ErrorValue",
    "InvalidStateError",
)

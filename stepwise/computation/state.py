"""
Computation states and steps
============================
"""

from __future__ import annotations

import typing
from dataclasses import dataclass

# ============================================================================
# Steps (what resume/throw_into return)
# ============================================================================


@dataclass(frozen=True, slots=True)
class Emitted[T]:
    """Body paused at a yield and handed out value."""

    value: T


@dataclass(frozen=True, slots=True)
class Finished[R]:
    """Body returned; value is its return value."""

    value: R


type Step[T, R] = Emitted[T] | Finished[R]

# ============================================================================
# States
# ============================================================================


@dataclass(frozen=True, slots=True)
class Suspended:
    """Paused (or not yet started) and waiting for input."""

    last_emitted: typing.Any = None


@dataclass(frozen=True, slots=True)
class Completed:
    value: typing.Any = None


@dataclass(frozen=True, slots=True)
class Failed:
    error: BaseException


type State = Suspended | Completed | Failed


__all__ = (
    "Completed",
    "Emitted",
    "Failed",
    "Finished",
    "State",
    "Step",
    "Suspended",
)

from .pausable import Delegate, PausableComputation, computation, delegate
from .state import Completed, Emitted, Failed, Finished, State, Step, Suspended

__all__ = (
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
)

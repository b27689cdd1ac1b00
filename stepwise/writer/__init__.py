from .log import Log
from .result import TraceEvent, TraceKind, WriterResult

__all__ = ("Log", "TraceEvent", "TraceKind", "WriterResult")

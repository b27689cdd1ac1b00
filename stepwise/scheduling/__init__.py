from .scheduler import LoopScheduler, QueueScheduler, Scheduler

__all__ = ("LoopScheduler", "QueueScheduler", "Scheduler")

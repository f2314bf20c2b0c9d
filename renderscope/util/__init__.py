"""
Renderscope Utils
=================

Low-level helpers shared by the engine components.

Modules:
- deep_equal: structural value comparison
- scheduler: cancellable deferred callbacks (threading and virtual time)
"""

from .deep_equal import deep_equal
from .scheduler import ManualScheduler, ScheduledCall, Scheduler, ThreadingScheduler

__all__ = [
    "deep_equal",
    "Scheduler",
    "ScheduledCall",
    "ThreadingScheduler",
    "ManualScheduler",
]

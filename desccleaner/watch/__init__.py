"""Change-driven application of the normalizer to a live list.

This package holds the host protocols, bounded timers, an in-memory host,
and the applier that ties them together.
"""

from .applier import ChangeDrivenApplier, WatchRegistry, WatchState
from .host import HostDocument, ListContainer, MarkupNode, MutationRecord, WatchOptions
from .memory import InMemoryContainer, InMemoryDocument, InMemoryNode
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    "ChangeDrivenApplier",
    "WatchRegistry",
    "WatchState",
    "HostDocument",
    "ListContainer",
    "MarkupNode",
    "MutationRecord",
    "WatchOptions",
    "InMemoryContainer",
    "InMemoryDocument",
    "InMemoryNode",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
]

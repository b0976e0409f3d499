"""Build observability: a unified event model for the build pipeline.

Aggregates events from:
- **Pipeline**: rendered and copied files, plugin invocations, rejected
  front matter
- **Scheduler**: hook runs and completed tree walks

All events are frozen dataclasses with nanosecond timestamps.

Quick Start:
    >>> from zs.observability import BuildCollector, EventLog
    >>> log = EventLog()
    >>> collector = BuildCollector(log)
    >>> # Pass collector to zs.build(...) or zs.watch(...)

"""

from zs.observability.collector import BuildCollector
from zs.observability.events import (
    BuildEvent,
    CycleCompleted,
    HeaderRejected,
    HookInvoked,
    PluginInvoked,
    StackEvent,
    now_ns,
)
from zs.observability.log import EventLog

__all__ = [
    "BuildCollector",
    "BuildEvent",
    "CycleCompleted",
    "EventLog",
    "HeaderRejected",
    "HookInvoked",
    "PluginInvoked",
    "StackEvent",
    "now_ns",
]

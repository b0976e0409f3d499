"""Event model for build observability.

Defines event types for the build pipeline and the watch scheduler.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Build pipeline events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BuildEvent:
    """A source file was rendered or copied.

    Attributes:
        kind: Render strategy used for the file.
        source: Source file path (relative to the site root).
        target: Output file path, or ``"<stream>"`` for sink output.
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["markdown", "template", "copy", "fragment"]
    source: str
    target: str
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class PluginInvoked:
    """A macro or hook resolved through the plugin runner.

    Attributes:
        command: Plugin name.
        returncode: Process exit status; ``None`` for partials and spawn
            failures.
        partial: True if a static partial was substituted instead of a process.
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    command: str
    returncode: int | None
    partial: bool
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class HeaderRejected:
    """Front matter was malformed and the file was treated as headerless."""

    path: str
    reason: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Scheduler events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HookInvoked:
    """A ``prehook`` or ``posthook`` ran at a cycle boundary."""

    name: Literal["prehook", "posthook"]
    ok: bool
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class CycleCompleted:
    """One full tree walk finished.

    Attributes:
        built: Number of files built successfully.
        failed: Number of files whose build raised.
        watermark_reset: True if a support-dir or ignore-file change forced
            a full rebuild during this walk.
        duration_ms: Wall-clock time for the walk.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    built: int
    failed: int
    watermark_reset: bool
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = (
    BuildEvent
    | PluginInvoked
    | HeaderRejected
    | HookInvoked
    | CycleCompleted
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()

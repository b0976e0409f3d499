"""Build collector: records pipeline and scheduler events into an EventLog.

Components take an optional collector; when none is given nothing is
recorded and the pipeline behaves identically.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from zs.observability.events import (
    BuildEvent,
    CycleCompleted,
    HeaderRejected,
    HookInvoked,
    PluginInvoked,
    now_ns,
)
from zs.observability.log import EventLog


class BuildCollector:
    """Event collector for one site.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Pipeline events -----

    def record_build(
        self,
        kind: str,
        source: str,
        target: str,
        *,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a rendered or copied file."""
        self._log.append(
            BuildEvent(
                kind=kind,  # type: ignore[arg-type]
                source=source,
                target=target,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_plugin(
        self,
        command: str,
        *,
        returncode: int | None = None,
        partial: bool = False,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a plugin invocation or partial substitution."""
        self._log.append(
            PluginInvoked(
                command=command,
                returncode=returncode,
                partial=partial,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_header_rejected(self, path: str, reason: str) -> None:
        """Record front matter that fell back to headerless handling."""
        self._log.append(HeaderRejected(path=path, reason=reason, timestamp_ns=now_ns()))

    # ----- Scheduler events -----

    def record_hook(self, name: str, *, ok: bool) -> None:
        """Record a prehook/posthook run."""
        self._log.append(
            HookInvoked(name=name, ok=ok, timestamp_ns=now_ns())  # type: ignore[arg-type]
        )

    def record_cycle(
        self,
        *,
        built: int,
        failed: int,
        watermark_reset: bool = False,
        duration_ms: float = 0.0,
    ) -> None:
        """Record the end of a tree walk."""
        self._log.append(
            CycleCompleted(
                built=built,
                failed=failed,
                watermark_reset=watermark_reset,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

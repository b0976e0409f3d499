"""Watch scheduler: polls the source tree and rebuilds changed files.

Every tick walks the whole site root in lexicographic order and compares each
entry's modification time against a single watermark, the time the previous
walk finished.  Newer files are rebuilt; everything else is skipped.

- Source file newer than the watermark -> build into the publish directory
- Directory -> mirror it under the publish directory
- Support directory or ignore file changed -> reset the watermark to the
  epoch so every later entry in the walk rebuilds

A ``prehook`` executable runs before the first build of a cycle and a
``posthook`` after the last one, each at most once per cycle.

The watermark does not track which layout or partial a page uses; a layout
edit only triggers rebuilds through the support-directory reset.
"""

from __future__ import annotations

import os
import stat
import sys
import threading
import time
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from zs._errors import PluginInvocationError, WalkError

if TYPE_CHECKING:
    from zs._types import Vars
    from zs.config import ZsConfig
    from zs.content.plugins import PluginRunner
    from zs.export.renderer import RenderDispatcher
    from zs.observability.collector import BuildCollector

EPOCH = 0.0
PREHOOK = "prehook"
POSTHOOK = "posthook"


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """A filesystem entry seen during a walk.

    Attributes:
        rel: Path relative to the site root, POSIX form.
        path: Absolute path.
        mtime: Modification time (seconds since the epoch).
        category: How the scheduler treats the entry.

    """

    rel: str
    path: Path
    mtime: float
    category: Literal["control", "directory", "source"]


@dataclass(frozen=True, slots=True)
class CycleResult:
    """Outcome of one tree walk.

    Attributes:
        built: Root-relative paths built successfully, in walk order.
        failures: ``(path, error)`` for every build that raised.
        hooks: Hooks that ran during the cycle.
        watermark_reset: True if a control entry forced a full rebuild.
        duration_ms: Wall-clock time for the walk.

    """

    built: tuple[str, ...]
    failures: tuple[tuple[str, Exception], ...]
    hooks: tuple[str, ...]
    watermark_reset: bool
    duration_ms: float

    @property
    def ok(self) -> bool:
        """True if no build failed."""
        return not self.failures

    @property
    def modified(self) -> bool:
        """True if at least one build was attempted."""
        return bool(self.built or self.failures)


def _within(rel: str, directory: str) -> bool:
    return rel == directory or rel.startswith(directory.rstrip("/") + "/")


def categorize_entry(rel: str, is_dir: bool, config: ZsConfig) -> str | None:
    """Decide how the scheduler treats a root-relative entry.

    Returns None for entries that are never walked or built: the publish
    directory and hidden files or directories.

    """
    if _within(rel, config.support_dir) or rel == config.ignore_file:
        return "control"
    if _within(rel, config.output_dir):
        return None
    if any(part.startswith(".") for part in rel.split("/")):
        return None
    return "directory" if is_dir else "source"


class WatchScheduler:
    """Drives builds for a site, once or continuously.

    The watermark and the per-cycle modified state belong to the scheduler
    alone; builds within a cycle run sequentially on the calling thread.

    Args:
        config: Frozen site configuration.
        dispatcher: Builds individual files.
        runner: Plugin runner used for hooks.
        collector: Optional event collector.

    """

    def __init__(
        self,
        config: ZsConfig,
        dispatcher: RenderDispatcher,
        runner: PluginRunner,
        collector: BuildCollector | None = None,
    ) -> None:
        self._config = config
        self._dispatcher = dispatcher
        self._runner = runner
        self._collector = collector
        self._watermark = EPOCH

    @property
    def watermark(self) -> float:
        """Time the last completed watch cycle finished (0.0 = rebuild all)."""
        return self._watermark

    def reset_watermark(self) -> None:
        """Force every entry to look changed on the next walk."""
        self._watermark = EPOCH

    def run(
        self,
        *,
        watch: bool = False,
        cancel: threading.Event | None = None,
    ) -> CycleResult | None:
        """Run one scan, or scan on every tick until ``cancel`` is set.

        The first tick fires immediately.  Cancellation is checked while
        waiting for the next tick; a scan in progress always completes.
        Ticks that fall due during a long scan collapse into a single one.

        Returns:
            The scan result in single-shot mode; None once a watch loop is
            cancelled.

        """
        cancel = cancel if cancel is not None else threading.Event()
        next_tick = time.monotonic()

        while True:
            if cancel.wait(max(0.0, next_tick - time.monotonic())):
                return None

            result = self.scan()
            if not watch:
                return result

            self._watermark = time.time()
            next_tick += self._config.interval
            now = time.monotonic()
            if next_tick < now:
                next_tick = now

    def scan(self) -> CycleResult:
        """Walk the tree once, building every entry newer than the watermark."""
        t0 = time.perf_counter()
        self._config.output_path.mkdir(parents=True, exist_ok=True)

        globals_ = self._dispatcher.globals
        built: list[str] = []
        failures: list[tuple[str, Exception]] = []
        hooks: list[str] = []
        watermark_reset = False
        modified = False

        for entry in self.walk():
            if entry.category == "control":
                if entry.mtime > self._watermark:
                    self._watermark = EPOCH
                    watermark_reset = True
                continue

            if entry.category == "directory":
                (self._config.output_path / entry.rel).mkdir(parents=True, exist_ok=True)
                continue

            if entry.mtime <= self._watermark:
                continue

            if not modified:
                modified = True
                if self._run_hook(PREHOOK, globals_):
                    hooks.append(PREHOOK)

            print(f"  build: {entry.rel}", file=sys.stderr)
            try:
                self._dispatcher.build(entry.rel)
            except Exception as exc:
                print(f"  Build error: {entry.rel}: {exc}", file=sys.stderr)
                failures.append((entry.rel, exc))
            else:
                built.append(entry.rel)

        if modified and self._run_hook(POSTHOOK, globals_):
            hooks.append(POSTHOOK)

        elapsed = (time.perf_counter() - t0) * 1000
        if self._collector is not None:
            self._collector.record_cycle(
                built=len(built),
                failed=len(failures),
                watermark_reset=watermark_reset,
                duration_ms=elapsed,
            )

        return CycleResult(
            built=tuple(built),
            failures=tuple(failures),
            hooks=tuple(hooks),
            watermark_reset=watermark_reset,
            duration_ms=elapsed,
        )

    def walk(self) -> Iterator[TreeEntry]:
        """Yield walkable entries depth-first, siblings in lexicographic order.

        A directory is yielded before its children.  Entries that cannot be
        inspected are reported and skipped.
        """
        yield from self._walk_dir(self._config.root, "")

    def _walk_dir(self, directory: Path, prefix: str) -> Iterator[TreeEntry]:
        try:
            names = sorted(os.listdir(directory))
        except OSError as exc:
            self._report(WalkError(prefix.rstrip("/") or ".", exc))
            return

        for name in names:
            rel = prefix + name
            path = directory / name
            try:
                st = path.lstat()
            except OSError as exc:
                self._report(WalkError(rel, exc))
                continue

            is_dir = stat.S_ISDIR(st.st_mode)
            category = categorize_entry(rel, is_dir, self._config)
            if category is None:
                continue

            yield TreeEntry(rel=rel, path=path, mtime=st.st_mtime, category=category)  # type: ignore[arg-type]
            if is_dir:
                yield from self._walk_dir(path, rel + "/")

    def _run_hook(self, name: str, vars: Vars) -> bool:
        """Run a hook if it is on the search path; True if it was run."""
        if self._runner.which(name) is None:
            return False
        try:
            self._runner.run(vars, name)
            ok = True
        except PluginInvocationError:
            # Already reported by the runner; hooks never stop a cycle.
            ok = False
        if self._collector is not None:
            self._collector.record_hook(name, ok=ok)
        return True

    @staticmethod
    def _report(exc: WalkError) -> None:
        print(f"  Walk error: {exc}", file=sys.stderr)

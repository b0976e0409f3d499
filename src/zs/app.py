"""zs application: wires configuration into the build pipeline.

The public functions (build, build_file, watch, generate, resolve_vars) are
the primary entry points used by the CLI and by Python callers.
"""

import signal
import sys
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from zs._types import Vars
from zs.config import ZsConfig
from zs.config_loader import load_config
from zs.content.macros import MacroExpander
from zs.content.plugins import PluginRunner
from zs.content.variables import VariableResolver, build_globals
from zs.content.watcher import CycleResult, WatchScheduler
from zs.export.renderer import RenderDispatcher
from zs.observability.collector import BuildCollector


@dataclass(frozen=True, slots=True)
class Site:
    """The build pipeline for one site, assembled from a config.

    Attributes:
        config: Frozen configuration.
        globals: Site-wide variables shared by every build.
        resolver: Per-file variable resolution.
        runner: Plugin and hook runner.
        expander: Macro expansion.
        dispatcher: Per-file rendering.
        scheduler: Tree walking and change detection.
        collector: Event collector, if observability is enabled.

    """

    config: ZsConfig
    globals: Vars
    resolver: VariableResolver
    runner: PluginRunner
    expander: MacroExpander
    dispatcher: RenderDispatcher
    scheduler: WatchScheduler
    collector: BuildCollector | None = None


def create_site(config: ZsConfig, *, collector: BuildCollector | None = None) -> Site:
    """Assemble the pipeline components for ``config``."""
    globals_ = build_globals(config)
    resolver = VariableResolver(config, collector)
    runner = PluginRunner(config, collector)
    expander = MacroExpander(config, runner)
    dispatcher = RenderDispatcher(config, globals_, resolver, expander, collector)
    scheduler = WatchScheduler(config, dispatcher, runner, collector)
    return Site(
        config=config,
        globals=globals_,
        resolver=resolver,
        runner=runner,
        expander=expander,
        dispatcher=dispatcher,
        scheduler=scheduler,
        collector=collector,
    )


def _count_sources(site: Site) -> int:
    return sum(1 for entry in site.scheduler.walk() if entry.category == "source")


def build(
    root: str | Path = ".",
    *,
    collector: BuildCollector | None = None,
    **kwargs: object,
) -> CycleResult:
    """Build the whole site once into the publish directory.

    Per-file failures do not stop the build; they are collected in the
    returned result.

    Args:
        root: Path to the site root directory.
        collector: Optional event collector.
        **kwargs: Override ZsConfig fields.

    """
    from zs.banner import print_banner

    config = load_config(Path(root), **kwargs)
    t0 = time.perf_counter()
    site = create_site(config, collector=collector)
    source_count = _count_sources(site)
    load_ms = (time.perf_counter() - t0) * 1000

    print_banner(config, source_count, mode="build", load_ms=load_ms)

    result = site.scheduler.run(watch=False)
    assert result is not None
    _print_build_summary(config, result)
    return result


def _print_build_summary(config: ZsConfig, result: CycleResult) -> None:
    """Print build completion summary to stderr."""
    built = len(result.built)
    lines = [
        "",
        "─" * 41,
        f"  Built {built} file{'s' if built != 1 else ''}",
    ]
    if result.failures:
        failed = len(result.failures)
        lines.append(f"  Failed {failed} file{'s' if failed != 1 else ''}:")
        lines.extend(f"    {path}: {exc}" for path, exc in result.failures)
    if result.hooks:
        lines.append(f"  Hooks: {', '.join(result.hooks)}")
    lines.append(f"  Output: {config.output_path}")
    lines.append(f"  Done in {result.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)


def build_file(
    path: str | Path,
    sink: BinaryIO,
    root: str | Path = ".",
    **kwargs: object,
) -> None:
    """Build a single file and stream its output to ``sink``.

    Any error is raised to the caller.
    """
    config = load_config(Path(root), **kwargs)
    create_site(config).dispatcher.build(path, sink)


def watch(
    root: str | Path = ".",
    *,
    cancel: threading.Event | None = None,
    collector: BuildCollector | None = None,
    **kwargs: object,
) -> None:
    """Rebuild changed files on every tick until cancelled.

    When ``cancel`` is not given, SIGINT and SIGTERM stop the loop after the
    current scan completes.

    Args:
        root: Path to the site root directory.
        cancel: Event that stops the loop at the next tick boundary.
        collector: Optional event collector.
        **kwargs: Override ZsConfig fields.

    """
    from zs.banner import print_banner

    config = load_config(Path(root), **kwargs)
    t0 = time.perf_counter()
    site = create_site(config, collector=collector)
    source_count = _count_sources(site)
    load_ms = (time.perf_counter() - t0) * 1000

    print_banner(config, source_count, mode="watch", load_ms=load_ms)

    if cancel is not None:
        site.scheduler.run(watch=True, cancel=cancel)
        return

    cancel = threading.Event()
    previous = _install_stop_handlers(cancel)
    try:
        site.scheduler.run(watch=True, cancel=cancel)
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def _install_stop_handlers(cancel: threading.Event) -> dict[int, object]:
    """Route SIGINT/SIGTERM to ``cancel``; returns the handlers replaced."""
    if threading.current_thread() is not threading.main_thread():
        return {}

    def _stop(signum: int, frame: object) -> None:
        print("\n  Stopping after the current scan...", file=sys.stderr)
        cancel.set()

    previous: dict[int, object] = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, _stop)
    return previous


def generate(
    reader: BinaryIO,
    writer: BinaryIO,
    root: str | Path = ".",
    **kwargs: object,
) -> None:
    """Render a markdown fragment from ``reader`` into ``writer``.

    Macros are expanded against the site globals; there is no front matter
    and no layout.
    """
    config = load_config(Path(root), **kwargs)
    create_site(config).dispatcher.generate(reader, writer)


def resolve_vars(
    path: str | Path,
    root: str | Path = ".",
    **kwargs: object,
) -> Vars:
    """Return the effective variables for one source file.

    Raises:
        ReadError: If the file cannot be read.

    """
    config = load_config(Path(root), **kwargs)
    site = create_site(config)
    vars, _body = site.resolver.resolve(path, site.globals)
    return vars


__all__ = [
    "Site",
    "build",
    "build_file",
    "create_site",
    "generate",
    "resolve_vars",
    "watch",
]

"""Plugin runner: resolves macro commands to partials or external processes.

A plugin is any executable on the search path, which is the site's support
directory followed by ``$PATH``.  Every resolved variable except ``content``
is handed to the process as a ``ZS_<NAME>`` environment entry, together with
``ZS`` (the zs binary) and ``ZS_OUTDIR`` (the publish directory).  Whatever
the process prints to stdout becomes the substitution text.

A static partial ``<support_dir>/<command>.html`` short-circuits the lookup:
its contents are returned and no process is spawned.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING

from zs._errors import PluginInvocationError

if TYPE_CHECKING:
    from pathlib import Path

    from zs._types import Vars
    from zs.config import ZsConfig
    from zs.observability.collector import BuildCollector

PARTIAL_SUFFIX = ".html"
# Withheld from plugin environments; rendered pages can be very large.
WITHHELD_VARS = frozenset({"content"})


def _exportable(name: str, value: str) -> bool:
    return bool(name) and "=" not in name and "\0" not in name and "\0" not in value


class PluginRunner:
    """Runs plugins for one site.

    The search path is computed once from ``environ`` so lookups never
    depend on, or modify, the process-wide ``PATH``.

    Args:
        config: Frozen site configuration.
        collector: Optional event collector.
        environ: Base environment for plugin processes (defaults to
            ``os.environ``).

    """

    __slots__ = ("_collector", "_config", "_environ", "_search_path")

    def __init__(
        self,
        config: ZsConfig,
        collector: BuildCollector | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config
        self._collector = collector
        self._environ = dict(os.environ if environ is None else environ)
        self._search_path = os.pathsep.join(
            [str(config.support_path), self._environ.get("PATH", os.defpath)]
        )

    @property
    def search_path(self) -> str:
        """The ``PATH`` used for plugin lookup, support directory first."""
        return self._search_path

    def partial_path(self, command: str) -> Path:
        """Location of the static partial for ``command``."""
        return self._config.support_path / f"{command}{PARTIAL_SUFFIX}"

    def which(self, command: str) -> str | None:
        """Return the executable for ``command`` on the search path, if any."""
        return shutil.which(command, path=self._search_path)

    def available(self, command: str) -> bool:
        """True if ``command`` resolves to a partial or an executable."""
        return self.partial_path(command).is_file() or self.which(command) is not None

    def environment(self, vars: Vars) -> dict[str, str]:
        """Build the environment for a plugin process.

        Variables whose name contains ``=`` or whose name or value contains
        a NUL byte cannot be passed to a process and are left out.
        """
        env = dict(self._environ)
        env["PATH"] = self._search_path
        env["ZS"] = self._config.executable
        env["ZS_OUTDIR"] = self._config.output_dir
        for name, value in vars.items():
            if name in WITHHELD_VARS or not _exportable(name, value):
                continue
            env[f"ZS_{name.upper()}"] = value
        return env

    def run(self, vars: Vars, command: str, *args: str) -> str:
        """Resolve ``command`` and return its substitution text.

        Blocks until the process exits; there is no timeout.

        Raises:
            PluginInvocationError: If no executable is found, the process
                cannot be started, or it exits non-zero.  Captured stderr
                is printed before raising.

        """
        partial = self.partial_path(command)
        if partial.is_file():
            try:
                text = partial.read_text(encoding="utf-8")
            except OSError as exc:
                raise self._failed(command, None, str(exc)) from exc
            if self._collector is not None:
                self._collector.record_plugin(command, partial=True)
            return text

        executable = self.which(command)
        if executable is None:
            raise self._failed(command, None, "not found on the search path")

        t0 = time.perf_counter()
        try:
            proc = subprocess.run(
                [executable, *args],
                cwd=self._config.root,
                env=self.environment(vars),
                capture_output=True,
                check=False,
            )
        except (OSError, ValueError) as exc:
            raise self._failed(command, None, str(exc)) from exc
        elapsed = (time.perf_counter() - t0) * 1000

        if self._collector is not None:
            self._collector.record_plugin(
                command, returncode=proc.returncode, duration_ms=elapsed,
            )

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace")
            raise self._failed(command, proc.returncode, stderr)

        return proc.stdout.decode("utf-8", errors="replace")

    def _failed(self, command: str, returncode: int | None, stderr: str) -> PluginInvocationError:
        exc = PluginInvocationError(command, returncode, stderr)
        print(f"  Plugin error: {exc}", file=sys.stderr)
        if stderr:
            print(stderr.rstrip("\n"), file=sys.stderr)
        if returncode is None and self._collector is not None:
            self._collector.record_plugin(command)
        return exc

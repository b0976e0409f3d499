"""Render dispatch: turns one source file into its published output.

The strategy is picked from the literal file suffix:

    ``.md`` / ``.mkd``    macros -> markdown -> layout template -> ``.html``
    ``.html`` / ``.xml``  macros -> template
    anything else        byte-for-byte copy (permission bits preserved)

Output goes to the mirrored path under the publish directory, or to an
explicit binary sink for single-file and ad-hoc builds.  Errors raised by the
markdown converter or the template engine propagate unchanged.
"""

from __future__ import annotations

import shutil
import time
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, BinaryIO

from kida import Environment
from patitas import Markdown

from zs._errors import ReadError, ZsError
from zs.config import HIGHLIGHTING

if TYPE_CHECKING:
    from zs._types import OutputSink, RenderKind, Vars
    from zs.config import ZsConfig
    from zs.content.macros import MacroExpander
    from zs.content.variables import VariableResolver
    from zs.observability.collector import BuildCollector

MARKDOWN_SUFFIXES = frozenset({".md", ".mkd"})
TEMPLATE_SUFFIXES = frozenset({".html", ".xml"})
STREAM_TARGET = "<stream>"


def render_kind(path: Path | str) -> RenderKind:
    """Choose the render strategy for ``path`` (case-sensitive suffix)."""
    suffix = PurePosixPath(str(path)).suffix
    if suffix in MARKDOWN_SUFFIXES:
        return "markdown"
    if suffix in TEMPLATE_SUFFIXES:
        return "template"
    return "copy"


def create_markdown(config: ZsConfig) -> Markdown:
    """Patitas converter for the configured extensions."""
    plugins = [name for name in config.extensions if name != HIGHLIGHTING]
    return Markdown(plugins=plugins, highlight=HIGHLIGHTING in config.extensions)


def create_template_env(config: ZsConfig) -> Environment:
    """Kida environment with ERB-style delimiters from the config.

    Statements use ``<% ... %>`` and expressions ``<%= ... %>`` by default.
    Output is not escaped: rendered markdown is inserted as-is.
    """
    return Environment(
        autoescape=False,
        block_start=config.template_open,
        block_end=config.template_close,
        variable_start=config.template_open + "=",
        variable_end=config.template_close,
    )


class RenderDispatcher:
    """Builds source files for one site.

    Args:
        config: Frozen site configuration.
        globals_: Site-wide variables shared by every build.
        resolver: Variable resolver for front matter and defaults.
        expander: Macro expander.
        collector: Optional event collector.

    """

    __slots__ = (
        "_collector",
        "_config",
        "_expander",
        "_globals",
        "_markdown",
        "_resolver",
        "_templates",
    )

    def __init__(
        self,
        config: ZsConfig,
        globals_: Vars,
        resolver: VariableResolver,
        expander: MacroExpander,
        collector: BuildCollector | None = None,
    ) -> None:
        self._config = config
        self._globals = dict(globals_)
        self._resolver = resolver
        self._expander = expander
        self._collector = collector
        self._markdown = create_markdown(config)
        self._templates = create_template_env(config)

    @property
    def globals(self) -> Vars:
        """A copy of the site-wide variables."""
        return dict(self._globals)

    @property
    def expander(self) -> MacroExpander:
        return self._expander

    def build(self, path: Path | str, sink: OutputSink | None = None) -> str:
        """Build one file and return where the output went.

        Args:
            path: Source file, relative to the site root or absolute.
            sink: Binary stream to write to instead of the mirrored path.
                Permission bits are not copied in that mode.

        Returns:
            Root-relative output path, or ``"<stream>"`` when ``sink`` was given.

        Raises:
            ReadError: If the source (or its layout) cannot be read.
            MalformedMacroError: If a macro is never closed.

        """
        rel = self._resolver.relative(path)
        kind = render_kind(rel)
        t0 = time.perf_counter()

        if kind == "markdown":
            target = self._build_markdown(rel, sink)
        elif kind == "template":
            target = self._build_template(rel, sink, self._globals)
        else:
            target = self._build_raw(rel, sink)

        if self._collector is not None:
            elapsed = (time.perf_counter() - t0) * 1000
            self._collector.record_build(kind, rel, target, duration_ms=elapsed)
        return target

    def fragment(self, body: str, vars: Vars | None = None) -> str:
        """Expand macros in ``body`` and convert it from markdown to HTML.

        No front matter and no layout are involved.
        """
        vars = self.globals if vars is None else vars
        return self._markdown(self._expander.expand(body, vars))

    def generate(self, reader: BinaryIO, writer: BinaryIO, vars: Vars | None = None) -> None:
        """Render a markdown fragment read from ``reader`` into ``writer``."""
        t0 = time.perf_counter()
        body = reader.read().decode("utf-8", errors="replace")
        writer.write(self.fragment(body, vars).encode("utf-8"))
        if self._collector is not None:
            elapsed = (time.perf_counter() - t0) * 1000
            self._collector.record_build("fragment", STREAM_TARGET, STREAM_TARGET, duration_ms=elapsed)

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _build_markdown(self, rel: str, sink: OutputSink | None) -> str:
        vars, body = self._resolver.resolve(rel, self._globals)
        source = self._expander.expand(body, vars)
        vars["source"] = source
        vars["content"] = self._markdown(source)

        layout = self._config.support_path / vars["layout"]
        target = None if sink is not None else self._mirror(rel).with_suffix(".html")
        return self._build_template(layout, sink, vars, target=target)

    def _build_template(
        self,
        path: Path | str,
        sink: OutputSink | None,
        globals_: Vars,
        *,
        target: Path | None = None,
    ) -> str:
        vars, body = self._resolver.resolve(path, globals_)
        body = self._expander.expand(body, vars)
        template = self._templates.from_string(body, name=self._resolver.relative(path))
        data = template.render(vars).encode("utf-8")

        if sink is not None:
            sink.write(data)
            return STREAM_TARGET

        if target is None:
            target = self._mirror(self._resolver.relative(path))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return self._resolver.relative(target)

    def _build_raw(self, rel: str, sink: OutputSink | None) -> str:
        source = self._config.root / rel
        if sink is not None:
            try:
                with source.open("rb") as src:
                    shutil.copyfileobj(src, sink)
            except OSError as exc:
                raise ReadError(rel, exc) from exc
            return STREAM_TARGET

        target = self._mirror(rel)
        if not source.is_file():
            raise ReadError(rel, FileNotFoundError(2, "No such file", str(source)))
        target.parent.mkdir(parents=True, exist_ok=True)
        # A previous copy may carry read-only bits from the source.
        target.unlink(missing_ok=True)
        shutil.copyfile(source, target)
        shutil.copymode(source, target)
        return self._resolver.relative(target)

    def _mirror(self, rel: str) -> Path:
        """Mirrored output path for a root-relative source path."""
        p = PurePosixPath(rel)
        if p.is_absolute() or ".." in p.parts:
            msg = f"{rel} is outside the site root; build it to a stream instead"
            raise ZsError(msg)
        return self._config.output_path / p

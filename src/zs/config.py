"""zs configuration.

ZsConfig is the central configuration object, frozen after creation.  It is
threaded explicitly into every component; there is no process-wide state.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path

from zs._errors import ConfigError

# Turns on patitas' code highlighting rather than naming a plugin.
HIGHLIGHTING = "highlighting"

# Markdown plugins understood by patitas, plus HIGHLIGHTING.
KNOWN_EXTENSIONS: tuple[str, ...] = (
    "autolinks",
    "footnotes",
    HIGHLIGHTING,
    "math",
    "strikethrough",
    "table",
    "task_lists",
)


@dataclass(frozen=True, slots=True)
class ZsConfig:
    """Configuration for a zs site.

    Attributes:
        root: Path to the site root (sources live here).  Always resolved to
              an absolute path on construction.
        support_dir: Private directory holding layouts, partials, plugins and
            the config file.
        output_dir: Publish directory mirroring the source tree.
        ignore_file: Ignore-rules file at the root; touching it forces a
            full rebuild.
        title: Site title, exposed as the ``title`` global.
        description: Site description global.
        keywords: Site keywords global.
        production: Hide missing-macro diagnostics from rendered output.
        vars: Extra ``name=value`` globals; override everything but
            front matter.
        opening_delim: Macro opening delimiter.
        closing_delim: Macro closing delimiter.
        template_open: Template statement opening delimiter (expressions
            use ``template_open + "="``).
        template_close: Template closing delimiter.
        default_layout: Layout used by markdown files that set none.
        extensions: Enabled markdown plugins; ``highlighting`` enables
            syntax highlighting of fenced code blocks.
        interval: Seconds between watch ticks.
        executable: Path of the zs binary, handed to plugins as ``$ZS``.

    """

    root: Path = field(default_factory=Path.cwd)
    support_dir: str = ".zs"
    output_dir: str = ".pub"
    ignore_file: str = ".zsignore"
    title: str = ""
    description: str = ""
    keywords: str = ""
    production: bool = False
    vars: tuple[str, ...] = ()
    opening_delim: str = "{{"
    closing_delim: str = "}}"
    template_open: str = "<%"
    template_close: str = "%>"
    default_layout: str = "layout.html"
    extensions: tuple[str, ...] = ("table", "strikethrough", HIGHLIGHTING)
    interval: float = 1.0
    executable: str = field(default_factory=lambda: sys.argv[0])

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if not self.opening_delim or not self.closing_delim:
            msg = "macro delimiters must not be empty"
            raise ConfigError(msg)
        if not self.template_open or not self.template_close:
            msg = "template delimiters must not be empty"
            raise ConfigError(msg)
        if self.interval <= 0:
            msg = f"watch interval must be positive, got {self.interval}"
            raise ConfigError(msg)

    @property
    def support_path(self) -> Path:
        """Absolute path to the support directory."""
        return self.root / self.support_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to the publish directory."""
        return self.root / self.output_dir

    @property
    def ignore_path(self) -> Path:
        """Absolute path to the ignore-rules file."""
        return self.root / self.ignore_file

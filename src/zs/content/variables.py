"""Variable resolution: the effective variable set for one source file.

Variables come from four layers, lowest precedence first:

1. Content-derived defaults (``title``, ``description``, ``file``, ``url``,
   ``output``)
2. Site globals (config title/description/keywords, ``ZS_*`` environment
   variables, ``name=value`` overrides)
3. The default ``layout``
4. Front matter: a YAML mapping above a ``---`` line, which wins every
   conflict

Malformed front matter never fails a build: the file is treated as if it had
no header and the problem is reported on stderr.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

import yaml

from zs._errors import HeaderParseError, ReadError

if TYPE_CHECKING:
    from zs._types import Vars
    from zs.config import ZsConfig
    from zs.observability.collector import BuildCollector

HEADER_DELIMITER = "\n---\n"
ENV_PREFIX = "ZS_"


def build_globals(config: ZsConfig, environ: Mapping[str, str] | None = None) -> Vars:
    """Compute the site-wide variables shared by every file.

    ``name=value`` pairs from ``config.vars`` override the environment, which
    overrides the configured title/description/keywords.
    """
    environ = os.environ if environ is None else environ

    result: Vars = {
        "title": config.title,
        "description": config.description,
        "keywords": config.keywords,
    }
    if config.production:
        result["production"] = "1"

    for key, value in environ.items():
        if key.startswith(ENV_PREFIX) and len(key) > len(ENV_PREFIX):
            result[key[len(ENV_PREFIX):].lower()] = value

    for pair in config.vars:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            print(f"  Ignoring malformed variable: {pair!r}", file=sys.stderr)
            continue
        result[name.strip().lower()] = value

    return result


def split_header(text: str) -> tuple[str | None, str]:
    """Split raw text into ``(header, body)``; header is None if absent."""
    sep = text.find(HEADER_DELIMITER)
    if sep == -1:
        return None, text
    return text[:sep], text[sep + len(HEADER_DELIMITER):]


def parse_header(path: str, header: str) -> Vars:
    """Parse a front-matter block into lower-cased string variables.

    Raises:
        HeaderParseError: If the header is not YAML, not a mapping, or holds
            a list or mapping value.

    """
    try:
        data = yaml.safe_load(header)
    except yaml.YAMLError as exc:
        raise HeaderParseError(path, str(exc).splitlines()[0]) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise HeaderParseError(path, "header is not a mapping")

    result: Vars = {}
    for key, value in data.items():
        if isinstance(value, (dict, list, tuple, set)):
            raise HeaderParseError(path, f"value of {key!r} is not a scalar")
        result[str(key).lower()] = _scalar(value)
    return result


def _scalar(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class VariableResolver:
    """Resolves variables and body text for source files under a site root.

    Args:
        config: Frozen site configuration.
        collector: Optional event collector for rejected headers.

    """

    __slots__ = ("_collector", "_config")

    def __init__(self, config: ZsConfig, collector: BuildCollector | None = None) -> None:
        self._config = config
        self._collector = collector

    def relative(self, path: Path | str) -> str:
        """Return ``path`` relative to the site root in POSIX form.

        Paths outside the root are returned unchanged.
        """
        p = Path(path)
        if p.is_absolute():
            try:
                p = p.relative_to(self._config.root)
            except ValueError:
                return p.as_posix()
        return p.as_posix()

    def defaults(self, rel: str) -> Vars:
        """Content-derived defaults for a root-relative path."""
        suffix = PurePosixPath(rel).suffix
        url = rel[: len(rel) - len(suffix)] + ".html"
        return {
            "title": rel.replace("_", " ").replace("-", " ").upper(),
            "description": "",
            "file": rel,
            "url": url,
            "output": (PurePosixPath(self._config.output_dir) / url).as_posix(),
        }

    def resolve(self, path: Path | str, globals_: Vars) -> tuple[Vars, str]:
        """Resolve the effective variables and body for one file.

        Args:
            path: Source file, relative to the site root or absolute.
            globals_: Site-wide variables from :func:`build_globals`.

        Returns:
            ``(vars, body)``; ``body`` is everything after the header
            delimiter, or the whole text when there is no valid header.

        Raises:
            ReadError: If the file cannot be read.

        """
        rel = self.relative(path)
        source = Path(path) if Path(path).is_absolute() else self._config.root / path
        try:
            text = source.read_bytes().decode("utf-8", errors="replace")
        except OSError as exc:
            raise ReadError(rel, exc) from exc

        result = self.defaults(rel)
        result.update(globals_)
        result.setdefault("layout", self._config.default_layout)

        header, body = split_header(text)
        if header is not None:
            try:
                result.update(parse_header(rel, header))
            except HeaderParseError as exc:
                body = text
                print(f"  Header error: {exc}", file=sys.stderr)
                if self._collector is not None:
                    self._collector.record_header_rejected(rel, str(exc))

        result["url"] = result["url"].removeprefix("./")
        return result, body

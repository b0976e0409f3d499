"""Macro expansion: replaces ``{{ ... }}`` tokens in body text.

A macro holding a single word that names a variable expands to the variable's
value.  Anything else is read as ``command arg1 arg2 ...`` and handed to the
plugin runner.  Unknown names expand to a visible diagnostic outside
production mode and to nothing in production.

The scan is a single left-to-right pass: substituted text is never
re-scanned, and there is no escape syntax for the delimiters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from zs._errors import MalformedMacroError, PluginInvocationError

if TYPE_CHECKING:
    from zs._types import Vars
    from zs.config import ZsConfig
    from zs.content.plugins import PluginRunner


def not_found(name: str) -> str:
    """Placeholder rendered for an unresolved macro outside production."""
    return f"{name}: plugin or variable not found"


class MacroExpander:
    """Expands macros using the configured delimiters.

    Args:
        config: Frozen site configuration (delimiters, production flag).
        runner: Plugin runner used for non-variable macros.

    """

    __slots__ = ("_config", "_runner")

    def __init__(self, config: ZsConfig, runner: PluginRunner) -> None:
        self._config = config
        self._runner = runner

    @property
    def runner(self) -> PluginRunner:
        return self._runner

    def expand(self, body: str, vars: Vars) -> str:
        """Return ``body`` with every macro substituted.

        Raises:
            MalformedMacroError: If an opening delimiter has no closing
                delimiter after it.  Nothing is returned in that case.

        """
        opening = self._config.opening_delim
        closing = self._config.closing_delim

        out: list[str] = []
        pos = 0
        while True:
            start = body.find(opening, pos)
            if start == -1:
                out.append(body[pos:])
                return "".join(out)

            end = body.find(closing, start + len(opening))
            if end == -1:
                msg = "closing delimiter not found"
                raise MalformedMacroError(msg)

            out.append(body[pos:start])
            out.append(self._substitute(body[start + len(opening):end].split(), vars))
            pos = end + len(closing)

    def _substitute(self, fields: list[str], vars: Vars) -> str:
        if not fields:
            return ""

        name, *args = fields
        if not args and name in vars:
            return vars[name]

        if self._runner.available(name):
            try:
                return self._runner.run(vars, name, *args)
            except PluginInvocationError:
                # Reported by the runner; a failed plugin renders as nothing.
                return ""

        if self._config.production:
            return ""
        return not_found(name)

"""Content layer: variables, macros, plugins and the watch scheduler.

Resolves per-file variables, expands macros (calling out to plugins), and
polls the source tree for changed files.
"""

from zs.content.macros import MacroExpander
from zs.content.plugins import PluginRunner
from zs.content.variables import VariableResolver, build_globals
from zs.content.watcher import CycleResult, TreeEntry, WatchScheduler

__all__ = [
    "CycleResult",
    "MacroExpander",
    "PluginRunner",
    "TreeEntry",
    "VariableResolver",
    "WatchScheduler",
    "build_globals",
]

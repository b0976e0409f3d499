"""zs: an extensible static site generator.

Markdown and HTML sources under a site root are rendered into a publish
directory.  Pages carry YAML front matter, ``{{ macros }}`` expand to
variables or to the output of plugin executables, and a polling watcher
rebuilds whatever changed.

Quick start::

    import zs

    zs.build("my-site/")

Other entry points::

    zs.watch("my-site/")                       # Rebuild on change until Ctrl-C
    zs.build_file("index.md", sys.stdout.buffer, root="my-site/")
    zs.generate(sys.stdin.buffer, sys.stdout.buffer)
    zs.resolve_vars("index.md", root="my-site/")

A site keeps its layouts, partials, plugins and hooks in ``.zs/``; output
goes to ``.pub/``.

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "ZsConfig",
    "ZsError",
    "__version__",
    "build",
    "build_file",
    "generate",
    "resolve_vars",
    "watch",
]

_LAZY = {
    "ZsConfig": "zs.config",
    "ZsError": "zs._errors",
    "build": "zs.app",
    "build_file": "zs.app",
    "generate": "zs.app",
    "resolve_vars": "zs.app",
    "watch": "zs.app",
}


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import zs`` fast while providing a clean top-level API.
    """
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)

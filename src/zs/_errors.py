"""zs error hierarchy.

All zs-specific errors inherit from ZsError for easy catching.  Errors
raised by the markdown converter or the template engine are not wrapped
and reach callers unchanged.
"""

from pathlib import Path


class ZsError(Exception):
    """Base error for all zs operations."""


class ConfigError(ZsError):
    """Invalid or missing configuration."""


class ReadError(ZsError):
    """A source file could not be read."""

    def __init__(self, path: Path | str, cause: OSError) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"cannot read {self.path}: {cause.strerror or cause}")


class HeaderParseError(ZsError):
    """Front matter could not be parsed as a flat mapping."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        super().__init__(f"failed to parse header of {self.path}: {reason}")


class MalformedMacroError(ZsError):
    """A macro was opened but never closed."""


class PluginInvocationError(ZsError):
    """A plugin process failed to start or exited non-zero."""

    def __init__(self, command: str, returncode: int | None, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            msg = f"plugin {command!r} could not be started"
        else:
            msg = f"plugin {command!r} exited with status {returncode}"
        super().__init__(msg)


class WalkError(ZsError):
    """A filesystem entry could not be inspected during a tree walk."""

    def __init__(self, path: Path | str, cause: OSError) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"error walking {self.path}: {cause.strerror or cause}")

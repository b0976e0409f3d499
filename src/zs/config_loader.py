"""Load ZsConfig from .zs/config.yaml if present.

Merges, lowest precedence first: the config file, ``ZS_*`` environment
variables, then CLI overrides.
"""

from __future__ import annotations

import os
import sys
import tomllib
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path

import yaml

from zs._errors import ConfigError
from zs.config import KNOWN_EXTENSIONS, ZsConfig

CONFIG_NAME = "config"

_BOOL_FIELDS = frozenset({"production"})
_FLOAT_FIELDS = frozenset({"interval"})
_LIST_FIELDS = frozenset({"vars", "extensions"})
# Fields that only make sense as constructor arguments, never from files or env.
_INTERNAL_FIELDS = frozenset({"root"})


def load_config(
    root: Path,
    *,
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: object,
) -> ZsConfig:
    """Load ZsConfig for ``root``, merging file, environment and overrides.

    Looks for ``config.yaml``, ``config.yml`` or ``config.toml`` inside the
    support directory unless ``config_file`` names one explicitly.  ``None``
    overrides are ignored so that unset CLI flags do not mask lower layers.
    """
    root = Path(root).resolve()
    environ = os.environ if environ is None else environ

    explicit = {k: v for k, v in overrides.items() if v is not None}
    support_dir = str(explicit.get("support_dir") or environ.get("ZS_SUPPORT_DIR") or ".zs")

    merged: dict[str, object] = {}
    merged.update(_read_config_file(root / support_dir, config_file))
    merged.update(_read_environ(environ))
    merged.update(explicit)

    return ZsConfig(root=root, **_coerce(merged))


def _field_names() -> frozenset[str]:
    return frozenset(f.name for f in fields(ZsConfig)) - _INTERNAL_FIELDS


def _read_config_file(support_path: Path, config_file: Path | None) -> dict[str, object]:
    """Read zs config from yaml/toml. Returns empty dict when absent or broken."""
    if config_file is not None:
        return _parse(Path(config_file))
    for suffix in (".yaml", ".yml", ".toml"):
        path = support_path / f"{CONFIG_NAME}{suffix}"
        if path.is_file():
            return _parse(path)
    return {}


def _parse(path: Path) -> dict[str, object]:
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".toml":
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (OSError, yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        print(f"  Config error: {path}: {exc} (using defaults)", file=sys.stderr)
        return {}
    if not isinstance(data, dict):
        print(f"  Config error: {path}: not a mapping (using defaults)", file=sys.stderr)
        return {}
    return _known_keys(data)


def _known_keys(data: Mapping[str, object]) -> dict[str, object]:
    """Keep recognised keys, accepting ``opening-delim`` style spellings."""
    names = _field_names()
    result: dict[str, object] = {}
    for key, value in data.items():
        name = str(key).replace("-", "_").lower()
        if name in names:
            result[name] = value
    return result


def _read_environ(environ: Mapping[str, str]) -> dict[str, object]:
    """Pick ``ZS_<FIELD>`` entries for every config field."""
    result: dict[str, object] = {}
    for name in _field_names():
        key = f"ZS_{name.upper()}"
        if key in environ:
            result[name] = environ[key]
    return result


def _coerce(data: dict[str, object]) -> dict[str, object]:
    result: dict[str, object] = {}
    for name, value in data.items():
        if name in _BOOL_FIELDS:
            result[name] = _to_bool(value)
        elif name in _FLOAT_FIELDS:
            result[name] = _to_float(name, value)
        elif name in _LIST_FIELDS:
            result[name] = _to_tuple(value)
        else:
            result[name] = str(value)
    if "extensions" in result:
        result["extensions"] = _valid_extensions(result["extensions"])  # type: ignore[arg-type]
    return result


def _to_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _to_tuple(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        items = [str(value)]
    return tuple(item.strip() for item in items if item.strip())


def _valid_extensions(names: tuple[str, ...]) -> tuple[str, ...]:
    valid: list[str] = []
    for name in names:
        if name in KNOWN_EXTENSIONS:
            valid.append(name)
        else:
            print(f"  invalid extension: {name}", file=sys.stderr)
    return tuple(valid)


def _to_float(name: str, value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        msg = f"{name} must be a number, got {value!r}"
        raise ConfigError(msg) from exc

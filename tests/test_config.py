"""Tests for zs.config."""

from pathlib import Path

import pytest

from zs._errors import ConfigError
from zs.config import KNOWN_EXTENSIONS, ZsConfig


class TestZsConfig:
    """ZsConfig: frozen dataclass with sensible defaults."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = ZsConfig(root=tmp_path)
        assert config.support_dir == ".zs"
        assert config.output_dir == ".pub"
        assert config.ignore_file == ".zsignore"
        assert config.opening_delim == "{{"
        assert config.closing_delim == "}}"
        assert config.template_open == "<%"
        assert config.template_close == "%>"
        assert config.default_layout == "layout.html"
        assert config.production is False
        assert config.vars == ()
        assert config.interval == 1.0

    def test_frozen(self) -> None:
        config = ZsConfig()
        with pytest.raises(AttributeError):
            config.production = True  # type: ignore[misc]

    def test_root_defaults_to_cwd(self) -> None:
        assert ZsConfig().root == Path.cwd()

    def test_relative_root_resolved(self) -> None:
        config = ZsConfig(root=Path("."))
        assert config.root.is_absolute()

    def test_paths_resolve_from_root(self, tmp_path: Path) -> None:
        config = ZsConfig(root=tmp_path)
        assert config.support_path == tmp_path / ".zs"
        assert config.output_path == tmp_path / ".pub"
        assert config.ignore_path == tmp_path / ".zsignore"

    def test_custom_dirs(self, tmp_path: Path) -> None:
        config = ZsConfig(root=tmp_path, support_dir="_zs", output_dir="public")
        assert config.support_path == tmp_path / "_zs"
        assert config.output_path == tmp_path / "public"

    def test_default_extensions_known(self) -> None:
        assert set(ZsConfig().extensions) <= set(KNOWN_EXTENSIONS)

    def test_empty_delimiter_rejected(self) -> None:
        with pytest.raises(ConfigError, match="delimiters"):
            ZsConfig(opening_delim="")

    def test_empty_template_delimiter_rejected(self) -> None:
        with pytest.raises(ConfigError, match="template"):
            ZsConfig(template_close="")

    def test_interval_must_be_positive(self) -> None:
        with pytest.raises(ConfigError, match="interval"):
            ZsConfig(interval=0)

    def test_equal_delimiters_allowed(self) -> None:
        config = ZsConfig(opening_delim="%%", closing_delim="%%")
        assert config.opening_delim == config.closing_delim

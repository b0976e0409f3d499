"""Tests for zs.config_loader: file, environment and override layering."""

from __future__ import annotations

from pathlib import Path

import pytest

from zs._errors import ConfigError
from zs.config_loader import load_config


@pytest.fixture
def site(tmp_path: Path) -> Path:
    (tmp_path / ".zs").mkdir()
    return tmp_path


class TestConfigFile:
    def test_no_file_gives_defaults(self, site: Path) -> None:
        config = load_config(site, environ={})
        assert config.root == site.resolve()
        assert config.title == ""
        assert config.output_dir == ".pub"

    def test_yaml(self, site: Path) -> None:
        (site / ".zs" / "config.yaml").write_text(
            "title: My Site\nproduction: true\nopening-delim: '[['\nclosing_delim: ']]'\n"
        )
        config = load_config(site, environ={})
        assert config.title == "My Site"
        assert config.production is True
        assert config.opening_delim == "[["
        assert config.closing_delim == "]]"

    def test_yml(self, site: Path) -> None:
        (site / ".zs" / "config.yml").write_text("keywords: a, b\n")
        assert load_config(site, environ={}).keywords == "a, b"

    def test_toml(self, site: Path) -> None:
        (site / ".zs" / "config.toml").write_text(
            'description = "From toml"\ninterval = 2\nvars = ["a=1", "b=2"]\n'
        )
        config = load_config(site, environ={})
        assert config.description == "From toml"
        assert config.interval == 2.0
        assert config.vars == ("a=1", "b=2")

    def test_explicit_file(self, site: Path, tmp_path: Path) -> None:
        other = tmp_path / "custom.yaml"
        other.write_text("title: Custom\n")
        assert load_config(site, config_file=other, environ={}).title == "Custom"

    def test_unknown_keys_ignored(self, site: Path) -> None:
        (site / ".zs" / "config.yaml").write_text("title: T\nbogus: 1\nroot: /elsewhere\n")
        config = load_config(site, environ={})
        assert config.title == "T"
        assert config.root == site.resolve()

    def test_broken_file_falls_back(
        self, site: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        (site / ".zs" / "config.yaml").write_text("title: [unclosed\n")
        config = load_config(site, environ={})
        assert config.title == ""
        assert "Config error" in capsys.readouterr().err

    def test_non_mapping_falls_back(
        self, site: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        (site / ".zs" / "config.yaml").write_text("- a\n- b\n")
        assert load_config(site, environ={}).title == ""
        assert "not a mapping" in capsys.readouterr().err

    def test_custom_support_dir(self, tmp_path: Path) -> None:
        (tmp_path / "_support").mkdir()
        (tmp_path / "_support" / "config.yaml").write_text("title: Moved\n")
        config = load_config(tmp_path, environ={}, support_dir="_support")
        assert config.title == "Moved"


class TestEnvironment:
    def test_environment_over_file(self, site: Path) -> None:
        (site / ".zs" / "config.yaml").write_text("title: File\n")
        config = load_config(site, environ={"ZS_TITLE": "Env"})
        assert config.title == "Env"

    def test_boolean_strings(self, site: Path) -> None:
        assert load_config(site, environ={"ZS_PRODUCTION": "yes"}).production is True
        assert load_config(site, environ={"ZS_PRODUCTION": "0"}).production is False

    def test_comma_lists(self, site: Path) -> None:
        config = load_config(site, environ={"ZS_EXTENSIONS": "table, math"})
        assert config.extensions == ("table", "math")

    def test_bad_interval(self, site: Path) -> None:
        with pytest.raises(ConfigError, match="interval"):
            load_config(site, environ={"ZS_INTERVAL": "soon"})


class TestOverrides:
    def test_overrides_win(self, site: Path) -> None:
        (site / ".zs" / "config.yaml").write_text("title: File\n")
        config = load_config(site, environ={"ZS_TITLE": "Env"}, title="Flag")
        assert config.title == "Flag"

    def test_none_overrides_ignored(self, site: Path) -> None:
        config = load_config(site, environ={"ZS_TITLE": "Env"}, title=None)
        assert config.title == "Env"

    def test_list_override(self, site: Path) -> None:
        config = load_config(site, environ={}, vars=["a=1", "b=x,y"])
        assert config.vars == ("a=1", "b=x,y")

    def test_invalid_extension_dropped(
        self, site: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = load_config(site, environ={}, extensions=["table", "nonsense"])
        assert config.extensions == ("table",)
        assert "invalid extension: nonsense" in capsys.readouterr().err

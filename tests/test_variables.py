"""Tests for zs.content.variables: globals, front matter and defaults."""

from __future__ import annotations

from pathlib import Path

import pytest

from zs._errors import HeaderParseError, ReadError
from zs.config import ZsConfig
from zs.content.variables import (
    VariableResolver,
    build_globals,
    parse_header,
    split_header,
)
from zs.observability import BuildCollector, HeaderRejected


@pytest.fixture
def config(tmp_path: Path) -> ZsConfig:
    return ZsConfig(root=tmp_path)


@pytest.fixture
def resolver(config: ZsConfig) -> VariableResolver:
    return VariableResolver(config)


# ---------------------------------------------------------------------------
# build_globals
# ---------------------------------------------------------------------------


class TestBuildGlobals:
    def test_config_values(self, tmp_path: Path) -> None:
        config = ZsConfig(root=tmp_path, title="Site", description="Desc", keywords="a,b")
        result = build_globals(config, environ={})
        assert result == {"title": "Site", "description": "Desc", "keywords": "a,b"}

    def test_production_flag(self, tmp_path: Path) -> None:
        config = ZsConfig(root=tmp_path, production=True)
        assert build_globals(config, environ={})["production"] == "1"

    def test_production_absent_by_default(self, config: ZsConfig) -> None:
        assert "production" not in build_globals(config, environ={})

    def test_environment_prefix(self, config: ZsConfig) -> None:
        result = build_globals(config, environ={"ZS_AUTHOR": "Ann", "HOME": "/root"})
        assert result["author"] == "Ann"
        assert "home" not in result

    def test_environment_overrides_config(self, tmp_path: Path) -> None:
        config = ZsConfig(root=tmp_path, title="Config")
        assert build_globals(config, environ={"ZS_TITLE": "Env"})["title"] == "Env"

    def test_bare_prefix_ignored(self, config: ZsConfig) -> None:
        assert "" not in build_globals(config, environ={"ZS_": "x"})

    def test_vars_override_environment(self, tmp_path: Path) -> None:
        config = ZsConfig(root=tmp_path, vars=("Author=Bob",))
        result = build_globals(config, environ={"ZS_AUTHOR": "Ann"})
        assert result["author"] == "Bob"

    def test_vars_value_may_contain_equals(self, tmp_path: Path) -> None:
        config = ZsConfig(root=tmp_path, vars=("query=a=b",))
        assert build_globals(config, environ={})["query"] == "a=b"

    def test_malformed_vars_skipped(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = ZsConfig(root=tmp_path, vars=("novalue", "=empty"))
        result = build_globals(config, environ={})
        assert "novalue" not in result
        assert "Ignoring malformed variable" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Header splitting and parsing
# ---------------------------------------------------------------------------


class TestSplitHeader:
    def test_no_delimiter(self) -> None:
        assert split_header("just body\n") == (None, "just body\n")

    def test_first_delimiter_wins(self) -> None:
        header, body = split_header("a: 1\n---\nbody\n---\nmore")
        assert header == "a: 1"
        assert body == "body\n---\nmore"

    def test_delimiter_at_start_needs_newline(self) -> None:
        # A leading '---' line has no preceding newline and is not a delimiter.
        assert split_header("---\nbody")[0] is None


class TestParseHeader:
    def test_keys_lowercased(self) -> None:
        assert parse_header("a.md", "Title: Foo") == {"title": "Foo"}

    def test_scalars_stringified(self) -> None:
        result = parse_header("a.md", "n: 3\nflag: true\nnothing:\n")
        assert result == {"n": "3", "flag": "true", "nothing": ""}

    def test_empty_header(self) -> None:
        assert parse_header("a.md", "") == {}

    def test_not_a_mapping(self) -> None:
        with pytest.raises(HeaderParseError, match="not a mapping"):
            parse_header("a.md", "- one\n- two")

    def test_nested_value_rejected(self) -> None:
        with pytest.raises(HeaderParseError, match="tags"):
            parse_header("a.md", "tags: [a, b]")

    def test_yaml_syntax_error(self) -> None:
        with pytest.raises(HeaderParseError, match="a.md"):
            parse_header("a.md", "title: [unclosed")


# ---------------------------------------------------------------------------
# VariableResolver
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_title_from_path(self, resolver: VariableResolver) -> None:
        assert resolver.defaults("my_first-post.md")["title"] == "MY FIRST POST.MD"

    def test_url_and_output(self, resolver: VariableResolver) -> None:
        result = resolver.defaults("blog/post.md")
        assert result["file"] == "blog/post.md"
        assert result["url"] == "blog/post.html"
        assert result["output"] == ".pub/blog/post.html"

    def test_description_empty(self, resolver: VariableResolver) -> None:
        assert resolver.defaults("a.md")["description"] == ""


class TestResolve:
    def test_no_header_returns_whole_body(
        self, config: ZsConfig, resolver: VariableResolver,
    ) -> None:
        text = "# Heading\n\nNo front matter here.\n"
        (config.root / "page.md").write_text(text)
        globals_ = {"title": "Site", "author": "Ann"}

        vars, body = resolver.resolve("page.md", globals_)

        assert body == text
        expected = resolver.defaults("page.md")
        expected.update(globals_)
        expected["layout"] = "layout.html"
        assert vars == expected

    def test_front_matter_title_wins(
        self, config: ZsConfig, resolver: VariableResolver,
    ) -> None:
        (config.root / "page.md").write_text("title: Foo\n---\nbody")
        vars, body = resolver.resolve("page.md", {"title": "Global"})
        assert vars["title"] == "Foo"
        assert body == "body"

    def test_layout_always_present(
        self, config: ZsConfig, resolver: VariableResolver,
    ) -> None:
        (config.root / "page.md").write_text("x")
        vars, _ = resolver.resolve("page.md", {})
        assert vars["layout"] == "layout.html"

    def test_layout_from_front_matter(
        self, config: ZsConfig, resolver: VariableResolver,
    ) -> None:
        (config.root / "page.md").write_text("layout: post.html\n---\nx")
        vars, _ = resolver.resolve("page.md", {})
        assert vars["layout"] == "post.html"

    def test_configured_default_layout(self, tmp_path: Path) -> None:
        config = ZsConfig(root=tmp_path, default_layout="base.html")
        (tmp_path / "page.md").write_text("x")
        vars, _ = VariableResolver(config).resolve("page.md", {})
        assert vars["layout"] == "base.html"

    def test_leading_dot_slash_stripped_from_url(
        self, config: ZsConfig, resolver: VariableResolver,
    ) -> None:
        (config.root / "page.md").write_text("url: ./custom.html\n---\nx")
        vars, _ = resolver.resolve("page.md", {})
        assert vars["url"] == "custom.html"

    def test_malformed_header_falls_back(
        self,
        config: ZsConfig,
        resolver: VariableResolver,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        text = "title: [broken\n---\nthe body"
        (config.root / "page.md").write_text(text)

        vars, body = resolver.resolve("page.md", {"title": "Global"})

        assert vars["title"] == "Global"
        assert body == text
        assert "Header error" in capsys.readouterr().err

    def test_horizontal_rule_keeps_first_section(
        self, config: ZsConfig, resolver: VariableResolver,
    ) -> None:
        text = "Intro paragraph that matters.\n---\nSecond section.\n"
        (config.root / "page.md").write_text(text)

        _, body = resolver.resolve("page.md", {})

        assert body == text

    def test_malformed_header_recorded(self, config: ZsConfig) -> None:
        collector = BuildCollector()
        resolver = VariableResolver(config, collector)
        (config.root / "page.md").write_text("- a list\n---\nbody")

        resolver.resolve("page.md", {})

        events = collector.log.query(event_type=HeaderRejected)
        assert len(events) == 1
        assert events[0].path == "page.md"

    def test_absolute_path_inside_root(
        self, config: ZsConfig, resolver: VariableResolver,
    ) -> None:
        (config.root / "docs").mkdir()
        (config.root / "docs" / "a.md").write_text("x")
        vars, _ = resolver.resolve(config.root / "docs" / "a.md", {})
        assert vars["file"] == "docs/a.md"

    def test_missing_file(self, resolver: VariableResolver) -> None:
        with pytest.raises(ReadError, match="missing.md"):
            resolver.resolve("missing.md", {})

    def test_invalid_utf8_replaced(
        self, config: ZsConfig, resolver: VariableResolver,
    ) -> None:
        (config.root / "page.md").write_bytes(b"caf\xe9")
        _, body = resolver.resolve("page.md", {})
        assert body == "caf�"

"""Shared test fixtures for zs."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from zs.config import ZsConfig

LAYOUT = "<html><title><%= title %></title><body><%= content %></body></html>"


@pytest.fixture(autouse=True)
def _clean_zs_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ``ZS_*`` variables from the outer shell out of the globals."""
    for key in list(os.environ):
        if key.startswith("ZS_"):
            monkeypatch.delenv(key)


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a minimal site structure for testing.

    Returns the site root with a ``.zs/`` support directory holding a
    layout, one markdown page with front matter, one without, and an asset.
    """
    support = tmp_path / ".zs"
    support.mkdir()
    (support / "layout.html").write_text(LAYOUT)

    (tmp_path / "index.md").write_text("title: Home\n---\n# Welcome\n")
    (tmp_path / "about.md").write_text("About us.\n")

    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "style.css").write_text("body { margin: 0; }\n")

    return tmp_path


@pytest.fixture
def site_config(tmp_site: Path) -> ZsConfig:
    """A ZsConfig rooted at ``tmp_site``."""
    return ZsConfig(root=tmp_site, executable="zs")


def make_plugin(directory: Path, name: str, body: str) -> Path:
    """Write an executable POSIX shell script named ``name``."""
    directory.mkdir(parents=True, exist_ok=True)
    script = directory / name
    script.write_text(f"#!/bin/sh\n{body}\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


def set_mtime(path: Path, mtime: float) -> None:
    """Set both access and modification time of ``path``."""
    os.utime(path, (mtime, mtime))

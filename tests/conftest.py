"""Shared test fixtures."""

from pathlib import Path

import pytest
from guidenav.config import (
    Config,
    ContentConfig,
    LanguagesConfig,
    LiveReloadConfig,
    PreferencesConfig,
    ServerConfig,
)
from guidenav.core.source import parse_toml_toc
from guidenav.core.tree import NavigationTree

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SAMPLE_TOC = """
title = "Dev Guide"

[[item]]
url = "${toroot}a/index.html"
labels = { en = "Components", zh = "组件" }

  [[item.item]]
  url = "${toroot}a/x"
  labels = { en = "Fragments", zh = "片段" }

  [[item.item]]
  url = "${toroot}a/y"
  title = "Loaders"

[[item]]
url = "${toroot}b/index.html"
labels = { en = "User Interface", zh = "用户界面" }

  [[item.item]]
  url = "${toroot}b/layout.html"
  labels = { en = "Layouts", zh = "布局" }

    [[item.item.item]]
    url = "${toroot}b/layout/linear.html"
    labels = { en = "Linear Layout", zh = "线性布局" }

  [[item.item]]
  labels = { en = "Menus" }

    [[item.item.item]]
    url = "${toroot}b/menus/context.html"
    title = "Context Menus"

[[item]]
url = "${toroot}c.html"
title = "Permissions"
"""


@pytest.fixture
def sample_tree() -> NavigationTree:
    """Parsed sample TOC with toroot "/"."""
    return parse_toml_toc(SAMPLE_TOC)


@pytest.fixture
def toc_file(tmp_path: Path) -> Path:
    """Write the sample TOC to disk."""
    path = tmp_path / "toc.toml"
    path.write_text(SAMPLE_TOC, encoding="utf-8")
    return path


@pytest.fixture
def test_config(tmp_path: Path, toc_file: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Live reload is disabled so no file watcher starts.
    """
    return Config(
        server=ServerConfig(),
        content=ContentConfig(toc_file=toc_file),
        languages=LanguagesConfig(default="en", supported=["en", "zh", "ja"]),
        preferences=PreferencesConfig(state_dir=tmp_path / ".guidenav"),
        live_reload=LiveReloadConfig(enabled=False),
    )

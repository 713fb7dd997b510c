# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from diagtree.config import DiagtreeConfig, load_config
from diagtree.errors import ConfigError
from diagtree.severity import Severity


def test_defaults_without_files(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config == DiagtreeConfig()
    assert config.title == "DIAGNOSTICS"
    assert config.icons.opened == "▾"
    assert "init.lua" in config.index_filenames
    assert config.signs == {}


def test_standalone_file_wins_over_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[tool.diagtree]\ntitle = "FROM PYPROJECT"\n', encoding="utf-8")
    (tmp_path / "diagtree.toml").write_text(
        'title = "PROBLEMS"\n\n[icons]\nopened = "-"\nclosed = "+"\n\n[signs.error]\ntext = "✘ "\nstyle = "red"\n'
        '\n[signs.2]\ntext = "! "\n',
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.title == "PROBLEMS"
    assert (config.icons.opened, config.icons.closed) == ("-", "+")
    assert config.signs[Severity.ERROR].text == "✘ "
    assert config.signs[Severity.ERROR].style == "red"
    assert config.signs[Severity.WARN].style is None


def test_pyproject_section(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "demo"\n\n[tool.diagtree]\ndeferred_refresh = true\nworking_root = "src"\n',
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.deferred_refresh is True
    assert config.working_root == tmp_path / "src"


def test_pyproject_without_section_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")
    assert load_config(tmp_path) == DiagtreeConfig()


def test_overrides_apply_and_ignore_none(tmp_path: Path) -> None:
    (tmp_path / "diagtree.toml").write_text('title = "PROBLEMS"\npoll_interval = 2.0\n', encoding="utf-8")

    config = load_config(tmp_path, {"title": None, "poll_interval": 0.25})

    assert config.title == "PROBLEMS"
    assert config.poll_interval == 0.25


def test_projector_follows_configuration() -> None:
    projector = DiagtreeConfig(title="", index_filenames=("mod.rs",)).projector()
    assert projector.title == ""
    assert projector.index_filenames == ("mod.rs",)


@pytest.mark.parametrize(
    "content",
    [
        "title = ",
        'unknown_option = "x"\n',
        "poll_interval = 0\n",
        '[signs.fatal]\ntext = "F"\n',
    ],
)
def test_invalid_configuration_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / "diagtree.toml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)

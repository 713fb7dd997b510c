# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the terminal host adapters."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from rich.console import Console
from rich.text import Text

from diagtree.errors import AdapterUnavailable
from diagtree.models import SignDefinition
from diagtree.session import ViewSession
from diagtree.severity import Severity
from diagtree.terminal import BufferRegistry, ConsoleSurface, JsonFileSource, PanelHost, TerminalHost
from tests.helpers.fakes import FakeSource, FakeSurface, host_for


def _write(feed: Path, payload: object) -> None:
    feed.write_text(json.dumps(payload), encoding="utf-8")


def test_registry_never_reuses_numbers(tmp_path: Path) -> None:
    registry = BufferRegistry()

    first = registry.number_for(tmp_path / "a.lua")
    second = registry.number_for(tmp_path / "b.lua")

    assert (first, second) == (1, 2)
    assert registry.number_for(tmp_path / "a.lua") == 1
    assert registry.path_for(2) == str(tmp_path / "b.lua")
    assert registry.path_for(7) == ""


def test_json_source_reads_records(tmp_path: Path, feed: Path) -> None:
    _write(
        feed,
        {
            "diagnostics": [
                {"file": "a.lua", "line": 3, "column": 1, "severity": "warning", "message": "unused"},
                {"filename": "b.lua", "lnum": 0, "col": 0, "severity": 1, "message": "boom", "code": 42},
                {"path": "a.lua", "lnum": 9, "severity": "hint", "message": "tip"},
            ]
        },
    )
    registry = BufferRegistry()

    records = JsonFileSource(feed, registry, base_dir=tmp_path).get_all()

    assert [(record.bufnr, record.lnum, record.col) for record in records] == [(1, 3, 1), (2, 0, 0), (1, 9, 0)]
    assert records[1].code == 42
    assert registry.path_for(1) == str((tmp_path / "a.lua").resolve())


def test_json_source_skips_unusable_records(tmp_path: Path, feed: Path) -> None:
    _write(
        feed,
        [
            "not an object",
            {"line": 1, "message": "no file"},
            {"file": "a.lua", "line": -1, "message": "negative"},
            {"file": "a.lua", "line": 2, "severity": 99, "message": "kept for the normaliser"},
        ],
    )

    records = JsonFileSource(feed, BufferRegistry(), base_dir=tmp_path).get_all()

    assert [record.message for record in records] == ["kept for the normaliser"]


@pytest.mark.parametrize("content", ["{not json", '{"diagnostics": 3}', '"text"'])
def test_json_source_unreadable_documents(feed: Path, content: str) -> None:
    feed.write_text(content, encoding="utf-8")

    with pytest.raises(AdapterUnavailable):
        JsonFileSource(feed, BufferRegistry()).get_all()


def test_json_source_missing_file(feed: Path) -> None:
    with pytest.raises(AdapterUnavailable, match="cannot read"):
        JsonFileSource(feed, BufferRegistry()).get_all()


def test_poll_notifies_subscribers_on_change(feed: Path) -> None:
    _write(feed, [])
    source = JsonFileSource(feed, BufferRegistry())
    calls: list[int] = []

    def listener() -> None:
        calls.append(1)

    source.subscribe(listener)
    assert source.poll() is False

    _write(feed, [{"file": "a.lua", "line": 0, "severity": 1, "message": "new"}])
    assert source.poll() is True
    assert source.poll() is False

    source.unsubscribe(listener)
    source.unsubscribe(listener)
    feed.unlink()
    assert source.poll() is True
    assert calls == [1]


def test_terminal_host_services(tmp_path: Path) -> None:
    registry = BufferRegistry()
    inside = registry.number_for(tmp_path / "src" / "a.py")
    sign = SignDefinition(text="✘")
    host = TerminalHost(registry, working_root=tmp_path, signs={Severity.ERROR: sign}, use_color=False)

    assert host.make_relative(host.buffer_name(inside)) == "src/a.py"
    assert host.make_relative("/definitely/elsewhere.py") == "/definitely/elsewhere.py"
    assert host.lookup_severity_glyph(Severity.ERROR) is sign
    assert host.lookup_severity_glyph(Severity.HINT) is None


def test_console_surface_draws_until_released() -> None:
    console = Console(record=True, width=80, color_system=None)
    surface = ConsoleSurface(console)

    surface.draw([Text("first"), Text("second")])
    surface.release()
    surface.draw([Text("ignored")])

    assert console.export_text() == "first\nsecond\n"
    assert not surface.is_valid()


def test_panel_host_keeps_a_single_panel(source: FakeSource) -> None:
    created: list[ViewSession] = []

    def factory() -> ViewSession:
        session = ViewSession(source, host_for(), FakeSurface)
        created.append(session)
        return session

    panels = PanelHost(factory)

    first = panels.open()
    assert panels.open() is first
    assert len(created) == 1

    panels.close()
    assert not first.is_open
    assert panels.session is None
    assert panels.open() is not first
    assert len(created) == 2

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers.fakes import FakeSource, FakeSurface


@pytest.fixture
def source() -> FakeSource:
    """Return an empty in-memory diagnostic source."""
    return FakeSource()


@pytest.fixture
def surface() -> FakeSurface:
    """Return a display surface recording every draw."""
    return FakeSurface()


@pytest.fixture
def feed(tmp_path: Path) -> Path:
    """Return the path of a JSON feed inside ``tmp_path`` (not yet written)."""
    return tmp_path / "diagnostics.json"

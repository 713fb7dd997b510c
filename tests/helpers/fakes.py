# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-memory collaborators for exercising the engine without a real host."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from rich.text import Text

from diagtree.errors import MalformedDiagnostic
from diagtree.models import NormalizedDiagnostic, RawDiagnostic, SignDefinition
from diagtree.severity import Severity

WORK_ROOT = "/work"


def raw(bufnr: int, lnum: int, col: int = 0, severity: Any = 1, message: str = "message") -> RawDiagnostic:
    return RawDiagnostic(bufnr=bufnr, lnum=lnum, col=col, severity=severity, message=message)


@dataclass
class FakeSource:
    records: list[RawDiagnostic] = field(default_factory=list)
    failure: Exception | None = None
    listeners: list[Callable[[], None]] = field(default_factory=list)
    calls: int = 0

    def get_all(self) -> Sequence[RawDiagnostic]:
        self.calls += 1
        if self.failure is not None:
            raise self.failure
        return list(self.records)

    def subscribe(self, listener: Callable[[], None]) -> None:
        self.listeners.append(listener)

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def emit(self) -> None:
        for listener in list(self.listeners):
            listener()


@dataclass
class FakeHost:
    buffers: dict[int, str] = field(default_factory=dict)
    glyphs: dict[Severity, SignDefinition] = field(default_factory=dict)
    malformed: list[MalformedDiagnostic] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    jumps: list[NormalizedDiagnostic] = field(default_factory=list)
    path_lookups: Counter[int] = field(default_factory=Counter)
    glyph_lookups: Counter[Severity] = field(default_factory=Counter)

    def buffer_name(self, bufnr: int) -> str:
        self.path_lookups[bufnr] += 1
        return self.buffers.get(bufnr, "")

    def make_relative(self, path: str) -> str:
        prefix = f"{WORK_ROOT}/"
        return path[len(prefix) :] if path.startswith(prefix) else path

    def lookup_severity_glyph(self, severity: Severity) -> SignDefinition | None:
        self.glyph_lookups[severity] += 1
        return self.glyphs.get(severity)

    def report_malformed(self, error: MalformedDiagnostic) -> None:
        self.malformed.append(error)

    def notify_error(self, message: str) -> None:
        self.errors.append(message)

    def jump_to(self, diagnostic: NormalizedDiagnostic) -> None:
        self.jumps.append(diagnostic)


@dataclass
class FakeSurface:
    valid: bool = True
    draws: list[list[str]] = field(default_factory=list)
    releases: int = 0

    def is_valid(self) -> bool:
        return self.valid

    def draw(self, lines: Sequence[Text]) -> None:
        self.draws.append([line.plain for line in lines])

    def release(self) -> None:
        self.releases += 1
        self.valid = False

    @property
    def last(self) -> list[str]:
        return self.draws[-1]


def host_for(*names: str) -> FakeHost:
    """Return a host whose buffers ``1..n`` map to ``/work/<name>``."""

    return FakeHost(buffers={index: f"{WORK_ROOT}/{name}" for index, name in enumerate(names, start=1)})

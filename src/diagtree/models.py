# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the diagtree package."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .severity import Severity


class RawDiagnostic(BaseModel):
    """Capture a diagnostic record exactly as the source reports it.

    ``severity`` is left untyped so that malformed values reach the
    normaliser, which rejects them record by record.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bufnr: int = Field(ge=0)
    lnum: int = Field(ge=0, validation_alias=AliasChoices("lnum", "line"))
    col: int = Field(default=0, ge=0, validation_alias=AliasChoices("col", "column"))
    severity: Any = None
    message: str = ""
    source: str | None = None
    code: str | int | None = None


class SignDefinition(BaseModel):
    """Glyph and style registered by the host for one severity."""

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    style: str | None = None


class NormalizedDiagnostic(BaseModel):
    """Canonical, immutable diagnostic produced by the normaliser.

    Attributes:
        group_key: Identity of the owning file, derived from the buffer number.
        node_key: Identity within the group, derived from ``(line, column)``.
        bufnr: Buffer number the diagnostic was reported against.
        severity: Coerced severity.
        message: Message text.
        line: Zero-based line.
        column: Zero-based column.
        path: File path as reported by the host.
        display_path: ``path`` relative to the working root when possible.
        sign_glyph: Glyph shown in front of the message.
        sign_style: Style name applied to ``sign_glyph``.
    """

    model_config = ConfigDict(frozen=True)

    group_key: str
    node_key: str
    bufnr: int
    severity: Severity
    message: str
    line: int
    column: int
    path: str
    display_path: str
    sign_glyph: str
    sign_style: str
    source: str | None = None
    code: str | None = None

    @property
    def jump_target(self) -> tuple[int, int]:
        """Return the ``(row, column)`` cursor position, rows being one-based."""

        return self.line + 1, self.column


@dataclass(frozen=True, slots=True)
class KeyCollision:
    """Record two diagnostics of one batch that resolved to the same identity."""

    group_key: str
    node_key: str
    replaced: NormalizedDiagnostic
    replacement: NormalizedDiagnostic


__all__ = ["KeyCollision", "NormalizedDiagnostic", "RawDiagnostic", "SignDefinition"]

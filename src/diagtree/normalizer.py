# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic normalisation: identity, signs and display paths."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Final

from .errors import MalformedDiagnostic
from .interfaces import HostServices
from .models import KeyCollision, NormalizedDiagnostic, RawDiagnostic
from .severity import Severity, coerce_severity, default_sign, severity_level

LOGGER = logging.getLogger(__name__)

UNNAMED_BUFFER: Final[str] = "[No Name]"


@dataclass(slots=True)
class NormalizationResult:
    """Outcome of one normalisation batch.

    Attributes:
        diagnostics: Normalised diagnostics, one per distinct identity.
        rejected: Errors for raw records excluded from ``diagnostics``.
        collisions: Identity collisions resolved by keeping the later record.
    """

    diagnostics: list[NormalizedDiagnostic] = field(default_factory=list)
    rejected: list[MalformedDiagnostic] = field(default_factory=list)
    collisions: list[KeyCollision] = field(default_factory=list)


def group_key_for(bufnr: int) -> str:
    """Return the group identity derived from a buffer number."""

    return f"bufnr:{bufnr}"


def node_key_for(line: int, column: int) -> str:
    """Return the per-group node identity derived from a position."""

    return f"pos:{line}_{column}"


def unnamed_buffer_label(bufnr: int) -> str:
    """Return the display path of a buffer without a file name, unique per buffer."""

    return f"{UNNAMED_BUFFER} {bufnr}"


class _BatchLookups:
    """Cache host lookups for the lifetime of a single batch."""

    def __init__(self, host: HostServices) -> None:
        """Initialise empty caches bound to ``host``.

        Args:
            host: Host services answering path and glyph lookups.
        """

        self._host = host
        self._paths: dict[int, tuple[str, str]] = {}
        self._signs: dict[Severity, tuple[str, str]] = {}

    def paths(self, bufnr: int) -> tuple[str, str]:
        """Return the file path and display path of ``bufnr``.

        Args:
            bufnr: Buffer number reported by the source.

        Returns:
            tuple[str, str]: Host path and the path shown for the group. Unnamed
            buffers get a label unique to their number.
        """

        if bufnr not in self._paths:
            path = self._host.buffer_name(bufnr)
            if not path:
                label = unnamed_buffer_label(bufnr)
                self._paths[bufnr] = (label, label)
                return self._paths[bufnr]
            try:
                display = self._host.make_relative(path) or path
            except (OSError, ValueError) as exc:
                LOGGER.debug("cannot relativise %s: %s", path, exc)
                display = path
            self._paths[bufnr] = (path, display)
        return self._paths[bufnr]

    def sign(self, severity: Severity) -> tuple[str, str]:
        """Return the glyph and style for ``severity``, filling gaps with defaults.

        Args:
            severity: Coerced severity.

        Returns:
            tuple[str, str]: Glyph text and style name.
        """

        if severity not in self._signs:
            registered = self._host.lookup_severity_glyph(severity)
            glyph = default_sign(severity)
            style = severity_level(severity).default_style
            if registered is not None:
                glyph = registered.text or glyph
                style = registered.style or style
            self._signs[severity] = (glyph, style)
        return self._signs[severity]


def normalize(raw_diagnostics: Sequence[RawDiagnostic], host: HostServices) -> NormalizationResult:
    """Convert raw diagnostics into their canonical representation.

    Records with a missing or unknown severity are rejected individually and
    reported to ``host``. When two records resolve to the same identity the
    later one wins while the identity keeps its first position.

    Args:
        raw_diagnostics: Unordered records returned by the source.
        host: Host services used for path and glyph lookups.

    Returns:
        NormalizationResult: Normalised diagnostics plus rejections and collisions.
    """

    lookups = _BatchLookups(host)
    result = NormalizationResult()
    by_identity: dict[tuple[str, str], NormalizedDiagnostic] = {}

    for raw in raw_diagnostics:
        try:
            severity = coerce_severity(raw.severity, record=raw)
        except MalformedDiagnostic as exc:
            LOGGER.warning("rejected diagnostic in buffer %s: %s", raw.bufnr, exc.reason)
            result.rejected.append(exc)
            host.report_malformed(exc)
            continue

        path, display_path = lookups.paths(raw.bufnr)
        glyph, style = lookups.sign(severity)
        diagnostic = NormalizedDiagnostic(
            group_key=group_key_for(raw.bufnr),
            node_key=node_key_for(raw.lnum, raw.col),
            bufnr=raw.bufnr,
            severity=severity,
            message=raw.message,
            line=raw.lnum,
            column=raw.col,
            path=path,
            display_path=display_path,
            sign_glyph=glyph,
            sign_style=style,
            source=raw.source,
            code=None if raw.code is None else str(raw.code),
        )

        identity = (diagnostic.group_key, diagnostic.node_key)
        previous = by_identity.get(identity)
        if previous is not None:
            LOGGER.debug("identity collision at %s %s", *identity)
            result.collisions.append(KeyCollision(*identity, replaced=previous, replacement=diagnostic))
        by_identity[identity] = diagnostic

    result.diagnostics = list(by_identity.values())
    return result


__all__ = ["NormalizationResult", "UNNAMED_BUFFER", "group_key_for", "node_key_for", "normalize", "unnamed_buffer_label"]

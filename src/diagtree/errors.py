# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared across the diagtree package."""

from __future__ import annotations

from typing import Any


class DiagtreeError(Exception):
    """Base class for errors raised by diagtree."""


class MalformedDiagnostic(DiagtreeError):
    """Raised when a raw diagnostic record cannot be normalised.

    Attributes:
        record: Offending raw record, kept for host-side reporting.
        reason: Short human-readable explanation.
    """

    def __init__(self, record: Any, reason: str) -> None:
        super().__init__(reason)
        self.record = record
        self.reason = reason


class AdapterUnavailable(DiagtreeError):
    """Raised when the diagnostic source fails to return data."""


class ConfigError(DiagtreeError):
    """Raised when configuration input is invalid."""


class SessionStateError(DiagtreeError):
    """Raised when a view operation requires an open session."""


__all__ = [
    "AdapterUnavailable",
    "ConfigError",
    "DiagtreeError",
    "MalformedDiagnostic",
    "SessionStateError",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Final

from .errors import MalformedDiagnostic


class Severity(IntEnum):
    """Diagnostic severities ordered from most to least severe."""

    ERROR = 1
    WARN = 2
    INFO = 3
    HINT = 4


@dataclass(frozen=True, slots=True)
class SeverityLevel:
    """Presentation defaults attached to a :class:`Severity`.

    Attributes:
        name: Display name of the severity (``Error``, ``Warn`` ...).
        default_style: Style name used when the host registers none.
    """

    name: str
    default_style: str


SEVERITY_LEVELS: Final[dict[Severity, SeverityLevel]] = {
    Severity.ERROR: SeverityLevel("Error", "diagnostic.sign.error"),
    Severity.WARN: SeverityLevel("Warn", "diagnostic.sign.warn"),
    Severity.INFO: SeverityLevel("Info", "diagnostic.sign.info"),
    Severity.HINT: SeverityLevel("Hint", "diagnostic.sign.hint"),
}

_SEVERITY_ALIASES: Final[dict[str, Severity]] = {
    "error": Severity.ERROR,
    "err": Severity.ERROR,
    "e": Severity.ERROR,
    "warn": Severity.WARN,
    "warning": Severity.WARN,
    "w": Severity.WARN,
    "info": Severity.INFO,
    "information": Severity.INFO,
    "i": Severity.INFO,
    "hint": Severity.HINT,
    "h": Severity.HINT,
}


def coerce_severity(value: Any, *, record: Any = None) -> Severity:
    """Return the :class:`Severity` matching ``value``.

    Args:
        value: Severity as reported by the source: an enum member, an integer in
            ``1..4`` or a severity name such as ``"warning"``.
        record: Raw record the value belongs to, attached to the raised error.

    Returns:
        Severity: Coerced severity.

    Raises:
        MalformedDiagnostic: If ``value`` is missing or outside the known range.
    """

    subject = value if record is None else record
    if isinstance(value, Severity):
        return value
    if value is None:
        raise MalformedDiagnostic(subject, "missing severity")
    if isinstance(value, bool):
        raise MalformedDiagnostic(subject, f"invalid severity {value!r}")
    if isinstance(value, int):
        try:
            return Severity(value)
        except ValueError:
            raise MalformedDiagnostic(subject, f"severity {value} is out of range") from None
    if isinstance(value, str):
        token = value.strip().lower()
        if token.isdigit():
            return coerce_severity(int(token), record=subject)
        if token in _SEVERITY_ALIASES:
            return _SEVERITY_ALIASES[token]
        raise MalformedDiagnostic(subject, f"unknown severity {value!r}")
    raise MalformedDiagnostic(subject, f"invalid severity {value!r}")


def severity_level(severity: Severity) -> SeverityLevel:
    """Return the presentation defaults for ``severity``."""

    return SEVERITY_LEVELS[severity]


def default_sign(severity: Severity) -> str:
    """Return the fallback glyph, the severity's first letter followed by ``": "``."""

    return f"{SEVERITY_LEVELS[severity].name[0]}: "


__all__ = [
    "SEVERITY_LEVELS",
    "Severity",
    "SeverityLevel",
    "coerce_severity",
    "default_sign",
    "severity_level",
]

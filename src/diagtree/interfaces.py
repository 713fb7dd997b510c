# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Protocols describing the collaborators the engine is wired to."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from rich.text import Text

from .errors import MalformedDiagnostic
from .models import NormalizedDiagnostic, RawDiagnostic, SignDefinition
from .severity import Severity

ChangeListener = Callable[[], None]


@runtime_checkable
class DiagnosticSource(Protocol):
    """Supply raw diagnostics on demand and signal when they change."""

    @abstractmethod
    def get_all(self) -> Sequence[RawDiagnostic]:
        """Return every diagnostic currently known to the source.

        Returns:
            Sequence[RawDiagnostic]: Unordered raw diagnostics.

        Raises:
            AdapterUnavailable: If the source cannot produce data.
        """
        raise NotImplementedError

    @abstractmethod
    def subscribe(self, listener: ChangeListener) -> None:
        """Register ``listener`` to be called whenever the diagnostic set changes.

        Args:
            listener: Zero-argument callback.
        """
        raise NotImplementedError

    @abstractmethod
    def unsubscribe(self, listener: ChangeListener) -> None:
        """Remove a listener previously passed to :meth:`subscribe`.

        Args:
            listener: Callback to remove. Unknown listeners are ignored.
        """
        raise NotImplementedError


@runtime_checkable
class HostServices(Protocol):
    """Host lookups and side effects consumed by the engine."""

    @abstractmethod
    def buffer_name(self, bufnr: int) -> str:
        """Return the absolute file path backing ``bufnr``."""
        raise NotImplementedError

    @abstractmethod
    def make_relative(self, path: str) -> str:
        """Return ``path`` relative to the working root, or ``path`` unchanged."""
        raise NotImplementedError

    @abstractmethod
    def lookup_severity_glyph(self, severity: Severity) -> SignDefinition | None:
        """Return the glyph registered for ``severity`` or ``None``."""
        raise NotImplementedError

    @abstractmethod
    def report_malformed(self, error: MalformedDiagnostic) -> None:
        """Surface a rejected raw record to the user."""
        raise NotImplementedError

    @abstractmethod
    def notify_error(self, message: str) -> None:
        """Surface a failed operation to the user."""
        raise NotImplementedError

    @abstractmethod
    def jump_to(self, diagnostic: NormalizedDiagnostic) -> None:
        """Move the cursor of the originating window to ``diagnostic``."""
        raise NotImplementedError


@runtime_checkable
class DisplaySurface(Protocol):
    """Window or buffer the panel is drawn into."""

    @abstractmethod
    def is_valid(self) -> bool:
        """Return ``True`` while the surface can still be drawn into."""
        raise NotImplementedError

    @abstractmethod
    def draw(self, lines: Sequence[Text]) -> None:
        """Replace the surface content with ``lines``."""
        raise NotImplementedError

    @abstractmethod
    def release(self) -> None:
        """Free the surface. Calling it twice must be harmless."""
        raise NotImplementedError


SurfaceFactory = Callable[[], DisplaySurface]

__all__ = [
    "ChangeListener",
    "DiagnosticSource",
    "DisplaySurface",
    "HostServices",
    "SurfaceFactory",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Terminal host: JSON diagnostic feed, console surface and host services."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError
from rich.console import Console
from rich.text import Text

from .errors import AdapterUnavailable, MalformedDiagnostic
from .interfaces import ChangeListener
from .logging import fail, info, warn
from .models import NormalizedDiagnostic, RawDiagnostic, SignDefinition
from .paths import absolute_path, make_relative
from .session import ViewSession
from .severity import Severity

LOGGER = logging.getLogger(__name__)

DIAGNOSTICS_KEY: Final[str] = "diagnostics"
FILE_KEYS: Final[tuple[str, ...]] = ("file", "filename", "path")

StatSignature = tuple[str, int, int]


class BufferRegistry:
    """Assign buffer numbers to files, never reusing a number in one process."""

    def __init__(self) -> None:
        """Initialise an empty registry."""

        self._numbers: dict[Path, int] = {}
        self._paths: dict[int, Path] = {}

    def number_for(self, path: Path) -> int:
        """Return the buffer number of ``path``, registering it on first use."""

        if path not in self._numbers:
            number = len(self._numbers) + 1
            self._numbers[path] = number
            self._paths[number] = path
        return self._numbers[path]

    def path_for(self, bufnr: int) -> str:
        """Return the path registered under ``bufnr`` or an empty string."""

        path = self._paths.get(bufnr)
        return "" if path is None else str(path)


def _stat_signature(path: Path) -> StatSignature:
    """Return a stat tuple describing ``path`` existence, mtime and size.

    Args:
        path: Watched file.

    Returns:
        StatSignature: ``("ok", mtime_ns, size)``, or a ``missing``/``error`` marker.
    """

    try:
        st = path.stat()
    except FileNotFoundError:
        return ("missing", 0, 0)
    except OSError:
        return ("error", 0, 0)
    return ("ok", st.st_mtime_ns, st.st_size)


class JsonFileSource:
    """Read diagnostics from a JSON document and signal when it changes.

    The document is either a list of records or an object holding the list
    under ``"diagnostics"``. Each record names its file under ``file``
    (``filename`` and ``path`` are accepted too); relative names are anchored
    at ``base_dir``. Changes are detected by :meth:`poll`.
    """

    def __init__(self, path: Path, registry: BufferRegistry, *, base_dir: Path | None = None) -> None:
        """Initialise the source.

        Args:
            path: JSON document to read.
            registry: Registry assigning buffer numbers to the files named in records.
            base_dir: Directory relative file names are anchored at. Defaults to the
                current directory.
        """

        self._path = path
        self._registry = registry
        self._base_dir = base_dir
        self._listeners: list[ChangeListener] = []
        self._signature = _stat_signature(path)

    @property
    def path(self) -> Path:
        """Return the JSON document being read."""

        return self._path

    def get_all(self) -> list[RawDiagnostic]:
        """Return the records of the document.

        Records that do not fit :class:`RawDiagnostic` are skipped with a
        warning; severity problems are left to the normaliser.

        Raises:
            AdapterUnavailable: If the document cannot be read or decoded.
        """

        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise AdapterUnavailable(f"cannot read {self._path}: {exc.strerror or exc}") from exc
        except json.JSONDecodeError as exc:
            raise AdapterUnavailable(f"invalid JSON in {self._path}: {exc}") from exc
        return [raw for raw in (self._coerce(record) for record in self._records(payload)) if raw is not None]

    def _records(self, payload: Any) -> Sequence[Any]:
        """Return the record list held by ``payload``.

        Args:
            payload: Decoded JSON document.

        Returns:
            Sequence[Any]: Records, not yet validated.

        Raises:
            AdapterUnavailable: If the document holds no list of records.
        """

        if isinstance(payload, Mapping):
            payload = payload.get(DIAGNOSTICS_KEY)
        if not isinstance(payload, list):
            raise AdapterUnavailable(f"{self._path} does not contain a list of diagnostics")
        return payload

    def _coerce(self, record: Any) -> RawDiagnostic | None:
        """Return ``record`` as a :class:`RawDiagnostic` or ``None`` when unusable.

        Args:
            record: One decoded JSON record.

        Returns:
            RawDiagnostic | None: Validated record bound to its buffer number.
        """

        if not isinstance(record, Mapping):
            LOGGER.warning("skipping non-object diagnostic record: %r", record)
            return None
        file_name = next((record[key] for key in FILE_KEYS if isinstance(record.get(key), str)), None)
        if not file_name:
            LOGGER.warning("skipping diagnostic without a file: %r", dict(record))
            return None
        bufnr = self._registry.number_for(absolute_path(file_name, base_dir=self._base_dir))
        try:
            return RawDiagnostic.model_validate({**record, "bufnr": bufnr})
        except ValidationError as exc:
            LOGGER.warning("skipping invalid diagnostic record in %s: %s", file_name, exc)
            return None

    def subscribe(self, listener: ChangeListener) -> None:
        """Register ``listener`` to be called by :meth:`poll` on change.

        Args:
            listener: Zero-argument callback.
        """

        self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        """Remove ``listener``; unknown listeners are ignored.

        Args:
            listener: Callback previously passed to :meth:`subscribe`.
        """

        if listener in self._listeners:
            self._listeners.remove(listener)

    def poll(self) -> bool:
        """Notify listeners when the document changed since the last poll.

        Returns:
            bool: ``True`` when a change was detected.
        """

        signature = _stat_signature(self._path)
        if signature == self._signature:
            return False
        self._signature = signature
        for listener in list(self._listeners):
            listener()
        return True


class TerminalHost:
    """Host services backed by the buffer registry and the rich console."""

    def __init__(
        self,
        registry: BufferRegistry,
        *,
        working_root: Path | None = None,
        signs: Mapping[Severity, SignDefinition] | None = None,
        use_color: bool | None = None,
        use_emoji: bool = False,
    ) -> None:
        """Initialise the host.

        Args:
            registry: Registry resolving buffer numbers to paths.
            working_root: Directory display paths are made relative to.
            signs: Glyphs configured per severity.
            use_color: Explicit colour preference, ``None`` to follow TTY detection.
            use_emoji: Prefix user messages with emoji.
        """

        self._registry = registry
        self._working_root = working_root
        self._signs = dict(signs or {})
        self._use_color = use_color
        self._use_emoji = use_emoji

    def buffer_name(self, bufnr: int) -> str:
        """Return the path registered for ``bufnr``, empty when unknown."""

        return self._registry.path_for(bufnr)

    def make_relative(self, path: str) -> str:
        """Return ``path`` relative to the working root, or absolute when outside it.

        Args:
            path: File path reported for a buffer.

        Returns:
            str: POSIX-style display path.
        """

        return make_relative(path, base_dir=self._working_root).as_posix()

    def lookup_severity_glyph(self, severity: Severity) -> SignDefinition | None:
        """Return the configured glyph for ``severity``, if any."""

        return self._signs.get(severity)

    def report_malformed(self, error: MalformedDiagnostic) -> None:
        """Print a warning for a rejected record.

        Args:
            error: Rejection raised by the normaliser.
        """

        warn(f"Ignored diagnostic: {error.reason}", use_emoji=self._use_emoji, use_color=self._use_color)

    def notify_error(self, message: str) -> None:
        """Print ``message`` as an error."""

        fail(message, use_emoji=self._use_emoji, use_color=self._use_color)

    def jump_to(self, diagnostic: NormalizedDiagnostic) -> None:
        """Print the ``path:row:column`` location of ``diagnostic``.

        Args:
            diagnostic: Diagnostic to jump to; rows and columns are printed one-based.
        """

        row, column = diagnostic.jump_target
        info(f"{diagnostic.path}:{row}:{column + 1}", use_emoji=self._use_emoji, use_color=self._use_color)


class ConsoleSurface:
    """Draw panel lines on a rich console.

    Attributes:
        clear: Clear the screen before each draw, used in watch mode.
    """

    def __init__(self, console: Console, *, clear: bool = False) -> None:
        """Initialise the surface.

        Args:
            console: Console lines are printed on.
            clear: Clear the screen before each draw.
        """

        self._console = console
        self.clear = clear
        self._released = False

    def is_valid(self) -> bool:
        """Return ``True`` until :meth:`release` is called."""

        return not self._released

    def draw(self, lines: Sequence[Text]) -> None:
        """Print ``lines``, ignoring draws after release.

        Args:
            lines: Rendered panel lines.
        """

        if self._released:
            return
        if self.clear:
            self._console.clear()
        for line in lines:
            self._console.print(line)

    def release(self) -> None:
        """Stop drawing. Releasing twice is harmless."""

        self._released = True


class PanelHost:
    """Keep at most one diagnostics panel open per process."""

    def __init__(self, session_factory: Callable[[], ViewSession]) -> None:
        """Initialise the host without an open panel.

        Args:
            session_factory: Callable creating a closed :class:`ViewSession`.
        """

        self._session_factory = session_factory
        self._session: ViewSession | None = None

    @property
    def session(self) -> ViewSession | None:
        """Return the panel opened by :meth:`open`, if any."""

        return self._session

    def open(self) -> ViewSession:
        """Return the open panel, opening a new one when none is open.

        Raises:
            AdapterUnavailable: If a new panel cannot be built.
        """

        if self._session is not None and self._session.is_open:
            return self._session
        session = self._session_factory()
        session.open()
        self._session = session
        return session

    def close(self) -> None:
        """Close the open panel, if any."""

        if self._session is not None:
            self._session.close()
            self._session = None


__all__ = ["BufferRegistry", "ConsoleSurface", "JsonFileSource", "PanelHost", "TerminalHost"]

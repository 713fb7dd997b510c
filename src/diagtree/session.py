# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""View session controller wiring sources, the engine and a display surface."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import cast

from .errors import AdapterUnavailable, SessionStateError
from .events import RefreshQueue
from .interfaces import DiagnosticSource, DisplaySurface, HostServices, SurfaceFactory
from .normalizer import normalize
from .projector import Projector, RenderedPanel
from .tree import (
    DiagnosticNode,
    ExpansionSnapshot,
    Tree,
    build_tree,
    capture_expansion,
    is_leaf,
    reconcile,
    toggle_expansion,
)

LOGGER = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle states of a :class:`ViewSession`."""

    CLOSED = "closed"
    OPEN = "open"


class ViewSession:
    """Own one diagnostics panel: its tree, its surface and its subscription.

    The session is the only holder of the current tree. Every refresh captures
    the expansion snapshot, rebuilds the tree from the source, reconciles and
    redraws before returning, so callers never observe a partial tree.
    """

    def __init__(
        self,
        source: DiagnosticSource,
        host: HostServices,
        surface_factory: SurfaceFactory,
        *,
        projector: Projector | None = None,
        deferred_refresh: bool = False,
    ) -> None:
        """Initialise a closed session.

        Args:
            source: Diagnostic feed.
            host: Host lookups and side effects.
            surface_factory: Callable acquiring a display surface on open.
            projector: Line projector, defaults to :class:`Projector`.
            deferred_refresh: Queue change notifications until
                :meth:`process_pending` instead of refreshing immediately.
        """

        self._source = source
        self._host = host
        self._surface_factory = surface_factory
        self._projector = projector or Projector()
        self._deferred = deferred_refresh
        self._state = SessionState.CLOSED
        self._surface: DisplaySurface | None = None
        self._queue: RefreshQueue | None = None
        self._tree = Tree()
        self._panel = RenderedPanel((), ())

    @property
    def state(self) -> SessionState:
        """Return the current lifecycle state."""

        return self._state

    @property
    def is_open(self) -> bool:
        """Return ``True`` while the session is open."""

        return self._state is SessionState.OPEN

    @property
    def tree(self) -> Tree:
        """Return the tree currently displayed (the last good one)."""

        return self._tree

    @property
    def panel(self) -> RenderedPanel:
        """Return the lines most recently drawn."""

        return self._panel

    def build_initial(self) -> Tree:
        """Return a freshly built tree with every group collapsed.

        Raises:
            AdapterUnavailable: If the source fails to return diagnostics.
        """

        return reconcile(ExpansionSnapshot(), self._build())

    def open(self) -> None:
        """Build the tree, acquire the surface and subscribe to changes.

        Opening an open session does nothing.

        Raises:
            AdapterUnavailable: If the initial build fails; the session stays closed.
        """

        if self.is_open:
            return
        tree = self.build_initial()
        self._surface = self._surface_factory()
        self._tree = tree
        self._queue = RefreshQueue(self.refresh, deferred=self._deferred)
        self._source.subscribe(self._queue.post)
        self._state = SessionState.OPEN
        LOGGER.debug("session opened with %d groups", len(tree))
        self._render()

    def refresh(self) -> bool:
        """Rebuild the tree from the source, keeping expanded groups expanded.

        Returns:
            bool: ``True`` when the panel was redrawn. ``False`` when the session
            is closed or the source failed, in which case the last good tree
            stays on screen and the host is notified of the failure.
        """

        if not self._surface_alive():
            return False
        snapshot = capture_expansion(self._tree)
        try:
            fresh = self._build()
        except AdapterUnavailable as exc:
            LOGGER.warning("refresh failed: %s", exc)
            self._host.notify_error(f"Diagnostics refresh failed: {exc}")
            return False
        self._tree = reconcile(snapshot, fresh)
        self._render()
        return True

    def process_pending(self) -> int:
        """Deliver queued change notifications as at most one refresh.

        Returns:
            int: Number of notifications consumed.
        """

        if self._queue is None or not self.is_open:
            return 0
        return self._queue.drain()

    def toggle(self, row: int) -> bool:
        """Toggle the group rendered on ``row`` and redraw.

        Returns:
            bool: ``True`` when the expansion state changed.
        """

        node = self._require_open().node_at(row)
        if node is None or not toggle_expansion(node):
            return False
        self._render()
        return True

    def activate(self, row: int) -> bool:
        """Jump to the diagnostic rendered on ``row``.

        Returns:
            bool: ``True`` when the host was asked to jump, ``False`` for groups
            and header rows.
        """

        node = self._require_open().node_at(row)
        if node is None or not is_leaf(node):
            return False
        self._host.jump_to(cast("DiagnosticNode", node).diagnostic)
        return True

    def expand(self, group_keys: Iterable[str]) -> int:
        """Expand the groups identified by ``group_keys`` and redraw.

        Returns:
            int: Number of groups whose state changed.
        """

        self._require_open()
        wanted = set(group_keys)
        changed = 0
        for group in self._tree:
            if group.group_key in wanted and not group.expanded:
                group.expanded = True
                changed += 1
        if changed:
            self._render()
        return changed

    def close(self) -> None:
        """Unsubscribe and release the surface. Closing twice is harmless."""

        if not self.is_open:
            return
        self._state = SessionState.CLOSED
        if self._queue is not None:
            self._queue.cancel()
            self._source.unsubscribe(self._queue.post)
            self._queue = None
        if self._surface is not None:
            self._surface.release()
            self._surface = None
        LOGGER.debug("session closed")

    def _build(self) -> Tree:
        """Fetch, normalise and group the current diagnostics.

        Returns:
            Tree: Freshly built tree with every group collapsed.

        Raises:
            AdapterUnavailable: If the source cannot supply diagnostics.
        """

        try:
            raw = self._source.get_all()
        except AdapterUnavailable:
            raise
        except (OSError, RuntimeError, ValueError) as exc:
            raise AdapterUnavailable(str(exc)) from exc
        return build_tree(normalize(raw, self._host).diagnostics)

    def _surface_alive(self) -> bool:
        """Return whether the session is open on a valid surface.

        A surface the host invalidated closes the session.
        """

        if not self.is_open:
            return False
        if self._surface is None or not self._surface.is_valid():
            LOGGER.debug("surface invalidated, closing session")
            self.close()
            return False
        return True

    def _render(self) -> None:
        """Project the current tree and draw it on the surface."""

        self._panel = self._projector.render(self._tree)
        if self._surface is not None:
            self._surface.draw(self._panel.lines)

    def _require_open(self) -> RenderedPanel:
        """Return the drawn panel of an open session.

        Raises:
            SessionStateError: If the session is closed or its surface is gone.
        """

        if not self._surface_alive():
            raise SessionStateError("the diagnostics panel is not open")
        return self._panel


__all__ = ["SessionState", "ViewSession"]

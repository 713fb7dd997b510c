# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Message passing between change notifications and view refreshes."""

from __future__ import annotations

import logging
from collections.abc import Callable

LOGGER = logging.getLogger(__name__)


class RefreshQueue:
    """Queue change notifications and deliver them to a refresh handler.

    ``post`` is the callback handed to the diagnostic source. In immediate mode
    each notification is delivered right away; in deferred mode notifications
    accumulate until :meth:`drain` delivers them as one refresh. Delivery never
    re-enters the handler while it is already running: notifications posted
    during a delivery are coalesced into one follow-up call.
    """

    def __init__(self, handler: Callable[[], object], *, deferred: bool = False) -> None:
        """Initialise the queue.

        Args:
            handler: Zero-argument refresh callable.
            deferred: When ``True`` notifications wait for :meth:`drain`.
        """

        self._handler = handler
        self._deferred = deferred
        self._pending = 0
        self._delivering = False
        self._cancelled = False

    @property
    def pending(self) -> int:
        """Return the number of notifications not yet delivered."""

        return self._pending

    @property
    def cancelled(self) -> bool:
        """Return ``True`` once :meth:`cancel` has been called."""

        return self._cancelled

    def post(self) -> None:
        """Record a change notification."""

        if self._cancelled:
            LOGGER.debug("notification dropped, queue cancelled")
            return
        self._pending += 1
        if not self._deferred:
            self.drain()

    def drain(self) -> int:
        """Deliver pending notifications.

        Returns:
            int: Number of notifications coalesced into the delivered refreshes.
        """

        if self._delivering or self._cancelled:
            return 0
        delivered = 0
        self._delivering = True
        try:
            while self._pending and not self._cancelled:
                delivered += self._pending
                self._pending = 0
                self._handler()
        finally:
            self._delivering = False
        return delivered

    def cancel(self) -> None:
        """Drop pending notifications and refuse further ones."""

        self._cancelled = True
        self._pending = 0


__all__ = ["RefreshQueue"]

# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transfer progress observation."""

from __future__ import annotations

import threading
from collections.abc import Callable


class ProgressObserver:
    """
    Reports fractional completion of a single transfer.

    The transport binds the observer when it creates the transfer and feeds it byte
    counts; ``on_change`` runs synchronously on the transport's thread. When the
    total size is unknown only the final 1.0 is reported, and a transfer that fails
    reports no final update.
    """

    def __init__(self, on_change: Callable[[float], None]):
        self._on_change = on_change
        self._lock = threading.Lock()
        self._bound = False
        self._total: int | None = None
        self._completed = 0
        self._last: float | None = None

    @property
    def fraction(self) -> float | None:
        return self._last

    def bind(self, total: int | None) -> None:
        with self._lock:
            if self._bound:
                raise RuntimeError("ProgressObserver is already bound to a transfer")
            self._bound = True
            self._total = total if total and total > 0 else None
            self._completed = 0

    def advance(self, nbytes: int) -> None:
        with self._lock:
            if not self._bound or nbytes <= 0:
                return
            self._completed += nbytes
            if self._total is None:
                return
            fraction = min(1.0, self._completed / self._total)
        self._emit(fraction)

    def finish(self) -> None:
        if self._bound:
            self._emit(1.0)

    def _emit(self, fraction: float) -> None:
        with self._lock:
            if self._last == fraction:
                return
            self._last = fraction
        self._on_change(fraction)


__all__ = ["ProgressObserver"]

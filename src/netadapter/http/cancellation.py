# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Cooperative cancellation for in-flight transfers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext

from ..errors import TransferCancelled

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Thread-safe cancellation flag.

    Transports check the flag between chunks and register hooks with ``on_cancel``
    to interrupt blocking reads. Hooks run once, on the thread that calls ``cancel``.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._hooks: list[Callable[[], None]] = []

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            hooks, self._hooks = self._hooks, []
        for hook in hooks:
            _run_hook(hook)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TransferCancelled("Transfer cancelled")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return the cancelled state."""
        return self._event.wait(timeout)

    @contextmanager
    def on_cancel(self, hook: Callable[[], None]) -> Iterator[None]:
        """Run ``hook`` if the token is cancelled while the block is active."""
        with self._lock:
            registered = not self._event.is_set()
            if registered:
                self._hooks.append(hook)
        if not registered:
            _run_hook(hook)
        try:
            yield
        finally:
            with self._lock:
                if hook in self._hooks:
                    self._hooks.remove(hook)


def _run_hook(hook: Callable[[], None]) -> None:
    try:
        hook()
    except Exception:  # noqa: BLE001
        logger.exception("Cancellation hook raised")


def check_cancelled(token: CancellationToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()


def cancel_hook(token: CancellationToken | None, hook: Callable[[], None]) -> AbstractContextManager[None]:
    """``token.on_cancel(hook)``, or a no-op context when there is no token."""
    if token is None:
        return nullcontext()
    return token.on_cancel(hook)


__all__ = ["CancellationToken", "cancel_hook", "check_cancelled"]

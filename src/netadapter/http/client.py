# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and factory."""

from pathlib import Path
from typing import Protocol

from ..config import HttpSettings, load_http_settings
from .cancellation import CancellationToken
from .models import HttpRequest, HttpResponse
from .progress import ProgressObserver


class Transport(Protocol):
    """
    Byte transport used by NetworkService.

    Every operation performs one attempt and raises on transport failure. Transports
    raise TransferCancelled once ``cancel_token`` is set.
    """

    def send(
        self,
        request: HttpRequest,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[bytes, HttpResponse]: ...

    def upload(
        self,
        request: HttpRequest,
        body: bytes,
        *,
        cancel_token: CancellationToken | None = None,
        progress: ProgressObserver | None = None,
    ) -> tuple[bytes, HttpResponse]: ...

    def download(
        self,
        request: HttpRequest,
        *,
        cancel_token: CancellationToken | None = None,
        progress: ProgressObserver | None = None,
    ) -> tuple[Path, HttpResponse]: ...

    def fetch(
        self,
        request: HttpRequest,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[bytes, HttpResponse]: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_transport(settings: HttpSettings | None = None) -> Transport:
    """Factory for the default httpx-backed transport."""
    from .httpx_client import HttpxTransport

    return HttpxTransport(settings or load_http_settings())

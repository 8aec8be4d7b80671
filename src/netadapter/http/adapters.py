# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory Transport implementations."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import TransferCancelled
from .cancellation import CancellationToken, check_cancelled
from .client import Transport
from .models import HttpRequest, HttpResponse
from .progress import ProgressObserver


@dataclass
class StubReply:
    """Canned reply for a URL: a body and status, or an exception to raise."""

    body: bytes = b""
    status_code: int | None = 200
    headers: dict[str, str] = field(default_factory=dict)
    error: BaseException | None = None
    block_until_cancelled: bool = False


@dataclass
class StubCall:
    operation: str
    request: HttpRequest
    body: bytes | None = None


class StubTransport(Transport):
    """Deterministic, programmable Transport for tests."""

    def __init__(self, replies: dict[str, StubReply] | None = None, *, temp_dir: str | Path | None = None):
        self._replies = replies or {}
        self._temp_dir = temp_dir
        self.calls: list[StubCall] = []
        self.closed = False

    def add(
        self,
        url: str,
        body: bytes = b"",
        status_code: int | None = 200,
        *,
        headers: dict[str, str] | None = None,
        error: BaseException | None = None,
        block_until_cancelled: bool = False,
    ) -> None:
        self._replies[url] = StubReply(
            body=body,
            status_code=status_code,
            headers=dict(headers or {}),
            error=error,
            block_until_cancelled=block_until_cancelled,
        )

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def _reply(
        self,
        operation: str,
        request: HttpRequest,
        body: bytes | None,
        cancel_token: CancellationToken | None,
    ) -> tuple[StubReply, HttpResponse]:
        self.calls.append(StubCall(operation, request, body))
        check_cancelled(cancel_token)
        reply = self._replies.get(request.url)
        if reply is None:
            raise LookupError(f"No stubbed response configured for {request.url}")
        if reply.block_until_cancelled:
            if cancel_token is None or not cancel_token.wait(timeout=10.0):
                raise TimeoutError("Stubbed transfer was never cancelled")
            raise TransferCancelled("Transfer cancelled")
        if reply.error is not None:
            raise reply.error
        return reply, HttpResponse(status_code=reply.status_code, headers=dict(reply.headers), url=request.url)

    def send(
        self,
        request: HttpRequest,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[bytes, HttpResponse]:
        reply, response = self._reply("send", request, request.body, cancel_token)
        return reply.body, response

    def fetch(
        self,
        request: HttpRequest,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[bytes, HttpResponse]:
        reply, response = self._reply("fetch", request, None, cancel_token)
        return reply.body, response

    def upload(
        self,
        request: HttpRequest,
        body: bytes,
        *,
        cancel_token: CancellationToken | None = None,
        progress: ProgressObserver | None = None,
    ) -> tuple[bytes, HttpResponse]:
        if progress is not None:
            progress.bind(len(body))
        reply, response = self._reply("upload", request, body, cancel_token)
        if progress is not None:
            progress.advance(len(body))
            progress.finish()
        return reply.body, response

    def download(
        self,
        request: HttpRequest,
        *,
        cancel_token: CancellationToken | None = None,
        progress: ProgressObserver | None = None,
    ) -> tuple[Path, HttpResponse]:
        reply, response = self._reply("download", request, None, cancel_token)
        if progress is not None:
            progress.bind(len(reply.body))
        with tempfile.NamedTemporaryFile(prefix="netadapter-stub-", dir=self._temp_dir, delete=False) as handle:
            handle.write(reply.body)
        if progress is not None:
            progress.advance(len(reply.body))
            progress.finish()
        return Path(handle.name), response

    def close(self) -> None:
        self.closed = True


__all__ = ["StubCall", "StubReply", "StubTransport"]

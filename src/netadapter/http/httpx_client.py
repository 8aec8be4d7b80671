# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from contextlib import suppress
from pathlib import Path

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import TransferCancelled
from .cancellation import CancellationToken, cancel_hook, check_cancelled
from .client import Transport
from .models import HttpRequest, HttpResponse
from .progress import ProgressObserver


def _content_length(resp: httpx.Response) -> int | None:
    raw = resp.headers.get("Content-Length")
    try:
        return int(raw) if raw is not None else None
    except ValueError:
        return None


class HttpxTransport(Transport):
    """Synchronous httpx client wrapper shared by every call of a service."""

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def _headers(self, request: HttpRequest) -> httpx.Headers:
        headers = httpx.Headers(list(request.headers))
        if "User-Agent" not in headers:
            headers["User-Agent"] = self.settings.user_agent
        directive = request.cache_policy.cache_control if request.cache_policy is not None else None
        if directive and "Cache-Control" not in headers:
            headers["Cache-Control"] = directive
        return headers

    def _timeout(self, request: HttpRequest) -> float:
        return request.timeout if request.timeout is not None else self.settings.timeout

    @staticmethod
    def _metadata(resp: httpx.Response, **meta: object) -> HttpResponse:
        return HttpResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            url=str(resp.url),
            meta=dict(meta),
        )

    def _iter_chunks(self, resp: httpx.Response, cancel_token: CancellationToken | None) -> Iterator[bytes]:
        """Decoded body chunks; cancelling closes ``resp`` and ends the read."""
        with cancel_hook(cancel_token, resp.close):
            try:
                for chunk in resp.iter_bytes(chunk_size=self.settings.chunk_size):
                    check_cancelled(cancel_token)
                    if chunk:
                        yield chunk
            except (httpx.HTTPError, httpx.StreamError, OSError) as exc:
                if cancel_token is not None and cancel_token.cancelled:
                    raise TransferCancelled("Transfer cancelled") from exc
                raise
        check_cancelled(cancel_token)

    def _read_body(self, resp: httpx.Response, cancel_token: CancellationToken | None) -> tuple[bytes, bool]:
        max_body_bytes = self.settings.max_body_bytes
        if max_body_bytes <= 0:
            max_body_bytes = 64 * 1024 * 1024

        content = bytearray()
        truncated = False
        for chunk in self._iter_chunks(resp, cancel_token):
            remaining = max_body_bytes - len(content)
            if remaining <= 0:
                truncated = True
                break
            if len(chunk) > remaining:
                content.extend(chunk[:remaining])
                truncated = True
                break
            content.extend(chunk)
        return bytes(content), truncated

    def _exchange(
        self,
        request: HttpRequest,
        content: bytes | Iterator[bytes] | None,
        headers: httpx.Headers,
        cancel_token: CancellationToken | None,
    ) -> tuple[bytes, HttpResponse]:
        check_cancelled(cancel_token)
        with self._client.stream(
            request.method.value,
            request.url,
            headers=headers,
            content=content,
            timeout=self._timeout(request),
        ) as resp:
            body, truncated = self._read_body(resp, cancel_token)
            return body, self._metadata(resp, body_truncated=truncated, body_bytes_read=len(body))

    def send(
        self,
        request: HttpRequest,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[bytes, HttpResponse]:
        return self._exchange(request, request.body, self._headers(request), cancel_token)

    def fetch(
        self,
        request: HttpRequest,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[bytes, HttpResponse]:
        return self._exchange(request.without_body(), None, self._headers(request), cancel_token)

    def upload(
        self,
        request: HttpRequest,
        body: bytes,
        *,
        cancel_token: CancellationToken | None = None,
        progress: ProgressObserver | None = None,
    ) -> tuple[bytes, HttpResponse]:
        headers = self._headers(request)
        if "Content-Length" not in headers:
            headers["Content-Length"] = str(len(body))
        if progress is not None:
            progress.bind(len(body))

        chunk_size = self.settings.chunk_size

        def chunks() -> Iterator[bytes]:
            for offset in range(0, len(body), chunk_size):
                check_cancelled(cancel_token)
                chunk = body[offset : offset + chunk_size]
                yield chunk
                if progress is not None:
                    progress.advance(len(chunk))

        result = self._exchange(request, chunks(), headers, cancel_token)
        if progress is not None:
            progress.finish()
        return result

    def download(
        self,
        request: HttpRequest,
        *,
        cancel_token: CancellationToken | None = None,
        progress: ProgressObserver | None = None,
    ) -> tuple[Path, HttpResponse]:
        check_cancelled(cancel_token)
        fd, temp_name = tempfile.mkstemp(prefix="netadapter-", suffix=".download")
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as sink, self._client.stream(
                request.method.value,
                request.url,
                headers=self._headers(request),
                timeout=self._timeout(request),
            ) as resp:
                if progress is not None:
                    progress.bind(_content_length(resp))
                written = 0
                # Content-Length counts encoded bytes, so progress follows the raw stream
                raw_seen = 0
                for chunk in self._iter_chunks(resp, cancel_token):
                    sink.write(chunk)
                    written += len(chunk)
                    if progress is not None:
                        raw_read = resp.num_bytes_downloaded
                        progress.advance(raw_read - raw_seen)
                        raw_seen = raw_read
                metadata = self._metadata(resp, body_bytes_read=written)
        except BaseException:
            with suppress(OSError):
                temp_path.unlink()
            raise
        if progress is not None:
            progress.finish()
        return temp_path, metadata

    def close(self) -> None:
        self._client.close()


__all__ = ["HttpxTransport"]

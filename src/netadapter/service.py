# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
NetworkService: request execution, validation and result delivery.

Every operation runs one pipeline: build the request, perform the transfer,
validate the status code, decode the body. The blocking methods run it on the
caller's thread and raise NetworkError on failure. The ``submit_*`` methods run it
on the service's thread pool and hand the Outcome to a callback exactly once.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager, suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from .config import HttpSettings, load_http_settings
from .errors import ErrorKind, NetworkError, TransferCancelled, wrap_transport_exception
from .http.cancellation import CancellationToken, check_cancelled
from .http.client import Transport, create_default_transport
from .http.codec import Codec, default_codec
from .http.endpoint import Endpoint
from .http.models import (
    DEFAULT_TRANSFER_CONFIG,
    UPLOAD_METHODS,
    HttpRequest,
    TransferConfig,
    status_code_of,
)
from .http.progress import ProgressObserver
from .http.request_factory import build_request, build_url_request
from .http.validation import validate
from .models.outcome import Failure, Outcome, Success
from .storage import FileSystem, LocalFileSystem

logger = logging.getLogger(__name__)

T = TypeVar("T")
OutcomeCallback = Callable[[Outcome], None]


@contextmanager
def _transport_errors() -> Iterator[None]:
    """Convert transport exceptions into NetworkError."""
    try:
        yield
    except NetworkError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise wrap_transport_exception(exc) from exc


def _deliver_to(callback: OutcomeCallback, outcome: Outcome) -> None:
    try:
        callback(outcome)
    except Exception:  # noqa: BLE001
        logger.exception("NetworkService callback raised")


class NetworkTask:
    """
    Cancellation handle for a callback-style call.

    The callback runs exactly once. ``cancel()`` before completion aborts the transfer
    and the callback receives a CANCELLED failure; after completion it is a no-op.
    """

    def __init__(self, callback: OutcomeCallback, cancel_token: CancellationToken):
        self._callback = callback
        self._cancel_token = cancel_token
        self._lock = threading.Lock()
        self._delivered = False
        self._done = threading.Event()
        self._future: Future[None] | None = None

    def _attach(self, future: Future[None]) -> None:
        self._future = future

    def _deliver(self, outcome: Outcome) -> None:
        with self._lock:
            if self._delivered:
                return
            self._delivered = True
        try:
            _deliver_to(self._callback, outcome)
        finally:
            self._done.set()

    def cancel(self) -> None:
        """
        Abort the transfer and deliver the CANCELLED failure on the calling thread.

        A worker that is still blocked in the transport finishes in the background;
        its result is dropped.
        """
        with self._lock:
            if self._delivered:
                return
        self._cancel_token.cancel()
        future = self._future
        if future is not None:
            future.cancel()
        error = TransferCancelled("Transfer cancelled")
        self._deliver(Failure(NetworkError(error=error, kind=ErrorKind.CANCELLED)))

    @property
    def cancelled(self) -> bool:
        return self._cancel_token.cancelled

    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the callback has run; return False on timeout."""
        return self._done.wait(timeout)


@dataclass(frozen=True)
class _PreparedTransfer:
    request: HttpRequest
    config: TransferConfig
    upload_body: bytes | None = None


class NetworkService:
    """
    Client-side HTTP service over a shared Transport.

    ``auto_validation`` is the service-wide validation switch; per-call
    ``TransferConfig.auto_validate=False`` opts a single call out regardless of it.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        settings: HttpSettings | None = None,
        codec: Codec | None = None,
        filesystem: FileSystem | None = None,
        default_config: TransferConfig | None = None,
        max_workers: int | None = None,
    ):
        self.settings = settings or load_http_settings()
        self.transport = transport or create_default_transport(self.settings)
        self.codec = codec or default_codec
        self.filesystem = filesystem or LocalFileSystem()
        self.default_config = (default_config or TransferConfig()).resolve(DEFAULT_TRANSFER_CONFIG)
        self._auto_validation = self.settings.auto_validate
        self._flag_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or self.settings.max_workers,
            thread_name_prefix="netadapter",
        )

    @property
    def auto_validation(self) -> bool:
        with self._flag_lock:
            return self._auto_validation

    @auto_validation.setter
    def auto_validation(self, enabled: bool) -> None:
        with self._flag_lock:
            self._auto_validation = bool(enabled)

    # Pipeline stages

    def _resolve(self, config: TransferConfig | None) -> TransferConfig:
        return (config or TransferConfig()).resolve(self.default_config)

    def _prepare_request(self, endpoint: Endpoint, config: TransferConfig | None) -> _PreparedTransfer:
        resolved = self._resolve(config)
        request = build_request(endpoint)
        mode = ""
        upload_body = None
        if resolved.use_upload:
            if request.method not in UPLOAD_METHODS or request.body is None:
                raise NetworkError(kind=ErrorKind.PRECONDITION)
            upload_body = request.body
            request = request.without_body()
            mode = ", upload"
        logger.debug("NetworkService request %s%s, url: %s", request.method.value, mode, request.url)
        return _PreparedTransfer(request=request, config=resolved, upload_body=upload_body)

    def _prepare_url(
        self,
        url: str,
        config: TransferConfig | None,
        destination: str | Path | None = None,
    ) -> _PreparedTransfer:
        request = build_url_request(url)
        if destination is None:
            logger.debug("NetworkService fetchFile: %s", request.url)
        else:
            logger.debug("NetworkService downloadFile, url: %s, to: %s", request.url, destination)
        return _PreparedTransfer(request=request, config=self._resolve(config))

    def _validate(self, status_code: int | None, data: bytes | None, config: TransferConfig) -> None:
        try:
            validate(status_code, data, bool(config.auto_validate), self.auto_validation)
        except NetworkError:
            logger.debug("NetworkService validation failed with status %s", status_code)
            raise

    def _execute_request(
        self,
        prepared: _PreparedTransfer,
        type_: type[Any] | None,
        progress: ProgressObserver | None,
        cancel_token: CancellationToken | None,
    ) -> Success[Any]:
        with _transport_errors():
            if prepared.upload_body is not None:
                data, response = self.transport.upload(
                    prepared.request,
                    prepared.upload_body,
                    cancel_token=cancel_token,
                    progress=progress,
                )
            else:
                data, response = self.transport.send(prepared.request, cancel_token=cancel_token)

        status_code = status_code_of(response)
        self._validate(status_code, data, prepared.config)

        if type_ is None:
            return Success(data, status_code, response)
        decoded = self.codec.decode(data, type_)
        if decoded is None:
            raise NetworkError(status_code=status_code, data=data, kind=ErrorKind.DECODE)
        return Success(decoded, status_code, response)

    def _execute_fetch(
        self,
        prepared: _PreparedTransfer,
        cancel_token: CancellationToken | None,
    ) -> Success[bytes | None]:
        with _transport_errors():
            data, response = self.transport.fetch(prepared.request, cancel_token=cancel_token)

        status_code = status_code_of(response)
        self._validate(status_code, data, prepared.config)
        return Success(data or None, status_code, response)

    def _execute_download(
        self,
        prepared: _PreparedTransfer,
        destination: Path,
        progress: ProgressObserver | None,
        cancel_token: CancellationToken | None,
    ) -> Success[bool]:
        with _transport_errors():
            temp_path, response = self.transport.download(
                prepared.request,
                cancel_token=cancel_token,
                progress=progress,
            )

        status_code = status_code_of(response)
        try:
            self._validate(status_code, None, prepared.config)
            with _transport_errors():
                check_cancelled(cancel_token)
            if not self.filesystem.exists(destination):
                self.filesystem.move_or_copy(temp_path, destination)
        except OSError as exc:
            raise NetworkError(error=exc, status_code=status_code, kind=ErrorKind.PERSISTENCE) from exc
        finally:
            with suppress(OSError):
                self.filesystem.discard(temp_path)
        return Success(True, status_code, response)

    # Blocking API

    def request(
        self,
        endpoint: Endpoint,
        *,
        type_: type[T] | None = None,
        config: TransferConfig | None = None,
        progress: ProgressObserver | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> Any:
        """
        Perform a data or upload transfer and return the body.

        With ``type_`` the body is decoded into that type; otherwise raw bytes are
        returned. Set ``TransferConfig(use_upload=True)`` to send a POST/PUT body as
        an upload.
        """
        return self._request(endpoint, type_, config, progress, cancel_token).value

    def request_with_status_code(
        self,
        endpoint: Endpoint,
        *,
        type_: type[T] | None = None,
        config: TransferConfig | None = None,
        progress: ProgressObserver | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[Any, int | None]:
        result = self._request(endpoint, type_, config, progress, cancel_token)
        return result.value, result.status_code

    def _request(
        self,
        endpoint: Endpoint,
        type_: type[Any] | None,
        config: TransferConfig | None,
        progress: ProgressObserver | None,
        cancel_token: CancellationToken | None,
    ) -> Success[Any]:
        prepared = self._prepare_request(endpoint, config)
        return self._execute_request(prepared, type_, progress, cancel_token)

    def fetch_file(
        self,
        url: str,
        *,
        config: TransferConfig | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> bytes | None:
        """Fetch a file into memory; an empty body yields None."""
        return self._execute_fetch(self._prepare_url(url, config), cancel_token).value

    def fetch_file_with_status_code(
        self,
        url: str,
        *,
        config: TransferConfig | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[bytes | None, int | None]:
        result = self._execute_fetch(self._prepare_url(url, config), cancel_token)
        return result.value, result.status_code

    def download_file(
        self,
        url: str,
        destination: str | Path,
        *,
        config: TransferConfig | None = None,
        progress: ProgressObserver | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> bool:
        """
        Download a file to ``destination`` and return True.

        An existing file at ``destination`` is left in place and counts as success.
        """
        prepared = self._prepare_url(url, config, destination)
        return self._execute_download(prepared, Path(destination), progress, cancel_token).value

    def download_file_with_status_code(
        self,
        url: str,
        destination: str | Path,
        *,
        config: TransferConfig | None = None,
        progress: ProgressObserver | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[bool, int | None]:
        prepared = self._prepare_url(url, config, destination)
        result = self._execute_download(prepared, Path(destination), progress, cancel_token)
        return result.value, result.status_code

    # Async API

    async def _in_thread(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        token = kwargs.get("cancel_token") or CancellationToken()
        kwargs["cancel_token"] = token
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except asyncio.CancelledError:
            token.cancel()
            raise

    async def request_async(self, endpoint: Endpoint, **kwargs: Any) -> Any:
        """Awaitable ``request``; cancelling the awaiting task cancels the transfer."""
        return await self._in_thread(self.request, endpoint, **kwargs)

    async def fetch_file_async(self, url: str, **kwargs: Any) -> bytes | None:
        return await self._in_thread(self.fetch_file, url, **kwargs)

    async def download_file_async(self, url: str, destination: str | Path, **kwargs: Any) -> bool:
        return await self._in_thread(self.download_file, url, destination, **kwargs)

    # Callback API

    def _submit(
        self,
        callback: OutcomeCallback,
        run: Callable[[CancellationToken], Success[Any]],
    ) -> NetworkTask | None:
        token = CancellationToken()
        task = NetworkTask(callback, token)

        def worker() -> None:
            try:
                outcome: Outcome = run(token)
            except NetworkError as exc:
                outcome = Failure(exc)
            except Exception as exc:  # noqa: BLE001
                logger.exception("NetworkService transfer failed unexpectedly")
                outcome = Failure(NetworkError(error=exc, kind=ErrorKind.TRANSPORT))
            task._deliver(outcome)

        try:
            future = self._executor.submit(worker)
        except RuntimeError as exc:
            # executor already shut down by close()
            _deliver_to(callback, Failure(NetworkError(error=exc, kind=ErrorKind.PRECONDITION)))
            return None
        task._attach(future)
        return task

    def submit_request(
        self,
        endpoint: Endpoint,
        callback: OutcomeCallback,
        *,
        type_: type[Any] | None = None,
        config: TransferConfig | None = None,
        progress: ProgressObserver | None = None,
    ) -> NetworkTask | None:
        """
        Start a data or upload transfer and return its handle.

        Returns None, after invoking ``callback`` with the failure, when the call cannot
        start (malformed URL, upload without a POST/PUT body, service already closed).
        """
        try:
            prepared = self._prepare_request(endpoint, config)
        except NetworkError as exc:
            _deliver_to(callback, Failure(exc))
            return None
        return self._submit(callback, lambda token: self._execute_request(prepared, type_, progress, token))

    def submit_fetch_file(
        self,
        url: str,
        callback: OutcomeCallback,
        *,
        config: TransferConfig | None = None,
    ) -> NetworkTask | None:
        try:
            prepared = self._prepare_url(url, config)
        except NetworkError as exc:
            _deliver_to(callback, Failure(exc))
            return None
        return self._submit(callback, lambda token: self._execute_fetch(prepared, token))

    def submit_download_file(
        self,
        url: str,
        destination: str | Path,
        callback: OutcomeCallback,
        *,
        config: TransferConfig | None = None,
        progress: ProgressObserver | None = None,
    ) -> NetworkTask | None:
        try:
            prepared = self._prepare_url(url, config, destination)
        except NetworkError as exc:
            _deliver_to(callback, Failure(exc))
            return None
        target = Path(destination)
        return self._submit(callback, lambda token: self._execute_download(prepared, target, progress, token))

    # Lifecycle

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        with suppress(Exception):
            self.transport.close()

    def __enter__(self) -> NetworkService:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["NetworkService", "NetworkTask", "OutcomeCallback"]

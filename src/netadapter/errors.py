# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class ErrorKind(str, Enum):
    """Pipeline stage at which a call failed."""

    MALFORMED_TARGET = "MALFORMED_TARGET"
    PRECONDITION = "PRECONDITION"
    TRANSPORT = "TRANSPORT"
    VALIDATION = "VALIDATION"
    DECODE = "DECODE"
    PERSISTENCE = "PERSISTENCE"
    CANCELLED = "CANCELLED"


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    CANCELLED = "CANCELLED"
    FILESYSTEM_ERROR = "FILESYSTEM_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class TransferCancelled(Exception):
    """Raised by transports when a transfer's cancellation token is set."""


class NetworkError(Exception):
    """
    Terminal failure of a single call.

    A NetworkError with neither ``error`` nor ``status_code`` marks a call that
    failed before any transport activity (malformed URL, upload precondition).
    """

    def __init__(
        self,
        error: BaseException | None = None,
        status_code: int | None = None,
        data: bytes | None = None,
        *,
        kind: ErrorKind | None = None,
    ):
        self.error = error
        self.status_code = status_code
        self.data = data
        if kind is None:
            if error is not None:
                kind = ErrorKind.TRANSPORT
            elif status_code is not None:
                kind = ErrorKind.VALIDATION
            else:
                kind = ErrorKind.MALFORMED_TARGET
        self.kind = kind
        super().__init__(self._describe())

    def _describe(self) -> str:
        parts = [self.kind.value]
        if self.status_code is not None:
            parts.append(f"status_code={self.status_code}")
        if self.error is not None:
            parts.append(f"error={type(self.error).__name__}: {self.error}")
        return " ".join(parts)

    @property
    def is_empty(self) -> bool:
        return self.error is None and self.status_code is None

    @property
    def category(self) -> ErrorCategory:
        if self.error is None:
            return ErrorCategory.NONE
        return categorize_exception(self.error)

    def __repr__(self) -> str:
        return f"NetworkError(kind={self.kind.value}, status_code={self.status_code!r}, error={self.error!r})"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, TransferCancelled):
        return ErrorCategory.CANCELLED

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, OSError):
        return ErrorCategory.FILESYSTEM_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def status_code_from_exception(exc: BaseException) -> int | None:
    """Return the HTTP status attached to a transport exception, if a response was received."""
    response = getattr(exc, "response", None)
    if response is None:
        return None
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def wrap_transport_exception(exc: BaseException) -> NetworkError:
    """Convert a transport-level exception into a NetworkError."""
    if isinstance(exc, NetworkError):
        return exc
    kind = ErrorKind.CANCELLED if isinstance(exc, TransferCancelled) else ErrorKind.TRANSPORT
    return NetworkError(error=exc, status_code=status_code_from_exception(exc), kind=kind)


__all__ = [
    "ErrorCategory",
    "ErrorKind",
    "NetworkError",
    "TransferCancelled",
    "categorize_exception",
    "status_code_from_exception",
    "wrap_transport_exception",
]

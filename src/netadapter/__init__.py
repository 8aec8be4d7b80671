# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
netadapter package entrypoint.

A client-side HTTP layer: endpoints describe API calls, a NetworkService runs them
over an injectable Transport (httpx by default), validates status codes and decodes
JSON bodies into typed values. Results are returned from blocking calls or handed to
callbacks, with cancellation and progress reporting.
"""

from .config import HttpSettings, load_http_settings
from .errors import ErrorCategory, ErrorKind, NetworkError, TransferCancelled
from .http import (
    CachePolicy,
    CancellationToken,
    Endpoint,
    HttpParams,
    HttpRequest,
    HttpResponse,
    HttpxTransport,
    JsonCodec,
    Method,
    ProgressObserver,
    StubTransport,
    TransferConfig,
    Transport,
    create_default_transport,
)
from .log import setup_logging
from .models import Failure, Outcome, Success
from .service import NetworkService, NetworkTask
from .storage import FileSystem, LocalFileSystem
from .version import __version__

__all__ = [
    "CachePolicy",
    "CancellationToken",
    "Endpoint",
    "ErrorCategory",
    "ErrorKind",
    "Failure",
    "FileSystem",
    "HttpParams",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxTransport",
    "JsonCodec",
    "LocalFileSystem",
    "Method",
    "NetworkError",
    "NetworkService",
    "NetworkTask",
    "Outcome",
    "ProgressObserver",
    "StubTransport",
    "Success",
    "TransferCancelled",
    "TransferConfig",
    "Transport",
    "create_default_transport",
    "load_http_settings",
    "setup_logging",
    "__version__",
]

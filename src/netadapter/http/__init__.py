# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP building blocks: endpoints, transports, codec, validation and progress."""

from .adapters import StubReply, StubTransport
from .cancellation import CancellationToken
from .client import Transport, create_default_transport
from .codec import Codec, JsonCodec, default_codec
from .endpoint import Endpoint, EndpointSnapshot
from .httpx_client import HttpxTransport
from .models import (
    CachePolicy,
    HttpParams,
    HttpRequest,
    HttpResponse,
    Method,
    TransferConfig,
    status_code_of,
)
from .progress import ProgressObserver
from .request_factory import build_request, build_url_request, is_absolute_url
from .validation import VALIDATION_BAND, validate

__all__ = [
    "CachePolicy",
    "CancellationToken",
    "Codec",
    "Endpoint",
    "EndpointSnapshot",
    "HttpParams",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "JsonCodec",
    "Method",
    "ProgressObserver",
    "StubReply",
    "StubTransport",
    "TransferConfig",
    "Transport",
    "VALIDATION_BAND",
    "build_request",
    "build_url_request",
    "create_default_transport",
    "default_codec",
    "is_absolute_url",
    "status_code_of",
    "validate",
]

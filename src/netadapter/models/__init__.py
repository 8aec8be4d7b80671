# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for netadapter."""

from ..http.models import CachePolicy, HttpParams, HttpRequest, HttpResponse, Method, TransferConfig
from .outcome import Failure, Outcome, Success

__all__ = [
    "CachePolicy",
    "Failure",
    "HttpParams",
    "HttpRequest",
    "HttpResponse",
    "Method",
    "Outcome",
    "Success",
    "TransferConfig",
]

# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Build concrete HttpRequests from endpoints and URLs."""

from __future__ import annotations

import httpx

from ..errors import ErrorKind, NetworkError
from .endpoint import Endpoint, EndpointSnapshot
from .models import HttpRequest, Method


def is_absolute_url(url: str) -> bool:
    """
    Return True when ``url`` is a syntactically valid absolute URL.

    Whitespace and control characters are rejected rather than percent-encoded.
    """
    if not url or any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        return False
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError, ValueError):
        return False
    return bool(parsed.scheme) and bool(parsed.host)


def _checked_url(url: str) -> str:
    if not is_absolute_url(url):
        raise NetworkError(kind=ErrorKind.MALFORMED_TARGET)
    return url


def build_request(endpoint: Endpoint | EndpointSnapshot) -> HttpRequest:
    """
    Build the concrete request for an endpoint.

    Raises an empty NetworkError when base_url + path is not a valid absolute URL.
    """
    snapshot = endpoint.snapshot() if isinstance(endpoint, Endpoint) else endpoint
    request = HttpRequest(url=_checked_url(snapshot.url), method=snapshot.method)

    params = snapshot.params
    if params is not None:
        request.body = params.body
        if params.cache_policy is not None:
            request.cache_policy = params.cache_policy
        if params.timeout is not None:
            request.timeout = params.timeout
        for name, value in params.headers:
            request.headers.append((name, value))

    return request


def build_url_request(url: str) -> HttpRequest:
    """Build a bare GET request for fetch and download transfers."""
    return HttpRequest(url=_checked_url(str(url)), method=Method.GET)


__all__ = ["build_request", "build_url_request", "is_absolute_url"]

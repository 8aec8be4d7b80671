# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across netadapter."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

HeaderPair = tuple[str, str]


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    TRACE = "TRACE"
    QUERY = "QUERY"


class CachePolicy(str, Enum):
    """Per-request cache behaviour, expressed to the server via Cache-Control."""

    USE_PROTOCOL_CACHE_POLICY = "USE_PROTOCOL_CACHE_POLICY"
    RELOAD_IGNORING_LOCAL_CACHE_DATA = "RELOAD_IGNORING_LOCAL_CACHE_DATA"
    RETURN_CACHE_DATA_ELSE_LOAD = "RETURN_CACHE_DATA_ELSE_LOAD"
    RETURN_CACHE_DATA_DONT_LOAD = "RETURN_CACHE_DATA_DONT_LOAD"

    @property
    def cache_control(self) -> str | None:
        return _CACHE_CONTROL_DIRECTIVES.get(self)


_CACHE_CONTROL_DIRECTIVES = {
    CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA: "no-cache",
    CachePolicy.RETURN_CACHE_DATA_ELSE_LOAD: "max-stale",
    CachePolicy.RETURN_CACHE_DATA_DONT_LOAD: "only-if-cached",
}

UPLOAD_METHODS = frozenset({Method.POST, Method.PUT})


@dataclass(frozen=True)
class HttpParams:
    """Optional endpoint parameters: body, cache policy, timeout and ordered headers."""

    body: bytes | None = None
    cache_policy: CachePolicy | None = None
    timeout: float | None = None
    headers: tuple[HeaderPair, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", tuple((str(name), str(value)) for name, value in self.headers))

    @classmethod
    def with_json(
        cls,
        value: Any,
        *,
        cache_policy: CachePolicy | None = None,
        timeout: float | None = None,
        headers: Iterable[HeaderPair] = (),
    ) -> HttpParams:
        """Build params whose body is the JSON encoding of ``value``."""
        from .codec import default_codec

        return cls(
            body=default_codec.encode(value),
            cache_policy=cache_policy,
            timeout=timeout,
            headers=tuple(headers),
        )


@dataclass
class HttpRequest:
    """Concrete request consumed by Transport implementations."""

    url: str
    method: Method = Method.GET
    headers: list[HeaderPair] = field(default_factory=list)
    body: bytes | None = None
    timeout: float | None = None
    cache_policy: CachePolicy | None = None

    def without_body(self) -> HttpRequest:
        return replace(self, headers=list(self.headers), body=None)


@dataclass
class HttpResponse:
    """Response metadata returned beside the body by Transport implementations."""

    status_code: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    url: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TransferConfig:
    """
    Per-call transfer options.

    ``None`` fields fall back to the service's default config.
    """

    use_upload: bool | None = None
    auto_validate: bool | None = None

    def resolve(self, defaults: TransferConfig) -> TransferConfig:
        return TransferConfig(
            use_upload=self.use_upload if self.use_upload is not None else bool(defaults.use_upload),
            auto_validate=self.auto_validate if self.auto_validate is not None else defaults.auto_validate is not False,
        )


DEFAULT_TRANSFER_CONFIG = TransferConfig(use_upload=False, auto_validate=True)


def status_code_of(response: Any) -> int | None:
    """Return the HTTP status code a response exposes, or None for non-HTTP responses."""
    status = getattr(response, "status_code", None)
    if isinstance(status, bool) or not isinstance(status, int):
        return None
    return status


__all__ = [
    "CachePolicy",
    "DEFAULT_TRANSFER_CONFIG",
    "HeaderPair",
    "HttpParams",
    "HttpRequest",
    "HttpResponse",
    "Method",
    "TransferConfig",
    "UPLOAD_METHODS",
    "status_code_of",
]

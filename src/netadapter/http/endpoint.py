# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Endpoint descriptors."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from .models import HttpParams, Method


@dataclass(frozen=True)
class EndpointSnapshot:
    """Values of an Endpoint read at dispatch time."""

    method: Method
    base_url: str
    path: str
    params: HttpParams | None = None

    @property
    def url(self) -> str:
        return self.base_url + self.path


class Endpoint:
    """
    Target resource and HTTP method of an API call.

    ``method`` and ``base_url`` are fixed at construction. ``path`` and ``params``
    may be rewritten between calls and are guarded by a lock, so an endpoint can be
    shared across threads; each call works from ``snapshot()``.
    """

    def __init__(self, method: Method | str, base_url: str, path: str = "", params: HttpParams | None = None):
        self._method = Method(method.upper() if isinstance(method, str) else method)
        self._base_url = base_url
        self._path = path
        self._params = params
        self._lock = threading.Lock()

    @property
    def method(self) -> Method:
        return self._method

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def path(self) -> str:
        with self._lock:
            return self._path

    @path.setter
    def path(self, value: str) -> None:
        with self._lock:
            self._path = value

    @property
    def params(self) -> HttpParams | None:
        with self._lock:
            return self._params

    @params.setter
    def params(self, value: HttpParams | None) -> None:
        with self._lock:
            self._params = value

    def update(self, *, path: str | None = None, params: HttpParams | None = None) -> None:
        """Rewrite path and/or params under a single lock acquisition."""
        with self._lock:
            if path is not None:
                self._path = path
            if params is not None:
                self._params = params

    def snapshot(self) -> EndpointSnapshot:
        with self._lock:
            return EndpointSnapshot(self._method, self._base_url, self._path, self._params)

    def __repr__(self) -> str:
        snap = self.snapshot()
        return f"Endpoint({snap.method.value} {snap.url!r})"


__all__ = ["Endpoint", "EndpointSnapshot"]

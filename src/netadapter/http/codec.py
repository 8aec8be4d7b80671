# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
JSON codec for typed payloads.

Target types are anything pydantic can build a TypeAdapter for: dataclasses,
BaseModel subclasses, TypedDicts, builtins and their generics. Malformed input
or a shape mismatch yields None; the codec never raises.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, TypeVar

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Codec(Protocol):
    def decode(self, data: bytes, type_: type[T]) -> T | None: ...

    def encode(self, value: Any) -> bytes | None: ...


class JsonCodec:
    """pydantic-backed JSON codec with a per-type adapter cache."""

    def __init__(self, *, strict: bool = False, by_alias: bool = True):
        self.strict = strict
        self.by_alias = by_alias
        self._adapters: dict[Any, TypeAdapter[Any]] = {}
        self._lock = threading.Lock()

    def _adapter(self, type_: Any) -> TypeAdapter[Any]:
        try:
            with self._lock:
                cached = self._adapters.get(type_)
        except TypeError:
            # unhashable annotation
            return TypeAdapter(type_)
        if cached is not None:
            return cached
        adapter = TypeAdapter(type_)
        with self._lock:
            self._adapters.setdefault(type_, adapter)
        return adapter

    def decode(self, data: bytes, type_: type[T]) -> T | None:
        try:
            return self._adapter(type_).validate_json(data, strict=self.strict)
        except ValidationError as exc:
            logger.debug("Decoding into %r failed: %s", type_, exc.error_count())
            return None
        except PydanticSchemaGenerationError:
            logger.debug("No decoder available for %r", type_)
            return None

    def encode(self, value: Any) -> bytes | None:
        try:
            return self._adapter(type(value)).dump_json(value, by_alias=self.by_alias)
        except (PydanticSerializationError, PydanticSchemaGenerationError) as exc:
            logger.debug("Encoding %r failed: %s", type(value), exc)
            return None


default_codec = JsonCodec()


__all__ = ["Codec", "JsonCodec", "default_codec"]

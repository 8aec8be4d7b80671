# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Call outcome models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from ..errors import NetworkError
from ..http.models import HttpResponse

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Payload of a completed call with the status code and response metadata observed."""

    value: T
    status_code: int | None = None
    response: HttpResponse | None = None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: NetworkError

    @property
    def ok(self) -> bool:
        return False

    @property
    def status_code(self) -> int | None:
        return self.error.status_code

    def unwrap(self) -> Any:
        raise self.error


Outcome = Union[Success[Any], Failure]

__all__ = ["Failure", "Outcome", "Success"]

# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Status-code validation policy."""

from __future__ import annotations

from ..errors import ErrorKind, NetworkError

# Inclusive band of status codes that fail validation: client and server errors.
VALIDATION_BAND = (400, 599)


def is_acceptable_status(status_code: int | None) -> bool:
    if status_code is None:
        return False
    low, high = VALIDATION_BAND
    return not low <= status_code <= high


def validate(
    status_code: int | None,
    data: bytes | None,
    request_enabled: bool,
    global_enabled: bool,
) -> None:
    """
    Raise NetworkError when auto-validation is on at both levels and the status fails.

    A per-call opt-out wins over the global flag, and a missing status code fails
    when validation is active.
    """
    if not request_enabled:
        return
    if not global_enabled:
        return
    if is_acceptable_status(status_code):
        return
    raise NetworkError(status_code=status_code, data=data, kind=ErrorKind.VALIDATION)


__all__ = ["VALIDATION_BAND", "is_acceptable_status", "validate"]

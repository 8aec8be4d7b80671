# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for netadapter."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"netadapter/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _positive_int_env(name: str, default: int) -> int:
    value = _int_env(name, default)
    return value if value > 0 else default


@dataclass
class HttpSettings:
    """Transport and service defaults."""

    timeout: float = 60.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_body_bytes: int = 64 * 1024 * 1024
    chunk_size: int = 64 * 1024
    auto_validate: bool = True
    max_workers: int = 8

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            timeout=_float_env("NETADAPTER_HTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("NETADAPTER_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("NETADAPTER_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("NETADAPTER_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=_positive_int_env("NETADAPTER_HTTP_MAX_BODY_BYTES", cls.max_body_bytes),
            chunk_size=_positive_int_env("NETADAPTER_HTTP_CHUNK_SIZE", cls.chunk_size),
            auto_validate=_bool_env("NETADAPTER_AUTO_VALIDATE", cls.auto_validate),
            max_workers=_positive_int_env("NETADAPTER_MAX_WORKERS", cls.max_workers),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()

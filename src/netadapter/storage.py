# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Filesystem access used to persist downloaded artifacts."""

from __future__ import annotations

import shutil
from contextlib import suppress
from pathlib import Path
from typing import Protocol


class FileSystem(Protocol):
    def exists(self, path: Path) -> bool: ...

    def move_or_copy(self, src: Path, dst: Path) -> None: ...

    def discard(self, path: Path) -> None: ...


class LocalFileSystem(FileSystem):
    """Local disk implementation; moves fall back to copy across devices."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def move_or_copy(self, src: Path, dst: Path) -> None:
        shutil.move(str(src), str(dst))

    def discard(self, path: Path) -> None:
        with suppress(FileNotFoundError):
            Path(path).unlink()


__all__ = ["FileSystem", "LocalFileSystem"]

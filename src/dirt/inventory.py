# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Repository root detection and source inventory."""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

from .constants import ALWAYS_EXCLUDE_DIRS, PYTHON_SUFFIX, VCS_MARKER_DIR, VENDORED_DIRS

_PACKAGE_MARKER = "__init__.py"
_SOURCE_ROOT = "src"


class InventoryError(RuntimeError):
    """Raised when the source tree cannot be inventoried."""


def find_root(path: Path) -> Path:
    """Return the nearest ancestor of ``path`` holding a ``.git`` directory.

    Args:
        path: Directory the search starts from.

    Returns:
        Path: Repository root, or the absolute ``path`` when no marker is found.
    """

    origin = path.resolve()
    for candidate in (origin, *origin.parents):
        if (candidate / VCS_MARKER_DIR).is_dir():
            return candidate
    return origin


def _skip_directory(name: str) -> bool:
    if name.startswith((".", "_")):
        return True
    lowered = name.lower()
    return lowered in VENDORED_DIRS or lowered in ALWAYS_EXCLUDE_DIRS


@dataclass(frozen=True, slots=True)
class _Walk:
    files: tuple[Path, ...]
    directories: tuple[Path, ...]
    packages: tuple[str, ...]


class ProjectInventory:
    """Collect Python packages, directories and files below a repository root."""

    def __init__(self, root: Path) -> None:
        """Create an inventory rooted at ``root``.

        Args:
            root: Repository root; vendored and hidden subtrees are skipped.
        """

        self.root = root.resolve()

    def list_packages(self) -> list[str]:
        """Return dotted names of packages (directories holding ``__init__.py``)."""

        return list(self._walk.packages)

    def list_directories(self) -> list[Path]:
        """Return directories that contain at least one Python source file."""

        return list(self._walk.directories)

    def list_files(self) -> list[Path]:
        """Return every Python source file in the tree."""

        return list(self._walk.files)

    def require_files(self) -> list[Path]:
        """Return :meth:`list_files`, failing when the tree has no sources.

        Raises:
            InventoryError: If no Python files were found.
        """

        files = self.list_files()
        if not files:
            raise InventoryError(f"No Python source files found under {self.root}")
        return files

    @cached_property
    def _walk(self) -> _Walk:
        files: list[Path] = []
        directories: list[Path] = []
        packages: list[str] = []
        for directory, filenames in self._iter_directories():
            sources = sorted(name for name in filenames if name.endswith(PYTHON_SUFFIX))
            if not sources:
                continue
            directories.append(directory)
            files.extend(directory / name for name in sources)
            if _PACKAGE_MARKER in sources:
                package = self._package_name(directory)
                if package:
                    packages.append(package)
        return _Walk(files=tuple(files), directories=tuple(directories), packages=tuple(packages))

    def _iter_directories(self) -> Iterator[tuple[Path, list[str]]]:
        for current, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(name for name in dirnames if not _skip_directory(name))
            yield Path(current), filenames

    def _package_name(self, directory: Path) -> str:
        parts = directory.relative_to(self.root).parts
        if parts and parts[0] == _SOURCE_ROOT:
            parts = parts[1:]
        return ".".join(parts)


__all__ = ["InventoryError", "ProjectInventory", "find_root"]

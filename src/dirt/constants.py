# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core constants shared by the lint runner."""

from __future__ import annotations

from typing import Final

LOCK_FILE_NAME: Final[str] = ".dirtlock"
SUPPRESSION_MARKER: Final[str] = "@allow"
DISALLOW_SOURCE: Final[str] = "disallow"
TIMEOUT_NOTICE: Final[str] = "*** Timeout exceeded ***"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 300.0
PROBLEM_QUEUE_SIZE: Final[int] = 16
VCS_MARKER_DIR: Final[str] = ".git"
PYTHON_SUFFIX: Final[str] = ".py"

VENDORED_DIRS: Final[frozenset[str]] = frozenset({"vendor", "third_party", "testdata"})

ALWAYS_EXCLUDE_DIRS: Final[frozenset[str]] = frozenset(
    {
        "node_modules",
        "venv",
        "env",
        "dist",
        "build",
        "site-packages",
        "coverage",
    }
)

__all__ = [
    "ALWAYS_EXCLUDE_DIRS",
    "DEFAULT_TIMEOUT_SECONDS",
    "DISALLOW_SOURCE",
    "LOCK_FILE_NAME",
    "PROBLEM_QUEUE_SIZE",
    "PYTHON_SUFFIX",
    "SUPPRESSION_MARKER",
    "TIMEOUT_NOTICE",
    "VCS_MARKER_DIR",
    "VENDORED_DIRS",
]

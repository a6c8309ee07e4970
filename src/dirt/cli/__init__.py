# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""dirt CLI package exports."""

from __future__ import annotations

from typing import Final

from .app import app, main
from .options import LintOptions

__all__: Final[list[str]] = ["LintOptions", "app", "main"]

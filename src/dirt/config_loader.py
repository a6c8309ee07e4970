# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Load project defaults from ``[tool.dirt]`` within ``pyproject.toml``."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .config import ConfigError, DirtSettings

CONFIG_KEY: Final[str] = "dirt"
PYPROJECT_NAME: Final[str] = "pyproject.toml"


def _read_tool_table(path: Path) -> Mapping[str, Any]:
    """Return the ``[tool.dirt]`` table of ``path`` or an empty mapping.

    Args:
        path: Location of a ``pyproject.toml`` document.

    Returns:
        Mapping[str, Any]: Raw configuration values.

    Raises:
        ConfigError: If the document is not valid TOML or the table is malformed.
    """

    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    tool = data.get("tool", {})
    if not isinstance(tool, MutableMapping):
        return {}
    section = tool.get(CONFIG_KEY, {})
    if not isinstance(section, MutableMapping):
        raise ConfigError(f"[tool.{CONFIG_KEY}] in {path} must be a table")
    return section


def load_settings(root: Path) -> DirtSettings:
    """Return the project settings stored under ``root``.

    Args:
        root: Repository root holding ``pyproject.toml``.

    Returns:
        DirtSettings: Validated settings; defaults when the table is absent.

    Raises:
        ConfigError: If the configuration cannot be parsed or validated.
    """

    path = root / PYPROJECT_NAME
    raw = _read_tool_table(path)
    try:
        return DirtSettings.model_validate(dict(raw))
    except ValidationError as exc:
        raise ConfigError(f"Invalid [tool.{CONFIG_KEY}] configuration in {path}: {exc}") from exc


__all__ = ["CONFIG_KEY", "load_settings"]

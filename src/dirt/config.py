# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and helpers for the dirt lint runner."""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_TIMEOUT_SECONDS


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


_DURATION_PART: Final[re.Pattern[str]] = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|h|m|s)")
_DURATION_UNITS: Final[dict[str, float]] = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value: str | float | int) -> float:
    """Return the number of seconds described by ``value``.

    Accepts plain numbers (seconds) and compound durations such as ``90s``,
    ``5m`` or ``1h30m``.

    Args:
        value: Duration text or a numeric amount of seconds.

    Returns:
        float: Positive duration in seconds.

    Raises:
        ConfigError: If ``value`` cannot be parsed or is not positive.
    """

    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            seconds = _parse_compound_duration(text)
    if seconds <= 0:
        raise ConfigError(f"duration must be positive: {value!r}")
    return seconds


def _parse_compound_duration(text: str) -> float:
    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position == 0 or position != len(text):
        raise ConfigError(f"invalid duration: {text!r}")
    return total


def default_parallel_jobs() -> int:
    """Return the available hardware concurrency (minimum of 1)."""
    return os.cpu_count() or 1


class ConcurrencyMode(str, Enum):
    """Dispatch strategy used by the execution engine."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class RunConfig(BaseModel):
    """Inputs for one lint invocation, built once from the project inventory."""

    model_config = ConfigDict(frozen=True)

    repo_root: Path
    working_dir: Path
    packages: tuple[str, ...] = ()
    directories: tuple[Path, ...] = ()
    files: tuple[Path, ...] = ()
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    mode: ConcurrencyMode = ConcurrencyMode.SEQUENTIAL
    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)


class DisallowPolicy(BaseModel):
    """Deny-lists enforced by the disallow checker."""

    model_config = ConfigDict(frozen=True)

    imports: frozenset[str] = frozenset()
    calls: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when neither deny-list has entries."""

        return not (self.imports or self.calls)


class NoiseRules(BaseModel):
    """Patterns identifying tool output that never counts as a problem."""

    model_config = ConfigDict(frozen=True)

    prefixes: tuple[str, ...] = ("vendor", "third_party")
    generated_markers: tuple[str, ...] = ("_pb2.py", "_pb2_grpc.py")
    benign_codes: tuple[str, ...] = ("[annotation-unchecked]",)
    chatter: tuple[str, ...] = (
        "Success: no issues found",
        "All checks passed!",
        "Your code has been rated at",
        "************* Module ",
    )

    def extended(self, *, prefixes: list[str], substrings: list[str]) -> NoiseRules:
        """Return a copy with additional prefixes and chatter substrings.

        Args:
            prefixes: Extra line prefixes that mark vendored output.
            substrings: Extra substrings that mark noise lines.

        Returns:
            NoiseRules: New rules instance including the extra patterns.
        """

        return self.model_copy(
            update={
                "prefixes": (*self.prefixes, *prefixes),
                "chatter": (*self.chatter, *substrings),
            }
        )

    def matches(self, text: str) -> bool:
        """Return ``True`` when ``text`` is noise."""

        if text.startswith(self.prefixes):
            return True
        return any(needle in text for needle in (*self.generated_markers, *self.benign_codes, *self.chatter))


class DirtSettings(BaseModel):
    """Project defaults read from ``[tool.dirt]`` in ``pyproject.toml``."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=lambda name: name.replace("_", "-"),
    )

    timeout: float | None = None
    fast_only: bool = False
    parallel: bool = False
    jobs: int | None = Field(default=None, ge=1)
    disallow_imports: list[str] = Field(default_factory=list)
    disallow_functions: list[str] = Field(default_factory=list)
    noise_prefixes: list[str] = Field(default_factory=list)
    noise_substrings: list[str] = Field(default_factory=list)

    @field_validator("timeout", mode="before")
    @classmethod
    def _coerce_timeout(cls, value: object) -> float | None:
        if value is None:
            return None
        if isinstance(value, (str, int, float)):
            try:
                return parse_duration(value)
            except ConfigError as exc:
                raise ValueError(str(exc)) from exc
        raise ValueError(f"invalid duration: {value!r}")


__all__ = [
    "ConcurrencyMode",
    "ConfigError",
    "DirtSettings",
    "DisallowPolicy",
    "NoiseRules",
    "RunConfig",
    "default_parallel_jobs",
    "parse_duration",
]

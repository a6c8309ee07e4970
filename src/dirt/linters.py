# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Linter descriptors and the built-in fast/slow catalog."""

from __future__ import annotations

import shutil
import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Final, TypeAlias

from .config import RunConfig
from .logging import ok
from .process_utils import SubprocessExecutionError, run_command


class InstallError(RuntimeError):
    """Raised when an external linter cannot be installed."""


@dataclass(frozen=True, slots=True)
class Literal:
    """Argument passed through unchanged."""

    value: str


@dataclass(frozen=True, slots=True)
class RepoRoot:
    """Placeholder replaced by the repository root."""


@dataclass(frozen=True, slots=True)
class PackageList:
    """Placeholder replaced by every discovered package name."""


@dataclass(frozen=True, slots=True)
class DirList:
    """Placeholder replaced by every discovered source directory."""


@dataclass(frozen=True, slots=True)
class FileList:
    """Placeholder replaced by every discovered source file."""


Argument: TypeAlias = Literal | RepoRoot | PackageList | DirList | FileList

REPO: Final[RepoRoot] = RepoRoot()
PKGS: Final[PackageList] = PackageList()
DIRS: Final[DirList] = DirList()
FILES: Final[FileList] = FileList()


def resolve_arguments(args: Sequence[Argument], config: RunConfig) -> Iterator[str]:
    """Yield concrete command-line arguments for ``args``.

    Args:
        args: Argument template mixing literals and placeholders.
        config: Run configuration supplying the placeholder values.

    Yields:
        str: Flattened argument values in template order.
    """

    for arg in args:
        match arg:
            case Literal(value=value):
                yield value
            case RepoRoot():
                yield str(config.repo_root)
            case PackageList():
                yield from config.packages
            case DirList():
                yield from (str(path) for path in config.directories)
            case FileList():
                yield from (str(path) for path in config.files)


@dataclass(frozen=True, slots=True)
class LinterDescriptor:
    """Static definition of one external analysis command."""

    executable: str
    args: tuple[Argument, ...] = ()
    requirement: str | None = None
    label: str | None = None

    @classmethod
    def of(
        cls,
        executable: str,
        *args: str | Argument,
        requirement: str | None = None,
        label: str | None = None,
    ) -> LinterDescriptor:
        """Build a descriptor treating plain strings as literal arguments."""

        converted = tuple(Literal(arg) if isinstance(arg, str) else arg for arg in args)
        return cls(executable=executable, args=converted, requirement=requirement, label=label)

    @property
    def name(self) -> str:
        """Return the human-readable name used to tag output lines."""

        if self.label:
            return self.label
        if self._is_module_invocation():
            module = self.args[1]
            if isinstance(module, Literal):
                return module.value
        return self.executable

    def command(self, config: RunConfig) -> list[str]:
        """Return the full command line for ``config``."""

        return [self.executable, *resolve_arguments(self.args, config)]

    def _is_module_invocation(self) -> bool:
        if not self.executable.startswith("python") and self.executable != sys.executable:
            return False
        return len(self.args) > 1 and self.args[0] == Literal("-m")


FAST_LINTERS: Final[tuple[LinterDescriptor, ...]] = (
    LinterDescriptor.of(
        "ruff", "check", "--quiet", "--output-format", "concise", FILES, requirement="ruff"
    ),
    LinterDescriptor.of("black", "--check", "--quiet", FILES, requirement="black"),
    LinterDescriptor.of("isort", "--check-only", "--quiet", FILES, requirement="isort"),
    LinterDescriptor.of("pyflakes", FILES, requirement="pyflakes"),
    LinterDescriptor.of("codespell", "--quiet-level", "2", FILES, requirement="codespell"),
    LinterDescriptor.of(sys.executable, "-m", "compileall", "-q", DIRS),
)

SLOW_LINTERS: Final[tuple[LinterDescriptor, ...]] = (
    LinterDescriptor.of(
        "mypy", "--no-error-summary", "--show-column-numbers", FILES, requirement="mypy"
    ),
    LinterDescriptor.of(
        "pylint", "--output-format=parseable", "--score=n", FILES, requirement="pylint"
    ),
    LinterDescriptor.of(
        "bandit",
        "-q",
        "--format",
        "custom",
        "--msg-template",
        "{relpath}:{line}:{col}: {test_id} {msg}",
        FILES,
        requirement="bandit",
    ),
    LinterDescriptor.of("vulture", DIRS, requirement="vulture"),
)


def select_linters(fast_only: bool) -> tuple[LinterDescriptor, ...]:
    """Return the fast group, or the fast group followed by the slow group."""

    if fast_only:
        return FAST_LINTERS
    return (*FAST_LINTERS, *SLOW_LINTERS)


def install(descriptor: LinterDescriptor, *, force: bool = False) -> bool:
    """Install the package providing ``descriptor`` with pip.

    Args:
        descriptor: Linter whose executable should be available.
        force: Reinstall even when the executable is already on ``PATH``.

    Returns:
        bool: ``True`` when pip was invoked, ``False`` when nothing was needed.

    Raises:
        InstallError: If pip fails to install the requirement.
    """

    if descriptor.requirement is None:
        return False
    if not force and shutil.which(descriptor.executable) is not None:
        return False
    cmd = [sys.executable, "-m", "pip", "install", "--upgrade", descriptor.requirement]
    if force:
        cmd.insert(-1, "--force-reinstall")
    try:
        run_command(cmd)
    except (SubprocessExecutionError, OSError) as exc:
        raise InstallError(f"Unable to install {descriptor.name}\n{exc}") from exc
    ok(f"Installed {descriptor.name}")
    return True


__all__ = [
    "DIRS",
    "FAST_LINTERS",
    "FILES",
    "PKGS",
    "REPO",
    "SLOW_LINTERS",
    "Argument",
    "DirList",
    "FileList",
    "InstallError",
    "LinterDescriptor",
    "Literal",
    "PackageList",
    "RepoRoot",
    "install",
    "select_linters",
]

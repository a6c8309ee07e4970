# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lint command implementation."""

from __future__ import annotations

from pathlib import Path

import typer

from ..arbiter import LockAcquisitionError
from ..config import ConfigError, parse_duration
from ..inventory import InventoryError
from ..linters import FAST_LINTERS, SLOW_LINTERS, InstallError, select_linters
from ..logging import fail, plain
from .options import LintOptions
from .runtime import run_lint


def describe_linters() -> str:
    """Return the command help text naming both linter groups."""

    fast = ", ".join(descriptor.name for descriptor in FAST_LINTERS)
    slow = ", ".join(descriptor.name for descriptor in SLOW_LINTERS)
    return (
        'Run linting checks against Python code. Two groups of linters are executed, a "fast" '
        f'group and a "slow" group. The fast group consists of {fast}. The slow group consists of {slow}.'
    )


def _parse_timeout(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return parse_duration(value)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc


def lint_command(
    fast_only: bool | None = typer.Option(
        None,
        "--fast-only/--all",
        "-f",
        help="When set, only the fast linters are run.",
    ),
    timeout: str | None = typer.Option(
        None,
        "--timeout",
        "-t",
        metavar="DURATION",
        help=(
            "Sets the timeout (e.g. 90s, 5m, 1h30m). If the linters run longer than this, "
            "they will be terminated and an error will be returned."
        ),
    ),
    one: bool = typer.Option(
        False,
        "--one",
        "-o",
        help="When set, only the last started invocation for the repo will complete; any others will be terminated.",
    ),
    reinstall: bool = typer.Option(False, "--reinstall", help="Force reinstallation of the external linters."),
    parallel: bool | None = typer.Option(
        None,
        "--parallel/--sequential",
        "-p",
        help="Run the linters in parallel.",
    ),
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Worker count for parallel runs."),
    disallow_import: list[str] | None = typer.Option(
        None,
        "--disallow-import",
        metavar="IMPORT",
        help="Disallow an import path. May be repeated.",
    ),
    disallow_function: list[str] | None = typer.Option(
        None,
        "--disallow-function",
        metavar="NAME",
        help='Disallow a function or "module.function" call. May be repeated.',
    ),
    list_linters: bool = typer.Option(False, "--list-linters", help="List the selected linters and exit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace linter start and finish."),
) -> None:
    """Typer entry point for the ``dirt`` command."""

    if list_linters:
        for descriptor in select_linters(bool(fast_only)):
            plain(descriptor.name)
        raise typer.Exit(code=0)

    options = LintOptions(
        working_dir=Path.cwd(),
        fast_only=fast_only,
        timeout=_parse_timeout(timeout),
        one=one,
        reinstall=reinstall,
        parallel=parallel,
        jobs=jobs,
        disallow_imports=tuple(disallow_import or ()),
        disallow_functions=tuple(disallow_function or ()),
        verbose=verbose,
    )
    try:
        exit_code = run_lint(options)
    except (ConfigError, InventoryError, InstallError, LockAcquisitionError) as exc:
        fail(str(exc))
        raise typer.Exit(code=1) from exc
    raise typer.Exit(code=exit_code)


__all__ = ["describe_linters", "lint_command"]

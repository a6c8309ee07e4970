# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

import typer

from .lint import describe_linters, lint_command

app = typer.Typer(
    name="dirt",
    help="Run a configurable set of linters against a Python source tree.",
    add_completion=False,
    no_args_is_help=False,
)
app.command(name="lint", help=describe_linters())(lint_command)


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main"]

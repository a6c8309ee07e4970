# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; linters are executed from argument
# lists with ``shell=True`` disabled.
import subprocess  # nosec B404
from collections.abc import Sequence
from pathlib import Path


class SubprocessExecutionError(RuntimeError):
    """Raised when a checked subprocess exits with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. stderr: {stderr or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def resolve_command(args: Sequence[str]) -> list[str]:
    """Return ``args`` with the executable resolved to an absolute path.

    Args:
        args: Command where the first item names the executable.

    Returns:
        list[str]: Command with the executable replaced by its resolved path.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If the executable cannot be located on ``PATH``.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def spawn(args: Sequence[str], *, cwd: Path | None = None) -> subprocess.Popen[str]:
    """Start ``args`` with both output streams piped back as text.

    Args:
        args: Command to execute including executable and arguments.
        cwd: Optional working directory for the child process.

    Returns:
        subprocess.Popen[str]: Handle for the running child process.

    Raises:
        OSError: If the executable is missing or the process cannot start.
    """

    normalized = resolve_command(args)
    # Bandit: argument lists come from linter descriptors; no shell expansion.
    return subprocess.Popen(  # nosec B603
        normalized,
        cwd=str(cwd) if cwd is not None else None,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
        bufsize=1,
    )


def run_command(args: Sequence[str]) -> subprocess.CompletedProcess[str]:
    """Execute ``args`` to completion after resolving the executable path.

    Args:
        args: Command to execute.

    Returns:
        subprocess.CompletedProcess[str]: Completed process with captured output.

    Raises:
        SubprocessExecutionError: If the command exits with a non-zero status.
    """

    normalized = resolve_command(args)
    completed: subprocess.CompletedProcess[str] = subprocess.run(  # nosec B603
        normalized,
        check=False,
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
    )
    if completed.returncode != 0:
        raise SubprocessExecutionError(
            normalized,
            completed.returncode,
            completed.stdout,
            completed.stderr,
        )
    return completed


__all__ = ["SubprocessExecutionError", "resolve_command", "run_command", "spawn"]

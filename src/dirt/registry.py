# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Process-wide registry of running linter processes.

The registry map is owned by a single daemon thread. Callers never touch it
directly: ``add``, ``remove`` and ``kill_all`` post commands to the owner's
queue, so concurrent spawns and exits are applied one at a time without a
mutex around the map.
"""

from __future__ import annotations

import queue
import subprocess  # nosec B404
import threading
from contextlib import suppress
from dataclasses import dataclass, field
from functools import lru_cache


@dataclass(frozen=True, slots=True)
class _Add:
    process: subprocess.Popen[str]


@dataclass(frozen=True, slots=True)
class _Remove:
    process: subprocess.Popen[str]


@dataclass(slots=True)
class _Reply:
    """Command answered by the owner thread once it has been applied."""

    done: threading.Event = field(default_factory=threading.Event)
    value: int = 0

    def wait(self) -> int:
        self.done.wait()
        return self.value


@dataclass(slots=True)
class _KillAll(_Reply):
    pass


@dataclass(slots=True)
class _Count(_Reply):
    pass


_Command = _Add | _Remove | _KillAll | _Count


class ProcessRegistry:
    """Track every external process spawned by the engine."""

    def __init__(self) -> None:
        self._commands: queue.Queue[_Command] = queue.Queue()
        self._thread = threading.Thread(target=self._serve, name="dirt-process-registry", daemon=True)
        self._thread.start()

    def add(self, process: subprocess.Popen[str]) -> None:
        """Register ``process`` so that :meth:`kill_all` can reach it."""

        self._commands.put(_Add(process))

    def remove(self, process: subprocess.Popen[str]) -> None:
        """Forget ``process`` once it has exited."""

        self._commands.put(_Remove(process))

    def kill_all(self) -> int:
        """Force-terminate every registered process and clear the registry.

        Returns:
            int: Number of processes that were signalled.
        """

        return self._request(_KillAll())

    def __len__(self) -> int:
        return self._request(_Count())

    def _request(self, command: _KillAll | _Count) -> int:
        self._commands.put(command)
        return command.wait()

    def _serve(self) -> None:
        running: dict[int, subprocess.Popen[str]] = {}
        while True:
            command = self._commands.get()
            match command:
                case _Add(process=process):
                    running[id(process)] = process
                case _Remove(process=process):
                    running.pop(id(process), None)
                case _KillAll():
                    try:
                        for process in running.values():
                            with suppress(OSError):
                                process.kill()
                        command.value = len(running)
                        running.clear()
                    finally:
                        command.done.set()
                case _Count():
                    command.value = len(running)
                    command.done.set()


@lru_cache(maxsize=1)
def get_process_registry() -> ProcessRegistry:
    """Return the process-wide :class:`ProcessRegistry`."""

    return ProcessRegistry()


__all__ = ["ProcessRegistry", "get_process_registry"]

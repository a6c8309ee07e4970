# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Repository-scoped ownership lock with eviction of the previous holder."""

from __future__ import annotations

import os
import signal
import tempfile
import time
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .constants import LOCK_FILE_NAME

PidProbe = Callable[[int], bool]
PidSignal = Callable[[int], None]
Sleeper = Callable[[float], None]


class LockAcquisitionError(RuntimeError):
    """Raised when a bounded acquisition runs out of attempts."""


class LockState(Enum):
    """States of the acquisition state machine."""

    UNLOCKED = "unlocked"
    LOCKED_BY_SELF = "locked-by-self"
    CONTESTED_BY_OTHER = "contested-by-other"


def lock_path(repo_root: Path) -> Path:
    """Return the ownership marker location for ``repo_root``."""

    return repo_root / LOCK_FILE_NAME


def is_process_alive(pid: int) -> bool:
    """Return ``True`` when ``pid`` names a running process."""

    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def send_interrupt(pid: int) -> None:
    """Ask ``pid`` to shut down; a vanished process is ignored."""

    with suppress(ProcessLookupError):
        os.kill(pid, signal.SIGINT)


def read_holder(path: Path) -> int | None:
    """Return the pid recorded in the marker at ``path``, if readable."""

    try:
        return int(path.read_text(encoding="utf-8").strip())
    except (OSError, ValueError):
        return None


@dataclass(slots=True)
class LockHandle:
    """Ownership of a repository; :meth:`release` removes the marker."""

    path: Path
    pid: int
    released: bool = field(default=False)

    def release(self) -> None:
        """Remove the marker if it still names this process. Idempotent."""

        if self.released:
            return
        self.released = True
        if read_holder(self.path) != self.pid:
            return
        with suppress(FileNotFoundError):
            self.path.unlink()

    def __enter__(self) -> LockHandle:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.release()


class InstanceArbiter:
    """Acquire the per-repository ownership lock, evicting any previous holder.

    Acquisition retries until it succeeds unless ``max_attempts`` is set. A
    holder that is still alive receives ``SIGINT``; its own shutdown sequence
    kills the linters it started and releases its marker. Backoff between
    contested attempts grows exponentially from ``initial_backoff`` up to
    ``max_backoff``.
    """

    def __init__(
        self,
        *,
        max_attempts: int | None = None,
        initial_backoff: float = 0.05,
        max_backoff: float = 1.0,
        pid: int | None = None,
        probe: PidProbe = is_process_alive,
        interrupt: PidSignal = send_interrupt,
        sleep: Sleeper = time.sleep,
    ) -> None:
        """Create an arbiter.

        Args:
            max_attempts: Optional cap on acquisition attempts; ``None`` retries forever.
            initial_backoff: First wait, in seconds, after evicting a live holder.
            max_backoff: Upper bound for the wait between attempts.
            pid: Identity written into the marker; defaults to this process.
            probe: Callable reporting whether a pid is alive.
            interrupt: Callable asking a pid to shut down.
            sleep: Callable used to wait between polls.
        """

        self.max_attempts = max_attempts
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self.pid = os.getpid() if pid is None else pid
        self.state = LockState.UNLOCKED
        self._probe = probe
        self._interrupt = interrupt
        self._sleep = sleep

    def acquire_exclusive(self, repo_root: Path) -> LockHandle:
        """Return a handle once this process owns ``repo_root``.

        Args:
            repo_root: Repository whose marker should be created.

        Returns:
            LockHandle: Handle whose release removes the marker.

        Raises:
            LockAcquisitionError: If ``max_attempts`` is exhausted.
            OSError: If the marker cannot be created for reasons other than contention.
        """

        path = lock_path(repo_root)
        backoff = self.initial_backoff
        attempts = 0
        while True:
            attempts += 1
            if self._try_create(path):
                self.state = LockState.LOCKED_BY_SELF
                return LockHandle(path=path, pid=self.pid)
            self.state = LockState.CONTESTED_BY_OTHER
            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise LockAcquisitionError(f"Unable to acquire {path} after {attempts} attempts")
            if self._evict(path, backoff):
                backoff = min(backoff * 2, self.max_backoff)
            self.state = LockState.UNLOCKED

    def _try_create(self, path: Path) -> bool:
        """Publish a marker naming this process, failing if one already exists.

        The pid is written to a private file first and hard-linked into place,
        so the marker never exists without its content.
        """

        fd, staged = tempfile.mkstemp(dir=path.parent, prefix=f"{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(str(self.pid))
            try:
                os.link(staged, path)
            except FileExistsError:
                return False
            return True
        finally:
            _unlink_quietly(Path(staged))

    def _evict(self, path: Path, wait: float) -> bool:
        """Remove the current holder of ``path``.

        Returns:
            bool: ``True`` when a live holder had to be interrupted.
        """

        holder = read_holder(path)
        if holder is None and not path.exists():
            return False
        if holder is None or holder == self.pid or not self._probe(holder):
            _unlink_quietly(path)
            return False
        self._interrupt(holder)
        self._await_release(path, holder, wait)
        _unlink_quietly(path)
        return True

    def _await_release(self, path: Path, holder: int, wait: float) -> None:
        step = min(wait, 0.01)
        waited = 0.0
        while waited < wait and path.exists() and self._probe(holder):
            self._sleep(step)
            waited += step


def _unlink_quietly(path: Path) -> None:
    with suppress(FileNotFoundError):
        path.unlink()


__all__ = [
    "InstanceArbiter",
    "LockAcquisitionError",
    "LockHandle",
    "LockState",
    "is_process_alive",
    "lock_path",
    "read_holder",
    "send_interrupt",
]

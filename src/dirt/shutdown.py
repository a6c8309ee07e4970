# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""One-shot shutdown sequence shared by interrupts, exit and normal completion."""

from __future__ import annotations

import atexit
import signal
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from types import FrameType
from typing import Final

from .logging import warn

ShutdownStep = Callable[[], object]
SignalHandler = Callable[[int, FrameType | None], object] | int | None

DEFAULT_SIGNALS: Final[tuple[signal.Signals, ...]] = (signal.SIGINT, signal.SIGTERM)
INTERRUPTED_EXIT_CODE: Final[int] = 1


class ShutdownCoordinator:
    """Run registered shutdown steps exactly once, in registration order."""

    def __init__(self, *, exit_code: int = INTERRUPTED_EXIT_CODE) -> None:
        self.exit_code = exit_code
        self._steps: list[tuple[str, ShutdownStep]] = []
        self._lock = threading.Lock()
        self._done = False
        self._previous: dict[signal.Signals, SignalHandler] = {}

    @property
    def done(self) -> bool:
        return self._done

    def register(self, name: str, step: ShutdownStep) -> None:
        """Append ``step`` to the shutdown sequence.

        Args:
            name: Label used when the step fails.
            step: Zero-argument callable run during shutdown.
        """

        self._steps.append((name, step))

    def shutdown(self) -> None:
        """Run every registered step once; later calls are no-ops."""

        with self._lock:
            if self._done:
                return
            self._done = True
            steps = list(self._steps)
        for name, step in steps:
            try:
                step()
            except (OSError, RuntimeError) as exc:
                warn(f"Shutdown step '{name}' failed: {exc}")

    def install(self, signals: tuple[signal.Signals, ...] = DEFAULT_SIGNALS) -> None:
        """Route ``signals`` and interpreter exit through :meth:`shutdown`."""

        for signum in signals:
            self._previous[signum] = signal.getsignal(signum)
            signal.signal(signum, self._handle_signal)
        atexit.register(self.shutdown)

    def uninstall(self) -> None:
        """Restore the signal handlers replaced by :meth:`install`."""

        for signum, handler in self._previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
        self._previous.clear()
        atexit.unregister(self.shutdown)

    @contextmanager
    def installed(self, signals: tuple[signal.Signals, ...] = DEFAULT_SIGNALS) -> Iterator[ShutdownCoordinator]:
        """Install handlers for the duration of the block, then shut down."""

        self.install(signals)
        try:
            yield self
        finally:
            self.shutdown()
            self.uninstall()

    def _handle_signal(self, signum: int, _frame: FrameType | None) -> None:
        self.shutdown()
        raise SystemExit(self.exit_code)


__all__ = ["DEFAULT_SIGNALS", "ShutdownCoordinator"]

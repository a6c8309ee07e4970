# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Execution engine running linter descriptors under a shared deadline."""

from __future__ import annotations

import subprocess  # nosec B404
import threading
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from functools import partial
from typing import IO

from .config import ConcurrencyMode, RunConfig
from .constants import TIMEOUT_NOTICE
from .linters import LinterDescriptor
from .process_utils import spawn
from .registry import ProcessRegistry, get_process_registry
from .reporting import ReportingPipeline

SpawnFn = Callable[..., subprocess.Popen[str]]


class DescriptorOutcome(Enum):
    """How a single descriptor's turn ended."""

    COMPLETED = "completed"
    SPAWN_FAILED = "spawn-failed"
    KILLED = "killed"
    SKIPPED = "skipped"


class _Deadline:
    """Watchdog that kills every registered process once the run times out."""

    def __init__(self, seconds: float, registry: ProcessRegistry) -> None:
        self.expired = threading.Event()
        self.killed = 0
        self._registry = registry
        self._timer = threading.Timer(seconds, self._expire)
        self._timer.daemon = True

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        """Disarm the watchdog and wait for a callback already in flight."""

        self._timer.cancel()
        self._timer.join()

    def _expire(self) -> None:
        self.expired.set()
        self.killed = self._registry.kill_all()


def _drain(stream: IO[str], source: str, pipeline: ReportingPipeline) -> None:
    """Forward each line of ``stream`` to ``pipeline`` until end-of-stream."""

    with stream:
        for raw in stream:
            pipeline.report(source, raw.rstrip("\r\n"))


class ExecutionEngine:
    """Run linter descriptors and fold their output into one exit status."""

    def __init__(
        self,
        pipeline: ReportingPipeline,
        *,
        registry: ProcessRegistry | None = None,
        spawner: SpawnFn | None = None,
        debug_logger: Callable[[str], None] | None = None,
    ) -> None:
        """Create an engine reporting through ``pipeline``.

        Args:
            pipeline: Reporting pipeline receiving every output line.
            registry: Registry tracking spawned processes; defaults to the
                process-wide registry.
            spawner: Callable starting a command; defaults to :func:`spawn`.
            debug_logger: Optional callable receiving trace messages.
        """

        self.pipeline = pipeline
        self._registry = registry if registry is not None else get_process_registry()
        self._spawn = spawner or spawn
        self._debug_logger = debug_logger

    def run(self, descriptors: Sequence[LinterDescriptor], config: RunConfig) -> int:
        """Run ``descriptors`` and return the process exit code.

        Args:
            descriptors: Linters to execute, in catalog order.
            config: Run configuration supplying paths, deadline and mode.

        Returns:
            int: ``1`` when any problem was reported, a tool failed or the
            deadline cut the run short; ``0`` otherwise.
        """

        self.pipeline.start()
        deadline = _Deadline(config.timeout, self._registry)
        deadline.start()
        try:
            if config.mode is ConcurrencyMode.PARALLEL:
                outcomes = self._execute_in_parallel(descriptors, config, deadline.expired)
            else:
                outcomes = self._execute_serial(descriptors, config, deadline.expired)
        finally:
            deadline.stop()

        timed_out = deadline.expired.is_set() and (
            deadline.killed > 0
            or any(outcome in (DescriptorOutcome.KILLED, DescriptorOutcome.SKIPPED) for outcome in outcomes)
        )
        if timed_out:
            self.pipeline.mark_dirty()
        self.pipeline.close()
        status = self.pipeline.wait()
        if timed_out:
            self.pipeline.notice(TIMEOUT_NOTICE)
        return status.exit_code()

    def _execute_serial(
        self,
        descriptors: Iterable[LinterDescriptor],
        config: RunConfig,
        expired: threading.Event,
    ) -> list[DescriptorOutcome]:
        outcomes: list[DescriptorOutcome] = []
        for descriptor in descriptors:
            outcomes.append(self.run_descriptor(descriptor, config, expired))
        return outcomes

    def _execute_in_parallel(
        self,
        descriptors: Iterable[LinterDescriptor],
        config: RunConfig,
        expired: threading.Event,
    ) -> list[DescriptorOutcome]:
        runner = partial(self.run_descriptor, config=config, expired=expired)
        outcomes: list[DescriptorOutcome] = []
        with ThreadPoolExecutor(max_workers=config.jobs, thread_name_prefix="dirt-worker") as executor:
            futures = [executor.submit(runner, descriptor) for descriptor in descriptors]
            for future in as_completed(futures):
                outcomes.append(future.result())
        return outcomes

    def run_descriptor(
        self,
        descriptor: LinterDescriptor,
        config: RunConfig,
        expired: threading.Event,
    ) -> DescriptorOutcome:
        """Run one descriptor to completion, streaming its output.

        Args:
            descriptor: Linter to execute.
            config: Run configuration used to resolve arguments.
            expired: Event set once the shared deadline has passed.

        Returns:
            DescriptorOutcome: How the descriptor's turn ended.
        """

        if expired.is_set():
            self._debug(f"skipped {descriptor.name}: deadline expired")
            return DescriptorOutcome.SKIPPED

        cmd = descriptor.command(config)
        self._debug(f"starting {descriptor.name}: {' '.join(cmd)}")
        try:
            process = self._spawn(cmd, cwd=config.working_dir)
        except (OSError, ValueError) as exc:
            self.pipeline.report(descriptor.name, str(exc))
            return DescriptorOutcome.SPAWN_FAILED

        self._registry.add(process)
        killed = False
        if expired.is_set():
            process.kill()
            killed = True
        try:
            self._wait_for_output(process, descriptor.name)
            returncode = process.wait()
        finally:
            self._registry.remove(process)

        self._debug(f"finished {descriptor.name} with status {returncode}")
        if returncode != 0:
            self.pipeline.mark_dirty()
        return DescriptorOutcome.KILLED if killed else DescriptorOutcome.COMPLETED

    def _wait_for_output(self, process: subprocess.Popen[str], source: str) -> None:
        readers = [
            threading.Thread(target=_drain, args=(stream, source, self.pipeline), daemon=True)
            for stream in (process.stdout, process.stderr)
            if stream is not None
        ]
        for reader in readers:
            reader.start()
        for reader in readers:
            reader.join()

    def _debug(self, message: str) -> None:
        if self._debug_logger:
            self._debug_logger(message)


__all__ = ["DescriptorOutcome", "ExecutionEngine", "SpawnFn"]

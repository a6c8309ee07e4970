# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Wire inventory, arbitration, checking and execution into one lint run."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

from ..arbiter import InstanceArbiter
from ..config import NoiseRules, RunConfig
from ..config_loader import load_settings
from ..disallow import DisallowChecker
from ..engine import ExecutionEngine
from ..inventory import ProjectInventory, find_root
from ..linters import LinterDescriptor, install, select_linters
from ..logging import info
from ..registry import ProcessRegistry, get_process_registry
from ..reporting import Emitter, ReportingPipeline
from ..shutdown import ShutdownCoordinator
from .options import LintOptions

LinterSelector = Callable[[bool], Sequence[LinterDescriptor]]


def build_run_config(inventory: ProjectInventory, working_dir: Path, **values: object) -> RunConfig:
    """Return the :class:`RunConfig` for ``inventory``.

    Args:
        inventory: Source inventory of the repository.
        working_dir: Directory the invocation started from.
        **values: Optional ``timeout``, ``mode`` and ``jobs`` overrides; ``None``
            values fall back to model defaults.

    Returns:
        RunConfig: Immutable configuration for the engine.

    Raises:
        InventoryError: If the repository holds no Python files.
    """

    files = inventory.require_files()
    overrides = {key: value for key, value in values.items() if value is not None}
    return RunConfig(
        repo_root=inventory.root,
        working_dir=working_dir,
        packages=tuple(inventory.list_packages()),
        directories=tuple(inventory.list_directories()),
        files=tuple(files),
        **overrides,
    )


def run_lint(
    options: LintOptions,
    *,
    selector: LinterSelector | None = None,
    emit: Emitter | None = None,
    registry: ProcessRegistry | None = None,
    arbiter: InstanceArbiter | None = None,
) -> int:
    """Execute one lint invocation and return its exit code.

    Args:
        options: Command-line options for the run.
        selector: Callable returning the linters for the fast-only flag;
            defaults to :func:`select_linters`.
        emit: Optional sink for report lines; defaults to the console.
        registry: Process registry; defaults to the process-wide registry.
        arbiter: Arbiter used when ``options.one`` is set.

    Returns:
        int: ``0`` for a clean run, ``1`` otherwise.

    Raises:
        ConfigError: If the project configuration is invalid.
        InventoryError: If no Python source files exist.
        InstallError: If a missing linter cannot be installed.
        LockAcquisitionError: If a bounded arbiter gives up.
    """

    working_dir = options.working_dir.resolve()
    root = find_root(working_dir)
    settings = load_settings(root)
    resolved = options.merged_with(settings)
    config = build_run_config(
        ProjectInventory(root),
        working_dir,
        timeout=resolved.timeout,
        mode=resolved.mode,
        jobs=resolved.jobs,
    )
    descriptors = (selector or select_linters)(resolved.fast_only)
    for descriptor in descriptors:
        install(descriptor, force=options.reinstall)

    pipeline = ReportingPipeline(
        working_dir=working_dir,
        rules=NoiseRules().extended(prefixes=settings.noise_prefixes, substrings=settings.noise_substrings),
        emit=emit,
    )
    registry = registry if registry is not None else get_process_registry()
    debug_logger = info if options.verbose else None
    coordinator = ShutdownCoordinator()
    coordinator.register("kill-linters", registry.kill_all)
    with coordinator.installed():
        if options.one:
            handle = (arbiter or InstanceArbiter()).acquire_exclusive(root)
            coordinator.register("release-lock", handle.release)
        pipeline.start()
        if not resolved.policy.is_empty:
            DisallowChecker(resolved.policy).check(config.files, pipeline)
        engine = ExecutionEngine(pipeline, registry=registry, debug_logger=debug_logger)
        return engine.run(descriptors, config)


__all__ = ["build_run_config", "run_lint"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Normalised options collected from the command line."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..config import ConcurrencyMode, DirtSettings, DisallowPolicy
from ..constants import DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class LintOptions:
    """Command-line choices; ``None`` means "use the project setting"."""

    working_dir: Path
    fast_only: bool | None = None
    timeout: float | None = None
    one: bool = False
    reinstall: bool = False
    parallel: bool | None = None
    jobs: int | None = None
    disallow_imports: tuple[str, ...] = ()
    disallow_functions: tuple[str, ...] = ()
    verbose: bool = False

    def merged_with(self, settings: DirtSettings) -> ResolvedOptions:
        """Overlay these options on the project ``settings``.

        Args:
            settings: Defaults loaded from ``[tool.dirt]``.

        Returns:
            ResolvedOptions: Effective values for the run.
        """

        parallel = settings.parallel if self.parallel is None else self.parallel
        policy = DisallowPolicy(
            imports=frozenset((*settings.disallow_imports, *self.disallow_imports)),
            calls=frozenset((*settings.disallow_functions, *self.disallow_functions)),
        )
        return ResolvedOptions(
            fast_only=settings.fast_only if self.fast_only is None else self.fast_only,
            timeout=self.timeout or settings.timeout or DEFAULT_TIMEOUT_SECONDS,
            mode=ConcurrencyMode.PARALLEL if parallel else ConcurrencyMode.SEQUENTIAL,
            jobs=self.jobs or settings.jobs,
            policy=policy,
        )


@dataclass(frozen=True, slots=True)
class ResolvedOptions:
    """Options after merging the command line with project settings."""

    fast_only: bool
    timeout: float
    mode: ConcurrencyMode
    jobs: int | None
    policy: DisallowPolicy


__all__ = ["LintOptions", "ResolvedOptions"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from dirt.config import RunConfig
from dirt.linters import Argument, LinterDescriptor

FakeLinter = Callable[..., LinterDescriptor]


@pytest.fixture
def fake_linter() -> FakeLinter:
    """Return a factory for descriptors that run a Python snippet."""

    def _build(label: str, script: str, *args: str | Argument) -> LinterDescriptor:
        return LinterDescriptor.of(sys.executable, "-c", script, *args, label=label)

    return _build


@pytest.fixture
def run_config(tmp_path: Path) -> RunConfig:
    """Return a sequential run configuration rooted at ``tmp_path``."""

    source = tmp_path / "mod.py"
    source.write_text("VALUE = 1\n", encoding="utf-8")
    return RunConfig(
        repo_root=tmp_path,
        working_dir=tmp_path,
        packages=(),
        directories=(tmp_path,),
        files=(source,),
        timeout=30,
    )

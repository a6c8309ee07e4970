# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line tests for the ``dirt`` entry point."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from dirt.cli import LintOptions, app
from dirt.config import ConcurrencyMode, DirtSettings
from dirt.constants import LOCK_FILE_NAME
from dirt.linters import FAST_LINTERS, SLOW_LINTERS, LinterDescriptor

Catalog = Callable[[bool], tuple[LinterDescriptor, ...]]


def _catalog(*descriptors: LinterDescriptor) -> Catalog:
    return lambda _fast_only: descriptors


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / "mod.py").write_text("import os\nos.system('true')\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _use_linters(monkeypatch: pytest.MonkeyPatch, *descriptors: LinterDescriptor) -> None:
    monkeypatch.setattr("dirt.cli.runtime.select_linters", _catalog(*descriptors))


def _snippet(label: str, script: str) -> LinterDescriptor:
    return LinterDescriptor.of(sys.executable, "-c", script, label=label)


def test_clean_run_exits_zero(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_linters(monkeypatch, _snippet("quiet", "pass"))

    result = CliRunner().invoke(app, [])

    assert result.exit_code == 0, result.output
    assert result.output == ""


def test_disallowed_function_is_reported(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_linters(monkeypatch, _snippet("quiet", "pass"))

    result = CliRunner().invoke(app, ["--disallow-function", "os.system"])

    assert result.exit_code == 1
    assert 'mod.py:2:1: Use of "os.system" not allowed [disallow]' in result.output


def test_disallowed_import_from_project_settings(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (project / "pyproject.toml").write_text('[tool.dirt]\ndisallow-imports = ["os"]\n', encoding="utf-8")
    _use_linters(monkeypatch, _snippet("quiet", "pass"))

    result = CliRunner().invoke(app, [])

    assert result.exit_code == 1
    assert "mod.py:1: Import of os not allowed [disallow]" in result.output


def test_failing_linter_exits_one(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_linters(monkeypatch, _snippet("failing", "import sys; sys.exit(4)"))

    result = CliRunner().invoke(app, ["--parallel", "--jobs", "2"])

    assert result.exit_code == 1


def test_invalid_timeout_is_a_usage_error(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_linters(monkeypatch, _snippet("quiet", "pass"))

    result = CliRunner().invoke(app, ["--timeout", "5x"])

    assert result.exit_code == 2


def test_tree_without_sources_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    _use_linters(monkeypatch, _snippet("quiet", "pass"))

    result = CliRunner().invoke(app, [])

    assert result.exit_code == 1
    assert "No Python source files" in result.output


def test_one_holds_lock_while_linters_run(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    probe = _snippet("probe", f"import os, sys; sys.exit(0 if os.path.exists({LOCK_FILE_NAME!r}) else 5)")
    _use_linters(monkeypatch, probe)

    result = CliRunner().invoke(app, ["--one"])

    assert result.exit_code == 0, result.output
    assert not (project / LOCK_FILE_NAME).exists()


def test_list_linters_fast_only(project: Path) -> None:
    result = CliRunner().invoke(app, ["--list-linters", "--fast-only"])

    assert result.exit_code == 0
    assert result.output.split() == [descriptor.name for descriptor in FAST_LINTERS]


def test_list_linters_all(project: Path) -> None:
    result = CliRunner().invoke(app, ["--list-linters"])

    assert result.exit_code == 0
    assert result.output.split() == [descriptor.name for descriptor in (*FAST_LINTERS, *SLOW_LINTERS)]


def test_help_names_both_groups() -> None:
    result = CliRunner().invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "fast" in result.output
    assert "pylint" in result.output


def test_command_line_overrides_project_settings(tmp_path: Path) -> None:
    settings = DirtSettings(timeout=60, fast_only=True, parallel=True, jobs=4, disallow_imports=["pickle"])
    options = LintOptions(
        working_dir=tmp_path,
        fast_only=False,
        timeout=5.0,
        parallel=False,
        disallow_imports=("http.client",),
    )

    resolved = options.merged_with(settings)

    assert resolved.fast_only is False
    assert resolved.timeout == 5.0
    assert resolved.mode is ConcurrencyMode.SEQUENTIAL
    assert resolved.jobs == 4
    assert resolved.policy.imports == frozenset({"pickle", "http.client"})


def test_project_settings_fill_unset_options(tmp_path: Path) -> None:
    resolved = LintOptions(working_dir=tmp_path).merged_with(DirtSettings(parallel=True))

    assert resolved.mode is ConcurrencyMode.PARALLEL
    assert resolved.timeout == 300.0
    assert resolved.policy.is_empty

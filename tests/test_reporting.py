# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for line filtering, normalisation and run status."""

from __future__ import annotations

from pathlib import Path

import pytest

from dirt.config import NoiseRules
from dirt.reporting import ProblemLine, ReportingPipeline, RunStatus, relativize


def _drain(pipeline: ReportingPipeline, lines: list[ProblemLine]) -> RunStatus:
    pipeline.start()
    for line in lines:
        pipeline.report(line.source, line.text)
    pipeline.close()
    return pipeline.wait()


def test_line_without_location_gets_synthetic_suffix(tmp_path: Path) -> None:
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=lambda _: None)
    assert pipeline.render(ProblemLine("tool", "oops")) == "oops:1:1: [tool]"


def test_duplicated_tool_prefix_is_stripped(tmp_path: Path) -> None:
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=lambda _: None)
    rendered = pipeline.render(ProblemLine("pyflakes", "pyflakes: mod.py:4:1: undefined name 'x'"))
    assert rendered == "mod.py:4:1: undefined name 'x' [pyflakes]"


def test_absolute_paths_are_made_relative(tmp_path: Path) -> None:
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=lambda _: None)
    text = f"{tmp_path}/pkg/mod.py:3:7: E711 comparison to None"
    assert pipeline.render(ProblemLine("ruff", text)) == "pkg/mod.py:3:7: E711 comparison to None [ruff]"


def test_relativize_keeps_relative_text(tmp_path: Path) -> None:
    assert relativize("pkg/mod.py:1:1: msg", tmp_path) == "pkg/mod.py:1:1: msg"


def test_surrounding_whitespace_is_trimmed(tmp_path: Path) -> None:
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=lambda _: None)
    assert pipeline.render(ProblemLine("tool", "   mod.py:1:1: msg \t")) == "mod.py:1:1: msg [tool]"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "    ",
        "vendor/lib/thing.py:10:1: W0611 unused import",
        "third_party/x.py:1:1: E1 bad",
        "proto/api_pb2.py:12:1: C0103 invalid name",
        "mod.py:3: note: By default the bodies of untyped functions are not checked [annotation-unchecked]",
        "Success: no issues found in 4 source files",
        "All checks passed!",
    ],
)
def test_noise_never_prints_or_dirties(tmp_path: Path, text: str) -> None:
    printed: list[str] = []
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=printed.append)

    status = _drain(pipeline, [ProblemLine("tool", text)])

    assert printed == []
    assert not status.dirty


def test_extra_noise_rules_apply(tmp_path: Path) -> None:
    rules = NoiseRules().extended(prefixes=["generated/"], substrings=["harmless chatter"])
    pipeline = ReportingPipeline(working_dir=tmp_path, rules=rules, emit=lambda _: None)

    assert pipeline.render(ProblemLine("tool", "generated/x.py:1:1: msg")) is None
    assert pipeline.render(ProblemLine("tool", "some harmless chatter here")) is None
    assert pipeline.render(ProblemLine("tool", "real.py:1:1: msg")) == "real.py:1:1: msg [tool]"


def test_lines_pointing_at_allow_comment_are_dropped(tmp_path: Path) -> None:
    (tmp_path / "mod.py").write_text("import os  # @allow\nimport sys\n", encoding="utf-8")
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=lambda _: None)

    assert pipeline.render(ProblemLine("pyflakes", "mod.py:1:1: 'os' imported but unused")) is None
    assert pipeline.render(ProblemLine("pyflakes", "mod.py:2:1: 'sys' imported but unused")) is not None


def test_allow_marker_inside_string_does_not_suppress(tmp_path: Path) -> None:
    (tmp_path / "mod.py").write_text('MARKER = "# @allow"\nLABEL = "#@allow"  # noqa\n', encoding="utf-8")
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=lambda _: None)

    assert pipeline.render(ProblemLine("pylint", "mod.py:1: [C0103] bad name")) == "mod.py:1: [C0103] bad name [pylint]"
    assert pipeline.render(ProblemLine("pylint", "mod.py:2: [C0103] bad name")) is not None


def test_vendored_absolute_paths_are_noise(tmp_path: Path) -> None:
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=lambda _: None)
    text = f"{tmp_path}/vendor/lib.py:3:1: B101 Use of assert detected."

    assert pipeline.render(ProblemLine("bandit", text)) is None


def test_pylint_module_banner_is_noise(tmp_path: Path) -> None:
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=lambda _: None)

    assert pipeline.render(ProblemLine("pylint", "************* Module mypkg")) is None


def test_reported_line_marks_run_dirty(tmp_path: Path) -> None:
    printed: list[str] = []
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=printed.append)

    status = _drain(
        pipeline,
        [ProblemLine("tool", "mod.py:1:1: bad"), ProblemLine("tool", "All checks passed!")],
    )

    assert printed == ["mod.py:1:1: bad [tool]"]
    assert status.dirty
    assert status.exit_code() == 1


def test_mark_dirty_without_output(tmp_path: Path) -> None:
    printed: list[str] = []
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=printed.append)
    pipeline.start()
    pipeline.mark_dirty()
    pipeline.close()

    status = pipeline.wait()

    assert printed == []
    assert status.dirty


def test_run_status_never_returns_to_clean() -> None:
    status = RunStatus()
    assert status.exit_code() == 0
    status.mark_dirty()
    status.mark_dirty()
    assert status.dirty
    assert status.exit_code() == 1


def test_lines_from_one_source_keep_their_order(tmp_path: Path) -> None:
    printed: list[str] = []
    pipeline = ReportingPipeline(working_dir=tmp_path, emit=printed.append, maxsize=4)

    _drain(pipeline, [ProblemLine("tool", f"mod.py:{index}:1: msg") for index in range(1, 101)])

    assert printed == [f"mod.py:{index}:1: msg [tool]" for index in range(1, 101)]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for configuration models and ``[tool.dirt]`` loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from dirt.config import ConfigError, NoiseRules, parse_duration
from dirt.config_loader import load_settings


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("5m", 300.0),
        ("90s", 90.0),
        ("1h30m", 5400.0),
        ("250ms", 0.25),
        ("1.5s", 1.5),
        ("45", 45.0),
        (12, 12.0),
    ],
)
def test_parse_duration(value: str | int, expected: float) -> None:
    assert parse_duration(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", ["", "5x", "m5", "5m junk", "0s", "-3", True])
def test_parse_duration_rejects_invalid_values(value: str | bool) -> None:
    with pytest.raises(ConfigError):
        parse_duration(value)


def test_missing_pyproject_yields_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path)

    assert settings.timeout is None
    assert settings.fast_only is False
    assert settings.disallow_imports == []


def test_tool_table_uses_hyphenated_keys(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "\n".join(
            [
                "[tool.dirt]",
                'timeout = "2m"',
                "fast-only = true",
                "parallel = true",
                "jobs = 3",
                'disallow-imports = ["http.client"]',
                'disallow-functions = ["os.system"]',
                'noise-substrings = ["generated by"]',
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(tmp_path)

    assert settings.timeout == 120.0
    assert settings.fast_only is True
    assert settings.parallel is True
    assert settings.jobs == 3
    assert settings.disallow_imports == ["http.client"]
    assert settings.disallow_functions == ["os.system"]
    assert settings.noise_substrings == ["generated by"]


def test_unknown_key_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.dirt]\nfastest = true\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid \\[tool.dirt\\]"):
        load_settings(tmp_path)


def test_invalid_timeout_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[tool.dirt]\ntimeout = "soon"\n', encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(tmp_path)


def test_invalid_toml_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.dirt\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_settings(tmp_path)


@pytest.mark.parametrize(
    "text",
    [
        "vendor/lib/x.py:1:1: problem",
        "pkg/api_pb2.py:4:1: generated",
        "mod.py:1: note: By default the bodies of untyped functions are not checked [annotation-unchecked]",
        "Success: no issues found in 3 source files",
    ],
)
def test_default_noise(text: str) -> None:
    assert NoiseRules().matches(text)


def test_extended_noise_keeps_defaults() -> None:
    rules = NoiseRules().extended(prefixes=["legacy/"], substrings=["generated by"])

    assert rules.matches("legacy/old.py:1:1: x")
    assert rules.matches("file generated by protoc")
    assert rules.matches("vendor/x.py:1:1: y")
    assert not rules.matches("mod.py:1:1: real problem")

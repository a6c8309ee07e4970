# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-process checker for disallowed imports and function calls."""

from __future__ import annotations

import ast
import tokenize
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .comments import CommentMap, carries_suppression, collect_comments
from .config import DisallowPolicy
from .constants import DISALLOW_SOURCE
from .reporting import ReportingPipeline


class ViolationKind(str, Enum):
    """Category of a disallow finding."""

    IMPORT = "import"
    CALL = "call"


@dataclass(frozen=True, slots=True)
class Violation:
    """A disallowed import or call found in a source file."""

    path: Path
    line: int
    column: int
    kind: ViolationKind
    name: str

    def format(self) -> str:
        """Return the report line for this violation."""

        if self.kind is ViolationKind.IMPORT:
            return f"{self.path}:{self.line}: Import of {self.name} not allowed"
        return f'{self.path}:{self.line}:{self.column}: Use of "{self.name}" not allowed'


@dataclass(frozen=True, slots=True)
class ParsedSource:
    """Syntax tree of one file together with its comments keyed by line."""

    path: Path
    tree: ast.AST
    comments: CommentMap

    def is_suppressed(self, line: int) -> bool:
        """Return ``True`` when a comment on ``line`` carries the suppression marker."""

        return carries_suppression(self.comments.get(line, ()))


def parse_source(path: Path) -> ParsedSource | None:
    """Parse ``path`` and collect its comments, or return ``None`` on failure.

    Args:
        path: Python source file to parse.

    Returns:
        ParsedSource | None: Parsed file, or ``None`` when it cannot be read,
        tokenized or parsed.
    """

    try:
        text = path.read_text(encoding="utf-8")
        tree = ast.parse(text, filename=str(path))
        comments = collect_comments(text)
    except (OSError, UnicodeDecodeError, SyntaxError, ValueError, tokenize.TokenError):
        return None
    return ParsedSource(path=path, tree=tree, comments=comments)


def call_target(node: ast.Call) -> str | None:
    """Return ``name`` or ``qualifier.member`` for a call, if it has that shape."""

    func = node.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute) and isinstance(func.value, ast.Name):
        return f"{func.value.id}.{func.attr}"
    return None


def _import_paths(node: ast.Import | ast.ImportFrom) -> Iterator[str]:
    if isinstance(node, ast.Import):
        yield from (alias.name for alias in node.names)
        return
    yield "." * node.level + (node.module or "")


def _check_imports(source: ParsedSource, denied: frozenset[str]) -> Iterator[Violation]:
    for node in ast.walk(source.tree):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        if source.is_suppressed(node.lineno):
            continue
        for module in _import_paths(node):
            if module in denied:
                yield Violation(
                    path=source.path,
                    line=node.lineno,
                    column=node.col_offset + 1,
                    kind=ViolationKind.IMPORT,
                    name=module,
                )


def _check_calls(source: ParsedSource, denied: frozenset[str]) -> Iterator[Violation]:
    for node in ast.walk(source.tree):
        if not isinstance(node, ast.Call):
            continue
        target = call_target(node)
        if target is None or target not in denied:
            continue
        line = node.func.lineno
        if source.is_suppressed(line):
            continue
        yield Violation(
            path=source.path,
            line=line,
            column=node.func.col_offset + 1,
            kind=ViolationKind.CALL,
            name=target,
        )


def _ordered(violations: Iterable[Violation]) -> list[Violation]:
    return sorted(violations, key=lambda item: (item.line, item.column))


def check_source(source: ParsedSource, policy: DisallowPolicy) -> list[Violation]:
    """Return every violation of ``policy`` within one parsed file."""

    violations: list[Violation] = []
    if policy.imports:
        violations.extend(_check_imports(source, policy.imports))
    if policy.calls:
        violations.extend(_check_calls(source, policy.calls))
    return _ordered(violations)


def check_disallowed(files: Iterable[Path], policy: DisallowPolicy) -> list[Violation]:
    """Return all violations of ``policy`` across ``files``.

    Files that cannot be parsed are skipped without a report; other tools are
    expected to flag them.

    Args:
        files: Python source files, checked in the given order.
        policy: Denied imports and call targets.

    Returns:
        list[Violation]: Violations grouped by file in traversal order.
    """

    if policy.is_empty:
        return []
    violations: list[Violation] = []
    for path in files:
        source = parse_source(path)
        if source is None:
            continue
        violations.extend(check_source(source, policy))
    return violations


class DisallowChecker:
    """Report disallow violations through a :class:`ReportingPipeline`."""

    def __init__(self, policy: DisallowPolicy) -> None:
        self.policy = policy

    def check(self, files: Iterable[Path], pipeline: ReportingPipeline) -> list[Violation]:
        """Queue every violation for ``files`` and mark the run dirty if any exist.

        Args:
            files: Python source files to inspect.
            pipeline: Pipeline receiving the formatted violations.

        Returns:
            list[Violation]: Violations that were reported.
        """

        violations = check_disallowed(files, self.policy)
        for violation in violations:
            pipeline.report(DISALLOW_SOURCE, violation.format())
        if violations:
            pipeline.mark_dirty()
        return violations


__all__ = [
    "DisallowChecker",
    "ParsedSource",
    "Violation",
    "ViolationKind",
    "call_target",
    "check_disallowed",
    "check_source",
    "parse_source",
]

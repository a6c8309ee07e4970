# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filtering, normalisation and printing of raw linter output lines."""

from __future__ import annotations

import os
import queue
import re
import threading
import tokenize
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .comments import CommentMap, carries_suppression, collect_comments
from .config import NoiseRules
from .constants import PROBLEM_QUEUE_SIZE
from .logging import plain

Emitter = Callable[[str], None]

_LOCATION: Final[re.Pattern[str]] = re.compile(r"^(?P<path>[^:]+):(?P<line>\d+)\b")
_NO_LOCATION_SUFFIX: Final[str] = ":1:1:"


@dataclass(frozen=True, slots=True)
class ProblemLine:
    """One raw output line tagged with the name of the tool that produced it."""

    source: str
    text: str


class RunStatus:
    """Clean/dirty outcome of one invocation; once dirty it stays dirty."""

    __slots__ = ("_dirty",)

    def __init__(self) -> None:
        self._dirty = False

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        self._dirty = True

    def exit_code(self) -> int:
        """Return ``1`` when the run is dirty, ``0`` otherwise."""

        return 1 if self._dirty else 0


class _Signal:
    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"<{self.name}>"


_MARK_DIRTY: Final[_Signal] = _Signal("mark-dirty")
_CLOSE: Final[_Signal] = _Signal("close")


class SuppressedLines:
    """Answer whether a ``path:line`` location carries the suppression marker."""

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = base_dir
        self._cache: dict[Path, CommentMap | None] = {}

    def is_suppressed(self, text: str) -> bool:
        """Return ``True`` when ``text`` points at a line with an ``@allow`` comment."""

        match = _LOCATION.match(text)
        if match is None:
            return False
        comments = self._comments_for(Path(match.group("path")))
        if comments is None:
            return False
        return carries_suppression(comments.get(int(match.group("line")), ()))

    def _comments_for(self, path: Path) -> CommentMap | None:
        resolved = path if path.is_absolute() else self._base_dir / path
        if resolved not in self._cache:
            try:
                source = resolved.read_text(encoding="utf-8")
                self._cache[resolved] = collect_comments(source)
            except (OSError, UnicodeDecodeError, SyntaxError, tokenize.TokenError):
                self._cache[resolved] = None
        return self._cache[resolved]


def relativize(text: str, base_dir: Path) -> str:
    """Rewrite a leading absolute path in ``text`` relative to ``base_dir``.

    Args:
        text: Output line that may begin with an absolute path.
        base_dir: Directory the invocation started from.

    Returns:
        str: ``text`` with its path component made relative when possible.
    """

    if not os.path.isabs(text):
        return text
    path, separator, remainder = text.partition(":")
    try:
        relative = os.path.relpath(path, base_dir)
    except ValueError:
        return text
    return f"{relative}{separator}{remainder}"


class ReportingPipeline:
    """Single consumer turning queued :class:`ProblemLine` values into report lines.

    Producers call :meth:`put` and :meth:`mark_dirty` from any thread. Only the
    consumer thread prints and only it updates :attr:`status`, so console
    output and status transitions are serialised.
    """

    def __init__(
        self,
        *,
        working_dir: Path,
        rules: NoiseRules | None = None,
        emit: Emitter | None = None,
        maxsize: int = PROBLEM_QUEUE_SIZE,
    ) -> None:
        """Create a pipeline rooted at ``working_dir``.

        Args:
            working_dir: Invocation directory used to relativise paths.
            rules: Noise rules applied to every line.
            emit: Callable receiving each rendered report line.
            maxsize: Bound of the input queue.
        """

        self.working_dir = working_dir
        self.rules = rules or NoiseRules()
        self.status = RunStatus()
        self._emit = emit or plain
        self._suppressed = SuppressedLines(working_dir)
        self._queue: queue.Queue[ProblemLine | _Signal] = queue.Queue(maxsize=maxsize)
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the consumer thread; calling it twice is a no-op."""

        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._consume, name="dirt-reporting", daemon=True)
        self._thread.start()

    def report(self, source: str, text: str) -> None:
        """Queue ``text`` as a problem line attributed to ``source``."""

        self._queue.put(ProblemLine(source=source, text=text))

    def mark_dirty(self) -> None:
        """Ask the consumer to mark the run dirty without printing anything."""

        self._queue.put(_MARK_DIRTY)

    def close(self) -> None:
        self._queue.put(_CLOSE)

    def wait(self) -> RunStatus:
        """Block until every queued line has been processed.

        Returns:
            RunStatus: Final status of the run.
        """

        if self._thread is not None:
            self._thread.join()
        return self.status

    def notice(self, text: str) -> None:
        """Print an advisory line directly; only valid once the queue is drained."""

        self._emit(text)

    def render(self, line: ProblemLine) -> str | None:
        """Return the report line for ``line`` or ``None`` when it is filtered.

        Args:
            line: Raw line captured from a tool.

        Returns:
            str | None: ``<location>: <message> [<source>]`` or ``None``.
        """

        text = line.text.strip()
        if not text:
            return None
        duplicated = f"{line.source}: "
        if text.startswith(duplicated):
            text = text[len(duplicated) :]
        if self._suppressed.is_suppressed(text):
            return None
        text = relativize(text, self.working_dir)
        if self.rules.matches(text):
            return None
        if ":" not in text:
            text += _NO_LOCATION_SUFFIX
        return f"{text} [{line.source}]"

    def _consume(self) -> None:
        while True:
            item = self._queue.get()
            if isinstance(item, _Signal):
                if item is _CLOSE:
                    return
                self.status.mark_dirty()
                continue
            rendered = self.render(item)
            if rendered is None:
                continue
            self._emit(rendered)
            self.status.mark_dirty()


__all__ = [
    "Emitter",
    "ProblemLine",
    "ReportingPipeline",
    "RunStatus",
    "SuppressedLines",
    "relativize",
]

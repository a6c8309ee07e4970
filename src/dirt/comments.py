# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Comment discovery shared by suppression-aware components."""

from __future__ import annotations

import tokenize
from collections import defaultdict
from collections.abc import Iterable, Mapping
from io import StringIO

from .constants import SUPPRESSION_MARKER

CommentMap = Mapping[int, list[str]]


def collect_comments(text: str) -> dict[int, list[str]]:
    """Return the comment tokens of ``text`` keyed by 1-based line number.

    Args:
        text: Python source code.

    Returns:
        dict[int, list[str]]: Comment strings (including ``#``) per line.

    Raises:
        tokenize.TokenError: If ``text`` cannot be tokenized.
        SyntaxError: If ``text`` contains an invalid indentation or token.
    """

    comments: dict[int, list[str]] = defaultdict(list)
    for token in tokenize.generate_tokens(StringIO(text).readline):
        if token.type == tokenize.COMMENT:
            comments[token.start[0]].append(token.string)
    return dict(comments)


def carries_suppression(comments: Iterable[str]) -> bool:
    """Return ``True`` when any of ``comments`` holds the ``@allow`` marker."""

    return any(SUPPRESSION_MARKER in comment for comment in comments)


__all__ = ["CommentMap", "carries_suppression", "collect_comments"]

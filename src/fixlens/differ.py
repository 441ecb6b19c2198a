# fixlens - Fix previews and duplicate detection for code fragments
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Line differ - compares an original and a fixed buffer line by line.

Two algorithms produce the same Diff shape:

walk     Index-synchronised comparison (the default). Both cursors advance
         together; a mismatch is reported as a removal followed by an
         addition. One inserted line early on makes every later line show
         up as removed and added again.
difflib  difflib.SequenceMatcher opcodes, which keeps unchanged runs aligned
         across insertions and deletions.
"""

import difflib
import logging
from typing import Iterator, List, Optional, Sequence

from .errors import ErrorCallback, report_failure
from .models import ADDED, REMOVED, UNCHANGED, ContextWindow, Diff, DiffLine


logger = logging.getLogger(__name__)

WALK = "walk"
DIFFLIB = "difflib"
ALGORITHMS = (WALK, DIFFLIB)

DEFAULT_CONTEXT_RADIUS = 3


def split_lines(text: Optional[str]) -> List[str]:
    """Split on newlines. Missing or empty text has no lines."""
    if not text:
        return []
    return text.split("\n")


def _walk(original: List[str], fixed: List[str]) -> Iterator[DiffLine]:
    i = j = 0
    while i < len(original) or j < len(fixed):
        if i >= len(original):
            yield DiffLine(ADDED, j + 1, fixed[j])
            j += 1
        elif j >= len(fixed):
            yield DiffLine(REMOVED, i + 1, original[i])
            i += 1
        elif original[i] == fixed[j]:
            yield DiffLine(UNCHANGED, i + 1, original[i])
            i += 1
            j += 1
        else:
            yield DiffLine(REMOVED, i + 1, original[i])
            yield DiffLine(ADDED, j + 1, fixed[j])
            i += 1
            j += 1


def _sequence_matcher(original: List[str], fixed: List[str]) -> Iterator[DiffLine]:
    matcher = difflib.SequenceMatcher(None, original, fixed, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for i in range(i1, i2):
                yield DiffLine(UNCHANGED, i + 1, original[i])
            continue
        # replace and delete remove, replace and insert add
        for i in range(i1, i2):
            yield DiffLine(REMOVED, i + 1, original[i])
        for j in range(j1, j2):
            yield DiffLine(ADDED, j + 1, fixed[j])


def compare_lines(
    original: Optional[str],
    fixed: Optional[str],
    algorithm: str = WALK,
) -> List[DiffLine]:
    """Diff entries for two buffers, without renderings."""
    original_lines = split_lines(original)
    fixed_lines = split_lines(fixed)

    if algorithm == WALK:
        return list(_walk(original_lines, fixed_lines))
    elif algorithm == DIFFLIB:
        return list(_sequence_matcher(original_lines, fixed_lines))
    else:
        raise ValueError(f"Unknown diff algorithm: {algorithm}")


def render_unified(lines: Sequence[DiffLine]) -> str:
    """One ``+``/``-``/`` `` prefixed line per entry, no hunk headers."""
    return "".join(f"{line.prefix}{line.content}\n" for line in lines)


def unified_diff(
    original: Optional[str],
    fixed: Optional[str],
    algorithm: str = WALK,
    on_error: Optional[ErrorCallback] = None,
) -> str:
    """Unified-style text of the diff. Empty string on failure."""
    try:
        return render_unified(compare_lines(original, fixed, algorithm))
    except Exception as e:
        report_failure("unified_diff", e, on_error, logger)
        return ""


def context_windows(
    lines: Sequence[DiffLine],
    radius: int = DEFAULT_CONTEXT_RADIUS,
) -> List[ContextWindow]:
    """
    Unchanged lines around every changed line.

    The window spans ``radius`` diff entries on each side of the change,
    clipped to the diff; only unchanged entries inside it are captured.
    """
    radius = max(0, radius)
    windows = []

    for pos, line in enumerate(lines):
        if not line.is_change:
            continue

        start = max(0, pos - radius)
        end = min(len(lines), pos + radius + 1)

        windows.append(ContextWindow(
            line=line.line_number,
            start=start,
            end=end,
            before=tuple(l.content for l in lines[start:pos] if not l.is_change),
            after=tuple(l.content for l in lines[pos + 1:end] if not l.is_change),
        ))

    return windows


def diff_lines(
    original: Optional[str],
    fixed: Optional[str],
    algorithm: str = WALK,
    context_radius: int = DEFAULT_CONTEXT_RADIUS,
    on_error: Optional[ErrorCallback] = None,
) -> Diff:
    """
    Diff two buffers.

    Args:
        original: Text before the fix
        fixed: Text after the fix
        algorithm: "walk" (default) or "difflib"
        context_radius: Entries of context captured around each change
        on_error: Optional diagnostic callback for soft failures

    Returns:
        Diff with entries, unified text and context windows, or an empty
        Diff if anything goes wrong
    """
    try:
        lines = compare_lines(original, fixed, algorithm)
        return Diff(
            lines=tuple(lines),
            unified=render_unified(lines),
            context=tuple(context_windows(lines, context_radius)),
        )
    except Exception as e:
        report_failure("diff_lines", e, on_error, logger)
        return Diff.empty()

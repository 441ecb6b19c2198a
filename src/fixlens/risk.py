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
Change summary, size statistics and risk scoring.

All figures here come from line and character counts of the two buffers,
not from the diff itself, so they stay cheap and predictable.
"""

import logging
from typing import Any, Dict, Optional, Union

from .differ import split_lines
from .errors import ErrorCallback, report_failure
from .models import ChangeStats, ChangeSummary, Issue, RiskAssessment


logger = logging.getLogger(__name__)

LARGE_CHANGE_CHARS = 1000
MANY_LINES_CHANGED = 50
ARCHITECTURAL_TYPES = frozenset({"architecture", "refactoring", "design"})

HIGH_RISK = 0.7
MEDIUM_RISK = 0.4


def summarize_change(original: Optional[str], fixed: Optional[str]) -> ChangeSummary:
    """
    Approximate counts of added, removed and modified lines.

    Only the line counts of the two buffers are compared: equal-length
    buffers report zero total changes whatever their content.
    """
    original_count = len(split_lines(original))
    fixed_count = len(split_lines(fixed))

    added = fixed_count - original_count
    removed = original_count - fixed_count

    return ChangeSummary(
        lines_added=max(0, added),
        lines_removed=max(0, removed),
        lines_modified=min(original_count, fixed_count),
        total_changes=abs(added) + abs(removed),
    )


def change_stats(original: Optional[str], fixed: Optional[str]) -> ChangeStats:
    """Character and line sizes of both buffers."""
    original = original or ""
    fixed = fixed or ""
    original_lines = len(split_lines(original))
    fixed_lines = len(split_lines(fixed))

    return ChangeStats(
        original_size=len(original),
        fixed_size=len(fixed),
        size_change=len(fixed) - len(original),
        original_lines=original_lines,
        fixed_lines=fixed_lines,
        line_change=fixed_lines - original_lines,
    )


def risk_level(score: float) -> str:
    if score >= HIGH_RISK:
        return "high"
    elif score >= MEDIUM_RISK:
        return "medium"
    return "low"


def assess_risk(
    original: Optional[str],
    fixed: Optional[str],
    issue: Union[Issue, Dict[str, Any], None],
    on_error: Optional[ErrorCallback] = None,
) -> RiskAssessment:
    """
    Score how risky a fix is, from 0.0 to 1.0.

    Each rule that fires adds its weight and records its reason, in
    rule order:

    - more than 1000 characters gained or lost (+0.3)
    - more than 50 lines gained or lost (+0.2)
    - a security issue (+0.2)
    - a critical issue (+0.2)
    - an architecture, refactoring or design issue (+0.3)
    """
    try:
        if not isinstance(issue, Issue):
            issue = Issue.from_dict(issue)

        stats = change_stats(original, fixed)
        score = 0.0
        factors = []

        if abs(stats.size_change) > LARGE_CHANGE_CHARS:
            score += 0.3
            factors.append("Large code change")

        if abs(stats.line_change) > MANY_LINES_CHANGED:
            score += 0.2
            factors.append("Many lines changed")

        if issue.type == "security":
            score += 0.2
            factors.append("Security-related change")

        if issue.severity == "critical":
            score += 0.2
            factors.append("Critical severity issue")

        if issue.type in ARCHITECTURAL_TYPES:
            score += 0.3
            factors.append("Architectural change")

        score = min(1.0, round(score, 4))
        return RiskAssessment(score=score, level=risk_level(score), factors=tuple(factors))

    except Exception as e:
        report_failure("assess_risk", e, on_error, logger)
        return RiskAssessment.unknown()

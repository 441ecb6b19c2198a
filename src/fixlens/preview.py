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
Fix previews - what a proposed fix changes and how risky it is.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from .differ import DEFAULT_CONTEXT_RADIUS, WALK, diff_lines
from .errors import ErrorCallback, report_failure
from .models import Issue, Preview
from .risk import assess_risk, change_stats, summarize_change


logger = logging.getLogger(__name__)


def generate_preview(
    original: Optional[str],
    fixed: Optional[str],
    issue: Union[Issue, Dict[str, Any], None],
    file_path: str = "",
    confidence: Optional[float] = None,
    validation: Optional[Dict[str, Any]] = None,
    algorithm: str = WALK,
    context_radius: int = DEFAULT_CONTEXT_RADIUS,
    on_error: Optional[ErrorCallback] = None,
) -> Optional[Preview]:
    """
    Build a preview of replacing ``original`` with ``fixed``.

    Args:
        original: Current file content
        fixed: Proposed file content
        issue: Issue being fixed (Issue or mapping with type/severity/message/line)
        file_path: Path shown in reports
        confidence: Optional confidence supplied by whoever produced the fix
        validation: Optional validation results to carry along
        algorithm: Diff algorithm, "walk" or "difflib"
        context_radius: Context captured around each changed line
        on_error: Optional diagnostic callback for soft failures

    Returns:
        Preview, or None if it could not be built
    """
    try:
        if not isinstance(issue, Issue):
            issue = Issue.from_dict(issue)

        original = original or ""
        fixed = fixed or ""

        preview = Preview(
            file_path=file_path or "",
            issue=issue,
            diff=diff_lines(original, fixed, algorithm, context_radius, on_error),
            summary=summarize_change(original, fixed),
            stats=change_stats(original, fixed),
            risk=assess_risk(original, fixed, issue, on_error),
            timestamp=datetime.now(timezone.utc).isoformat(),
            confidence=confidence,
            validation=validation,
        )
    except Exception as e:
        report_failure("generate_preview", e, on_error, logger)
        return None

    logger.debug(
        f"Preview for {preview.file_path or '<unnamed>'}: "
        f"{len(preview.diff.lines)} diff lines, risk {preview.risk.level}"
    )
    return preview

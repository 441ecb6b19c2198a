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
fixlens - Preview code fixes and find duplicated code fragments.

Two independent engines:

- similarity: groups near-duplicate fragments from a caller-supplied corpus
  and turns the groups into ranked refactoring suggestions
- diff & risk: diffs an original and a fixed buffer, summarises the change
  and scores how risky it is

Embeddings, search and storage are the caller's business. Nothing here
touches the network.
"""

__version__ = "0.1.0"

from .models import (
    CodeFragment,
    SimilarityGroup,
    RefactoringSuggestion,
    SimilarityReport,
    DiffLine,
    Diff,
    ContextWindow,
    ChangeSummary,
    ChangeStats,
    RiskAssessment,
    Issue,
    Preview,
)
from .similarity import similarity, cosine_similarity, token_similarity
from .clusterer import group_by_similarity, group_connected, group_cohesion
from .refactoring import (
    find_duplicates,
    generate_refactoring_suggestion,
    rank_suggestions,
    find_similar_code,
)
from .differ import diff_lines, unified_diff, context_windows
from .risk import summarize_change, change_stats, assess_risk
from .preview import generate_preview
from .reporter import render_preview, report_similarity, OutputFormat
from .config import load_config, find_config_file, load_settings, Settings
from .errors import FixlensError, InputMalformed, DimensionMismatch, ComputationFailure

__all__ = [
    "__version__",
    "CodeFragment",
    "SimilarityGroup",
    "RefactoringSuggestion",
    "SimilarityReport",
    "DiffLine",
    "Diff",
    "ContextWindow",
    "ChangeSummary",
    "ChangeStats",
    "RiskAssessment",
    "Issue",
    "Preview",
    "similarity",
    "cosine_similarity",
    "token_similarity",
    "group_by_similarity",
    "group_connected",
    "group_cohesion",
    "find_duplicates",
    "generate_refactoring_suggestion",
    "rank_suggestions",
    "find_similar_code",
    "diff_lines",
    "unified_diff",
    "context_windows",
    "summarize_change",
    "change_stats",
    "assess_risk",
    "generate_preview",
    "render_preview",
    "report_similarity",
    "OutputFormat",
    "load_config",
    "find_config_file",
    "load_settings",
    "Settings",
    "FixlensError",
    "InputMalformed",
    "DimensionMismatch",
    "ComputationFailure",
]

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
Duplicate detection and refactoring suggestions.

Turns similarity groups into ranked "extract a shared function" proposals.
The corpus always comes from the caller (usually a semantic search), either
as fragments or as a zero-argument callable that fetches them. Failures
while fetching or grouping degrade to empty results.
"""

import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

from .clusterer import SEED, group_fragments
from .errors import ErrorCallback, report_failure
from .models import CodeFragment, RefactoringSuggestion, SimilarityGroup, SimilarityReport


logger = logging.getLogger(__name__)

DEFAULT_MIN_SIMILARITY = 0.8
DEFAULT_MIN_OCCURRENCES = 3
DEFAULT_MAX_FRAGMENTS = 100
MAX_DUPLICATES = 5
PATTERN_LENGTH = 100
IMPACT_PER_OCCURRENCE = 10

CorpusSource = Union[Iterable[Any], Callable[[], Iterable[Any]]]


def load_fragments(corpus: CorpusSource) -> List[CodeFragment]:
    """
    Materialise a corpus into fragments.

    Accepts fragments, search-result mappings, or a callable returning
    either. Entries of any other type are skipped.
    """
    if callable(corpus):
        corpus = corpus()
    if isinstance(corpus, dict):
        corpus = corpus.get("results") or []

    fragments = []
    for entry in corpus or []:
        if isinstance(entry, CodeFragment):
            fragments.append(entry)
        elif isinstance(entry, dict):
            fragments.append(CodeFragment.from_dict(entry))
        else:
            logger.debug(f"Skipping corpus entry of type {type(entry).__name__}")
    return fragments


def find_duplicates(
    corpus: CorpusSource,
    target_file_path: str,
    limit: int = MAX_DUPLICATES,
    on_error: Optional[ErrorCallback] = None,
) -> List[CodeFragment]:
    """
    Fragments from other files that duplicate ``target_file_path``.

    The corpus is expected to be pre-filtered and pre-sorted by relevance;
    its order is kept. Fragments without a file path are dropped.
    """
    try:
        fragments = load_fragments(corpus)
    except Exception as e:
        report_failure("find_duplicates", e, on_error, logger)
        return []

    duplicates = [
        f for f in fragments
        if f.file_path and f.file_path != target_file_path
    ]
    return duplicates[:limit]


def find_common_pattern(group: SimilarityGroup) -> str:
    """Excerpt standing in for the shared pattern: the seed's opening characters."""
    # TODO: replace with a longest common substring across members
    return group.seed.content[:PATTERN_LENGTH]


def generate_refactoring_suggestion(group: SimilarityGroup) -> RefactoringSuggestion:
    """Propose extracting a group's shared code into one function."""
    return RefactoringSuggestion(
        type="extract-function",
        description="Extract common pattern into shared function",
        files=group.files,
        occurrences=len(group),
        impact=len(group) * IMPACT_PER_OCCURRENCE,
        estimated_effort="medium",
        pattern=find_common_pattern(group),
    )


def rank_suggestions(suggestions: Iterable[RefactoringSuggestion]) -> List[RefactoringSuggestion]:
    """Highest impact first; ties keep their input order."""
    return sorted(suggestions, key=lambda s: s.impact, reverse=True)


def find_similar_code(
    corpus: CorpusSource,
    min_similarity: float = DEFAULT_MIN_SIMILARITY,
    min_occurrences: int = DEFAULT_MIN_OCCURRENCES,
    strategy: str = SEED,
    max_fragments: int = DEFAULT_MAX_FRAGMENTS,
    on_error: Optional[ErrorCallback] = None,
) -> SimilarityReport:
    """
    Find repeated code in a corpus and suggest refactors for it.

    Args:
        corpus: Fragments, search results, or a callable fetching them
        min_similarity: Grouping threshold (0.0-1.0)
        min_occurrences: Smallest group worth a suggestion
        strategy: "seed" (default) or "connected"
        max_fragments: Corpus is truncated to this many fragments
        on_error: Optional diagnostic callback for soft failures

    Returns:
        SimilarityReport; empty if the corpus could not be fetched or grouped
    """
    try:
        fragments = load_fragments(corpus)[:max_fragments]
        groups = group_fragments(fragments, min_similarity, strategy=strategy)
    except Exception as e:
        report_failure("find_similar_code", e, on_error, logger)
        return SimilarityReport.empty()

    duplicates = [g for g in groups if len(g) >= min_occurrences]
    suggestions = rank_suggestions(generate_refactoring_suggestion(g) for g in duplicates)
    # Impact grows with group size, so this keeps groups aligned with suggestions
    duplicates.sort(key=len, reverse=True)

    logger.info(
        f"Grouped {len(fragments)} fragments into {len(groups)} groups, "
        f"{len(duplicates)} with at least {min_occurrences} occurrences"
    )

    return SimilarityReport(
        duplicates_found=len(duplicates),
        total_similar_groups=len(groups),
        suggestions=tuple(suggestions),
        groups=tuple(duplicates),
    )

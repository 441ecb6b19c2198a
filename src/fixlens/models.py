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
Data models for fixlens.

Every model is a frozen dataclass: results are built once per call and
handed back to the caller without further mutation.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple, Iterator, Dict, Any


@dataclass(frozen=True)
class CodeFragment:
    """A piece of source code from a caller-supplied corpus."""

    content: str                                  # The code itself
    file_path: str                                # File the fragment came from
    embedding: Optional[Tuple[float, ...]] = None  # Precomputed vector, if any
    similarity: Optional[float] = None            # Search relevance from upstream

    def __post_init__(self):
        if self.content is None:
            object.__setattr__(self, "content", "")
        elif not isinstance(self.content, str):
            object.__setattr__(self, "content", str(self.content))
        if self.file_path is None:
            object.__setattr__(self, "file_path", "")
        elif not isinstance(self.file_path, str):
            object.__setattr__(self, "file_path", str(self.file_path))
        if self.embedding is not None and not isinstance(self.embedding, tuple):
            object.__setattr__(self, "embedding", tuple(float(x) for x in self.embedding))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeFragment":
        """Build a fragment from a search-result style mapping."""
        file_path = data.get("file_path", data.get("filePath", ""))
        similarity = data.get("similarity")

        # Unusable vectors fall back to token similarity
        embedding = data.get("embedding")
        try:
            embedding = tuple(float(x) for x in embedding) if isinstance(embedding, (list, tuple)) else None
        except (TypeError, ValueError):
            embedding = None

        return cls(
            content=str(data.get("content") or ""),
            file_path=str(file_path or ""),
            embedding=embedding or None,
            similarity=float(similarity) if isinstance(similarity, (int, float)) else None,
        )

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def preview(self, max_chars: int = 60) -> str:
        """Short preview of the content."""
        first_line = self.content.split("\n")[0].strip()
        if len(first_line) > max_chars:
            return first_line[:max_chars-3] + "..."
        return first_line


@dataclass(frozen=True)
class SimilarityGroup:
    """
    Fragments grouped around a seed.

    Every member is at least ``threshold`` similar to the seed (the first
    member). Two non-seed members are not guaranteed to be similar to each
    other.
    """

    fragments: Tuple[CodeFragment, ...]
    threshold: float

    def __len__(self) -> int:
        return len(self.fragments)

    def __iter__(self) -> Iterator[CodeFragment]:
        return iter(self.fragments)

    def __getitem__(self, index):
        return self.fragments[index]

    @property
    def seed(self) -> CodeFragment:
        return self.fragments[0]

    @property
    def files(self) -> Tuple[str, ...]:
        """Unique file paths, in member order."""
        return tuple(dict.fromkeys(f.file_path for f in self.fragments))


@dataclass(frozen=True)
class RefactoringSuggestion:
    """A proposed refactor derived from one similarity group."""

    type: str                 # e.g. "extract-function"
    description: str
    files: Tuple[str, ...]    # Unique files involved
    occurrences: int          # Number of fragments in the group
    impact: int               # Ranking score, higher first
    estimated_effort: str     # low/medium/high
    pattern: str              # Excerpt of the shared code

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["files"] = list(self.files)
        return data


@dataclass(frozen=True)
class SimilarityReport:
    """
    Result of a duplicate-detection run over a corpus.

    ``groups[i]`` is the group behind ``suggestions[i]``.
    """

    duplicates_found: int
    total_similar_groups: int
    suggestions: Tuple[RefactoringSuggestion, ...] = ()
    groups: Tuple[SimilarityGroup, ...] = ()

    @classmethod
    def empty(cls) -> "SimilarityReport":
        return cls(duplicates_found=0, total_similar_groups=0)


ADDED = "added"
REMOVED = "removed"
UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DiffLine:
    """
    One line of a diff.

    ``line_number`` is 1-indexed. It counts lines of the original file for
    removed and unchanged lines, and lines of the fixed file for added ones.
    """

    kind: str          # added, removed, unchanged
    line_number: int
    content: str

    @property
    def is_change(self) -> bool:
        return self.kind != UNCHANGED

    @property
    def prefix(self) -> str:
        return {ADDED: "+", REMOVED: "-"}.get(self.kind, " ")


@dataclass(frozen=True)
class ContextWindow:
    """Lines surrounding one changed line."""

    line: int                    # Line number of the changed line
    start: int                   # First diff index of the window (0-indexed)
    end: int                     # Diff index one past the window
    before: Tuple[str, ...]
    after: Tuple[str, ...]


@dataclass(frozen=True)
class Diff:
    """A line diff together with its renderings."""

    lines: Tuple[DiffLine, ...] = ()
    unified: str = ""
    context: Tuple[ContextWindow, ...] = ()

    @classmethod
    def empty(cls) -> "Diff":
        return cls()

    @property
    def added(self) -> Tuple[DiffLine, ...]:
        return tuple(l for l in self.lines if l.kind == ADDED)

    @property
    def removed(self) -> Tuple[DiffLine, ...]:
        return tuple(l for l in self.lines if l.kind == REMOVED)

    @property
    def has_changes(self) -> bool:
        return any(l.is_change for l in self.lines)


@dataclass(frozen=True)
class ChangeSummary:
    """Coarse line-count summary of a change (not derived from the diff)."""

    lines_added: int
    lines_removed: int
    lines_modified: int
    total_changes: int


@dataclass(frozen=True)
class ChangeStats:
    """Raw size figures for the original and fixed buffers."""

    original_size: int
    fixed_size: int
    size_change: int
    original_lines: int
    fixed_lines: int
    line_change: int


@dataclass(frozen=True)
class RiskAssessment:
    """Heuristic risk of applying a change."""

    score: float                  # 0.0 - 1.0
    level: str                    # low, medium, high
    factors: Tuple[str, ...] = ()

    @classmethod
    def unknown(cls) -> "RiskAssessment":
        return cls(score=0.0, level="low", factors=())


@dataclass(frozen=True)
class Issue:
    """The issue a fix is meant to address."""

    type: str = ""
    severity: str = ""
    message: str = ""
    line: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Issue":
        data = data or {}
        line = data.get("line")
        return cls(
            type=str(data.get("type") or ""),
            severity=str(data.get("severity") or ""),
            message=str(data.get("message") or ""),
            line=int(line) if line is not None else None,
        )


@dataclass(frozen=True)
class Preview:
    """Everything a reviewer needs to approve or reject a fix."""

    file_path: str
    issue: Issue
    diff: Diff
    summary: ChangeSummary
    stats: ChangeStats
    risk: RiskAssessment
    timestamp: str
    confidence: Optional[float] = None
    validation: Optional[Dict[str, Any]] = field(default=None, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation."""
        data = {
            "file_path": self.file_path,
            "issue": asdict(self.issue),
            "diff": {
                "lines": [asdict(l) for l in self.diff.lines],
                "unified": self.diff.unified,
                "context": [
                    {
                        "line": w.line,
                        "start": w.start,
                        "end": w.end,
                        "before": list(w.before),
                        "after": list(w.after),
                    }
                    for w in self.diff.context
                ],
            },
            "summary": asdict(self.summary),
            "stats": asdict(self.stats),
            "risk": {
                "score": self.risk.score,
                "level": self.risk.level,
                "factors": list(self.risk.factors),
            },
            "timestamp": self.timestamp,
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence
        if self.validation is not None:
            data["validation"] = self.validation
        return data

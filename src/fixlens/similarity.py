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
Pairwise similarity between code fragments.

Embedding cosine similarity when both fragments carry a vector,
token-set (Jaccard) similarity of their contents otherwise.
"""

import logging
import re
from typing import FrozenSet, Optional, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as sk_cosine_similarity

from .errors import DimensionMismatch
from .models import CodeFragment


logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r"\W+")

# Enough to absorb float noise so that similarity(a, a) == 1.0
_PRECISION = 12


def _clip(value: float) -> float:
    return min(1.0, max(0.0, round(float(value), _PRECISION)))


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors, clipped to [0, 1].

    Returns 0.0 when the dimensions differ or either vector has zero norm.
    """
    a = np.asarray(vec1, dtype=np.float64)
    b = np.asarray(vec2, dtype=np.float64)

    if a.shape != b.shape:
        logger.debug(f"Embedding dimension mismatch: {a.shape} vs {b.shape}")
        return 0.0

    norm = np.linalg.norm(a) * np.linalg.norm(b)
    if norm == 0 or not np.isfinite(norm):
        return 0.0

    return _clip(np.dot(a, b) / norm)


def tokenize(text: str) -> FrozenSet[str]:
    """
    Lower-cased pieces of ``text`` between runs of non-word characters.

    Leading or trailing punctuation contributes the empty string, so
    punctuation-only content still has a token set.
    """
    if not text:
        return frozenset()
    return frozenset(_TOKEN_SPLIT.split(text.lower()))


def token_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the token sets. 0.0 if both texts are empty."""
    words1 = tokenize(text1)
    words2 = tokenize(text2)

    union = words1 | words2
    if not union:
        return 0.0

    return _clip(len(words1 & words2) / len(union))


def similarity(a: CodeFragment, b: CodeFragment) -> float:
    """
    Similarity of two fragments in [0, 1].

    Uses embeddings when both fragments have one, falling back to the
    token-set measure over their contents.
    """
    if a.has_embedding and b.has_embedding:
        return cosine_similarity(a.embedding, b.embedding)
    return token_similarity(a.content, b.content)


def check_dimensions(fragments: Sequence[CodeFragment]) -> Optional[int]:
    """
    Common embedding dimension of a corpus, or None if nothing is embedded.

    Raises:
        DimensionMismatch: Embedded fragments disagree on the dimension.
            Comparisons between them would silently score 0.0.
    """
    dims = {len(f.embedding) for f in fragments if f.has_embedding}
    if len(dims) > 1:
        raise DimensionMismatch(f"Mixed embedding dimensions in corpus: {sorted(dims)}")
    return dims.pop() if dims else None


def similarity_matrix(fragments: Sequence[CodeFragment]) -> np.ndarray:
    """Symmetric (n, n) matrix of pairwise similarities with a unit diagonal."""
    n = len(fragments)
    vectors = _stacked_embeddings(fragments)
    if vectors is not None:
        return _embedding_matrix(vectors)

    matrix = np.eye(n, dtype=np.float64)
    for i in range(n):
        for j in range(i + 1, n):
            matrix[i, j] = matrix[j, i] = similarity(fragments[i], fragments[j])
    return matrix


def _stacked_embeddings(fragments: Sequence[CodeFragment]) -> Optional[np.ndarray]:
    """(n, d) array when every fragment has a finite embedding of one dimension."""
    if not fragments or not all(f.has_embedding for f in fragments):
        return None
    if len({len(f.embedding) for f in fragments}) != 1:
        return None

    vectors = np.array([f.embedding for f in fragments], dtype=np.float64)
    if not np.isfinite(vectors).all():
        return None
    return vectors


def _embedding_matrix(vectors: np.ndarray) -> np.ndarray:
    # Zero-norm rows come back as 0.0 similarity against everything
    matrix = sk_cosine_similarity(vectors)
    matrix = (matrix + matrix.T) / 2.0
    matrix = np.clip(np.round(matrix, _PRECISION), 0.0, 1.0)
    np.fill_diagonal(matrix, 1.0)
    return matrix

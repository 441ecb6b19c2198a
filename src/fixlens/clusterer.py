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
Fragment clusterer - groups near-duplicate code fragments.

The default strategy is seed-centric: each unassigned fragment, in input
order, collects every later unassigned fragment that is similar enough to
it. Membership is decided against the seed only, so two non-seed members
of a group may be dissimilar. This is O(n^2) in the corpus size; keep
corpora small (the duplicate finder caps them at 100 fragments).

``group_connected`` is the stricter alternative: connected components of
the similarity graph, via single-linkage agglomerative clustering.
"""

from typing import Callable, Dict, List, Optional, Sequence

import numpy as np
from sklearn.cluster import AgglomerativeClustering

from .models import CodeFragment, SimilarityGroup
from .similarity import similarity, similarity_matrix


SEED = "seed"
CONNECTED = "connected"
STRATEGIES = (SEED, CONNECTED)

# Agglomerative clustering only merges below the distance threshold
_EPSILON = 1e-9

ProgressCallback = Callable[[int, int, str], None]


def group_by_similarity(
    fragments: Sequence[CodeFragment],
    threshold: float,
    on_progress: Optional[ProgressCallback] = None,
) -> List[SimilarityGroup]:
    """
    Group fragments around seeds, in a single greedy pass.

    Args:
        fragments: Fragments in the order they should be considered
        threshold: Minimum similarity to the seed (0.0-1.0)
        on_progress: Optional callback(current, total, message)

    Returns:
        Groups of two or more fragments, in seed order
    """
    groups = []
    processed = set()
    total = len(fragments)

    for i in range(total):
        if on_progress:
            on_progress(i + 1, total, "grouping fragments")
        if i in processed:
            continue

        seed = fragments[i]
        members = [seed]
        processed.add(i)

        for j in range(i + 1, total):
            if j in processed:
                continue
            if similarity(seed, fragments[j]) >= threshold:
                members.append(fragments[j])
                processed.add(j)

        if len(members) > 1:
            groups.append(SimilarityGroup(fragments=tuple(members), threshold=threshold))

    return groups


def group_connected(
    fragments: Sequence[CodeFragment],
    threshold: float,
) -> List[SimilarityGroup]:
    """
    Group fragments by connected components of the similarity graph.

    Two fragments share a group when a chain of pairs, each at least
    ``threshold`` similar, links them. Groups are ordered by their first
    member and keep input order inside.
    """
    if len(fragments) < 2:
        return []

    distances = 1.0 - similarity_matrix(fragments)
    np.clip(distances, 0.0, 1.0, out=distances)

    clustering = AgglomerativeClustering(
        n_clusters=None,
        distance_threshold=(1.0 - threshold) + _EPSILON,
        metric="precomputed",
        linkage="single",
    )
    labels = clustering.fit_predict(distances)

    cluster_map: Dict[int, List[int]] = {}
    for idx, label in enumerate(labels):
        cluster_map.setdefault(int(label), []).append(idx)

    groups = [
        SimilarityGroup(fragments=tuple(fragments[i] for i in indices), threshold=threshold)
        for indices in cluster_map.values()
        if len(indices) > 1
    ]
    groups.sort(key=lambda g: _first_index(fragments, g))
    return groups


def group_fragments(
    fragments: Sequence[CodeFragment],
    threshold: float,
    strategy: str = SEED,
) -> List[SimilarityGroup]:
    """Dispatch to the grouping strategy named by ``strategy``."""
    if strategy == SEED:
        return group_by_similarity(fragments, threshold)
    elif strategy == CONNECTED:
        return group_connected(fragments, threshold)
    else:
        raise ValueError(f"Unknown grouping strategy: {strategy}")


def group_cohesion(group: SimilarityGroup) -> float:
    """Average pairwise similarity within a group."""
    if len(group) < 2:
        return 1.0

    sim_matrix = similarity_matrix(group.fragments)
    upper_tri = sim_matrix[np.triu_indices(len(group), k=1)]

    return float(np.mean(upper_tri))


def _first_index(fragments: Sequence[CodeFragment], group: SimilarityGroup) -> int:
    for idx, fragment in enumerate(fragments):
        if fragment is group.seed:
            return idx
    return len(fragments)

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
Corpus files - fragments exported by a semantic search.

A corpus file is JSON: either a list of fragment objects or an object with
a "results" list, each entry carrying "content", "file_path" (or
"filePath") and optionally "embedding" and "similarity".
"""

import json
import logging
from pathlib import Path
from typing import List

from .errors import DimensionMismatch, InputMalformed
from .models import CodeFragment
from .similarity import check_dimensions


logger = logging.getLogger(__name__)


def parse_corpus(data) -> List[CodeFragment]:
    """
    Fragments from decoded corpus JSON. Non-object entries are skipped.

    Raises:
        InputMalformed: The top level is neither a list nor a results object
    """
    if isinstance(data, dict):
        data = data.get("results") or []
    if not isinstance(data, list):
        raise InputMalformed(f"Corpus must be a list or an object with 'results', got {type(data).__name__}")

    fragments = []
    for idx, entry in enumerate(data):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping corpus entry {idx}: not an object")
            continue
        fragments.append(CodeFragment.from_dict(entry))

    try:
        check_dimensions(fragments)
    except DimensionMismatch as e:
        logger.warning(f"{e}; mismatched pairs will score 0.0")

    return fragments


def load_corpus(path: Path) -> List[CodeFragment]:
    """
    Read a corpus file.

    Raises:
        OSError: File unreadable
        ValueError: Not valid corpus JSON (InputMalformed for a bad shape)
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    fragments = parse_corpus(data)
    logger.info(f"Loaded {len(fragments)} fragments from {path}")
    return fragments

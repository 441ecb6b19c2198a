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
Configuration file support for fixlens.

Looks for .fixlensrc or .fixlens.toml in current directory or project root.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Dict, Any

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore

from .clusterer import STRATEGIES
from .differ import ALGORITHMS


logger = logging.getLogger(__name__)

CONFIG_NAMES = [".fixlensrc", ".fixlens.toml"]
CONFIG_SECTION = "fixlens"


@dataclass(frozen=True)
class Settings:
    """Effective settings after merging config file and defaults."""

    threshold: float = 0.8
    min_occurrences: int = 3
    max_fragments: int = 100
    context_radius: int = 3
    diff_algorithm: str = "walk"
    grouping: str = "seed"
    output: str = "text"

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "Settings":
        """
        Build settings from a [fixlens] table.

        Unknown keys are ignored. Values that fail validation fall back to
        their defaults with a warning.
        """
        defaults = cls()
        values = {}

        for f in fields(cls):
            if f.name not in data:
                continue
            default = getattr(defaults, f.name)
            try:
                value = type(default)(data[f.name])
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid {f.name!r} in config: {data[f.name]!r}")
                continue
            if not _is_valid(f.name, value):
                logger.warning(f"Ignoring out-of-range {f.name!r} in config: {value!r}")
                continue
            values[f.name] = value

        return cls(**values)


def _is_valid(name: str, value: Any) -> bool:
    if name == "threshold":
        return 0.0 <= value <= 1.0
    if name in ("min_occurrences", "max_fragments"):
        return value >= 1
    if name == "context_radius":
        return value >= 0
    if name == "diff_algorithm":
        return value in ALGORITHMS
    if name == "grouping":
        return value in STRATEGIES
    if name == "output":
        return value in ("text", "markdown", "json", "html")
    return True


def find_config_file(start_path: Path) -> Optional[Path]:
    """
    Search for .fixlensrc or .fixlens.toml in start_path and parent directories.

    Searches up to the root directory or until a config file is found.

    Args:
        start_path: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    # Start from the given path and walk up to root
    current = start_path.resolve()

    while True:
        for name in CONFIG_NAMES:
            config_path = current / name
            if config_path.is_file():
                return config_path

        parent = current.parent
        if parent == current:
            break

        current = parent

    return None


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load the [fixlens] section of the nearest config file.

    Returns empty dict if no config file is found or it cannot be parsed.

    Example config file (.fixlensrc or .fixlens.toml):
        [fixlens]
        threshold = 0.85
        min_occurrences = 2
        max_fragments = 100
        context_radius = 3
        diff_algorithm = "difflib"
        grouping = "connected"
        output = "html"
    """
    config_path = find_config_file(path)

    if config_path is None:
        return {}

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Could not read {config_path}: {e}")
        return {}

    logger.info(f"Loaded config from {config_path}")
    return data.get(CONFIG_SECTION, {})


def load_settings(path: Path) -> Settings:
    """Settings from the nearest config file, or defaults."""
    return Settings.from_mapping(load_config(path))

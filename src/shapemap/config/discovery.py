"""Locate the ``shapemap.toml`` that holds planner and bench settings.

An explicit ``SHAPEMAP_CONFIG`` path wins.  Otherwise the nearest
``shapemap.toml`` in the working directory or one of its parents is used,
so a project can keep one file at its root.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "shapemap.toml"
CONFIG_ENV_VAR = "SHAPEMAP_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the settings file to load, or None to use defaults.

    A ``SHAPEMAP_CONFIG`` that names a missing file yields None rather
    than falling back to the directory search.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None

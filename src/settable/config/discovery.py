"""Locate and read ``settable.toml``.

The file is looked up from the working directory towards the filesystem
root, the way git finds ``.git``. ``SETTABLE_CONFIG`` short-circuits the
search; the CLI's ``--config`` bypasses it entirely.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from settable.config.models import SettableConfig

CONFIG_FILENAME = "settable.toml"
CONFIG_ENV_VAR = "SETTABLE_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Nearest ``settable.toml`` at or above *start* (default: cwd).

    When ``SETTABLE_CONFIG`` is set it is the only candidate, and a missing
    file there means no config rather than falling back to the search.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> SettableConfig:
    """Parse and validate a config file, discovering it from *cwd* if needed.

    No file at all yields the all-defaults :class:`SettableConfig`.
    """
    path = path or find_config(cwd)
    if path is None:
        return SettableConfig()
    with path.open("rb") as fh:
        return SettableConfig.model_validate(tomllib.load(fh))

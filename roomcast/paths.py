from __future__ import annotations

import os
from pathlib import Path


def default_roomcast_dir() -> Path:
    override = os.environ.get("ROOMCAST_HOME")
    if override:
        return Path(override)
    return Path.home() / ".roomcast"


def default_config_path() -> Path:
    return default_roomcast_dir() / "roomcast.toml"


def expand_path(p: str) -> str:
    return os.path.expanduser(os.path.expandvars(p))

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, replace
from typing import Any

from .constants import DEFAULT_NETWORK_TYPE, PROTOCOL_VERSION
from .paths import expand_path


@dataclass(frozen=True)
class PresenceConfig:
    network_type: str = DEFAULT_NETWORK_TYPE
    user_id: str | None = None
    version: str = PROTOCOL_VERSION
    replay_presence: bool = True
    log_level: str = "INFO"
    log_console: bool = True
    log_file: str | None = None
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    log_datefmt: str | None = None


_LOGGING_KEYS = {
    "level": "log_level",
    "console": "log_console",
    "file": "log_file",
    "format": "log_format",
    "datefmt": "log_datefmt",
}

_OPTIONAL_KEYS = ("user_id", "log_file", "log_datefmt")


def load_toml(path: str) -> dict:
    with open(expand_path(path), "rb") as f:
        return tomllib.load(f)


def apply_config_data(cfg: PresenceConfig, data: Any) -> PresenceConfig:
    """Merge a parsed TOML document into `cfg`, returning a new config.

    Keys may sit at the top level or under ``[presence]``; ``[logging]``
    keys are mapped onto the ``log_*`` fields. Unknown keys are ignored.
    """
    if not isinstance(data, dict):
        return cfg

    presence = data.get("presence")
    if isinstance(presence, dict):
        data = {**data, **presence}

    log_table = data.get("logging")
    if isinstance(log_table, dict):
        mapped = {
            field: log_table[key]
            for key, field in _LOGGING_KEYS.items()
            if key in log_table
        }
        data = {**data, **mapped}

    allowed = set(asdict(cfg).keys())
    updates = {k: v for k, v in data.items() if k in allowed}

    for key in _OPTIONAL_KEYS:
        if key in updates and updates[key] == "":
            updates[key] = None

    if "replay_presence" in updates:
        updates["replay_presence"] = bool(updates["replay_presence"])
    if "log_console" in updates:
        updates["log_console"] = bool(updates["log_console"])
    if "version" in updates:
        updates["version"] = str(updates["version"])

    return replace(cfg, **updates) if updates else cfg


def load_config(path: str, cfg: PresenceConfig | None = None) -> PresenceConfig:
    return apply_config_data(cfg or PresenceConfig(), load_toml(path))

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from .config import PresenceConfig

# Marks handlers installed here so a later call replaces only those.
_HANDLER_MARK = "_roomcast_handler"


def _parse_level(value: Any, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip().upper()
    if not text:
        return default
    if text == "WARN":
        text = "WARNING"

    level = logging.getLevelNamesMapping().get(text)
    if level is not None:
        return level

    try:
        return int(text)
    except ValueError:
        return default


def _clean_optional(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value)
    if not s.strip():
        return None
    return s


def configure_logging(
    cfg: PresenceConfig,
    *,
    override_level: str | None = None,
    override_file: str | None = None,
) -> list[logging.Handler]:
    """Configure Python logging for roomcast.

    Safe to call multiple times: handlers from a previous call are
    removed, handlers installed by anything else are left alone.
    Returns the handlers that were installed.
    """

    level = _parse_level(override_level or cfg.log_level, logging.INFO)

    handlers: list[logging.Handler] = []

    if cfg.log_console:
        handlers.append(logging.StreamHandler())

    log_file = _clean_optional(override_file) if override_file is not None else None
    if log_file is None:
        log_file = _clean_optional(cfg.log_file)

    if log_file:
        p = Path(os.path.expanduser(log_file))
        p.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(p, encoding="utf-8"))

    fmt = _clean_optional(cfg.log_format) or "%(asctime)s %(levelname)s %(name)s: %(message)s"
    formatter = logging.Formatter(fmt=fmt, datefmt=_clean_optional(cfg.log_datefmt))

    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, _HANDLER_MARK, False):
            root.removeHandler(h)
            h.close()

    for h in handlers:
        h.setFormatter(formatter)
        setattr(h, _HANDLER_MARK, True)
        root.addHandler(h)

    root.setLevel(level)
    logging.getLogger("roomcast").setLevel(level)

    logging.captureWarnings(True)
    return handlers

"""Structured key=value logger for generator and API events.

Each call prints one line holding ``level``, ``ts`` and the caller's fields, e.g.
``level=info ts=... event=generation_done seed=42 steps=1380 logger=carver.dungeon``.
Phase transitions are logged at debug, so a whole run can be traced by seed
with ``CARVER_LOG_LEVEL=debug``. Errors go to stderr, everything else to stdout.

Usage:
    from carver.logging_utils import get_logger
    log = get_logger("carver.dungeon")
    log.info(event="generation_done", seed=42, steps=1380)

Level comes from CARVER_LOG_LEVEL (debug|info|warn|error, default info);
CARVER_LOG_JSON=1 switches to one JSON object per line. Reserved keys: level, ts.
"""

from __future__ import annotations

import json
import os
import sys
import time

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
_ALIASES = {"warning": "warn"}


def _parse_level(name: str | None, default: int = 20) -> int:
    key = (name or "").strip().lower()
    return LEVELS.get(_ALIASES.get(key, key), default)


CURRENT_LEVEL = _parse_level(os.getenv("CARVER_LOG_LEVEL", "info"))
JSON_MODE = os.getenv("CARVER_LOG_JSON", "0") in ("1", "true", "TRUE", "yes", "on")


def set_level(name: str) -> int:
    """Set the threshold by level name (unknown names leave it unchanged); returns the previous one."""
    global CURRENT_LEVEL
    previous = CURRENT_LEVEL
    CURRENT_LEVEL = _parse_level(name, previous)
    return previous


def _render(value) -> str:
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (tuple, list)):
        return ",".join(_render(v) for v in value)
    return str(value).replace(" ", "_")


def _format(level: str, **fields):
    fields = {k: v for k, v in fields.items() if v is not None}
    ts = int(time.time())
    if JSON_MODE:
        rec = dict(fields, level=level, ts=ts)
        return json.dumps(rec, separators=(",", ":"), default=str)
    parts = [f"level={level}", f"ts={ts}"]
    parts.extend(f"{k}={_render(v)}" for k, v in fields.items())
    return " ".join(parts)


class _Logger:
    def __init__(self, name: str | None = None):
        self.name = name or "carver"

    def enabled(self, lvl: str) -> bool:
        return LEVELS[lvl] >= CURRENT_LEVEL

    def _log(self, lvl: str, **fields):
        if not self.enabled(lvl):
            return
        fields.setdefault("logger", self.name)
        print(_format(lvl, **fields), file=sys.stderr if lvl == "error" else sys.stdout)

    def debug(self, **fields):
        self._log("debug", **fields)

    def info(self, **fields):
        self._log("info", **fields)

    def warn(self, **fields):
        self._log("warn", **fields)

    def error(self, **fields):
        self._log("error", **fields)


_LOGGER_CACHE = {}


def get_logger(name: str):
    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = _Logger(name)
    return _LOGGER_CACHE[name]


log = get_logger("carver")

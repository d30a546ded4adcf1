"""Structured logging for generation runs, the API and the CLI.

Each call prints one line to stderr as key=value pairs (or compact JSON when
DUNGEONGEN_LOG_JSON is set), stamped with a level and timestamp. stdout is
left to the CLI's map and JSON output.

What gets logged:
    debug  per-stage summaries (rooms_placed, corridors_carved, dead_end_grown,
           obstacles_scattered, walls_derived) and spawn_fallback
    info   generation_complete with seed, room count and runtime; server startup
    warn   spawn_unplaced / exit_unplaced and rejected API requests (bad_request)
    error  oob_write when a stage writes outside the grid

Usage:
    from dungeongen.logging_utils import get_logger
    log = get_logger("dungeongen.dungeon")
    log.info(event="generation_complete", seed=42, rooms=6)

DUNGEONGEN_LOG_LEVEL sets the threshold (default info). Non-numeric values
are str()'d with spaces replaced. Reserved keys: level, ts.
"""

from __future__ import annotations

import json
import os
import sys
import time

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
CURRENT_LEVEL = LEVELS.get(os.getenv("DUNGEONGEN_LOG_LEVEL", "info"), 20)
JSON_MODE = os.getenv("DUNGEONGEN_LOG_JSON", "0") in ("1", "true", "TRUE", "yes", "on")


def _format(level: str, **fields):
    if JSON_MODE:
        rec = {k: v for k, v in fields.items() if v is not None}
        rec["level"] = level
        rec["ts"] = int(time.time())
        try:
            return json.dumps(rec, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return json.dumps({"level": level, "ts": int(time.time()), "error": "json_encode_failed"})
    parts = [f"level={level}", f"ts={int(time.time())}"]
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (int, float)):
            parts.append(f"{k}={v}")
        else:
            s = str(v).replace(" ", "_")
            parts.append(f"{k}={s}")
    return " ".join(parts)


class _Logger:
    def __init__(self, name: str | None = None):
        self.name = name or "dungeongen"

    def _log(self, lvl: str, **fields):
        if LEVELS[lvl] < CURRENT_LEVEL:
            return
        if "logger" not in fields:
            fields["logger"] = self.name
        # every level goes to stderr; stdout carries maps and JSON
        print(_format(lvl, **fields), file=sys.stderr)

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


log = get_logger("dungeongen")

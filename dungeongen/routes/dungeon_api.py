"""Dungeon generation HTTP API.

Endpoints:
    POST /api/dungeon/generate        generate from a JSON config body
    GET  /api/dungeon/config          default configuration
    GET  /api/dungeon/<seed>          cached generation by seed (JSON)
    GET  /api/dungeon/<seed>/ascii    same lookup rendered as text
"""

import hashlib
import os
import random
import threading

from flask import Blueprint, Response, jsonify, request

from dungeongen.dungeon import ConfigurationError, Dungeon, DungeonConfig, generate
from dungeongen.dungeon.dungeon import MAX_SEED
from dungeongen.logging_utils import get_logger

log = get_logger("dungeongen.api")

bp_dungeon = Blueprint("dungeon", __name__)

# Largest width or height accepted over HTTP
MAX_DIMENSION = 200

# Upper bounds on the fields that scale the work a single request can trigger
HTTP_LIMITS = {
    "width": MAX_DIMENSION,
    "height": MAX_DIMENSION,
    "room_count": 200,
    "max_room_size": MAX_DIMENSION,
    "max_attempts_per_room": 500,
    "room_attempt_factor": 50,
    "max_corridor_width": 16,
    "extra_connections": 200,
    "extra_corridors": 200,
    "dead_end_count": 100,
    "dead_end_max_length": MAX_DIMENSION,
    "dead_end_max_width": 16,
    "dead_end_lookahead": MAX_DIMENSION,
    "dead_end_attempts": 20,
    "rock_count": MAX_DIMENSION * MAX_DIMENSION // 4,
    "chest_count": 200,
    "obstacle_attempt_factor": 50,
}


def _coerce_seed(payload_seed):
    """Convert a provided seed (int or str) into a non-negative 31-bit int."""
    if payload_seed is None or isinstance(payload_seed, bool):
        return random.randint(0, MAX_SEED)
    if isinstance(payload_seed, int):
        return payload_seed % MAX_SEED
    if isinstance(payload_seed, str):
        s = payload_seed.strip()
        if not s:
            return random.randint(0, MAX_SEED)
        if s.isdigit():
            return int(s) % MAX_SEED
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % MAX_SEED
    raise ConfigurationError("seed must be an integer or a string")


def _check_limits(config: DungeonConfig) -> DungeonConfig:
    if config.width > MAX_DIMENSION or config.height > MAX_DIMENSION:
        raise ConfigurationError(f"grid dimensions are limited to {MAX_DIMENSION}x{MAX_DIMENSION} over HTTP")
    for name, limit in HTTP_LIMITS.items():
        value = getattr(config, name)
        if value is not None and value > limit:
            raise ConfigurationError(f"{name} is limited to {limit} over HTTP, got {value}")
    return config


# Simple in-process cache (seed,width,height,rooms)->Dungeon. Guarded by a lock since the
# dev server handles requests on threads.
_dungeon_cache = {}
_dungeon_cache_lock = threading.Lock()
_DUNGEON_CACHE_MAX = 8  # small LRU-ish manual cap


def get_cached_dungeon(seed: int, width: int, height: int, rooms: int) -> Dungeon:
    config = _check_limits(DungeonConfig(width=width, height=height, room_count=rooms, seed=seed).validate())
    if os.environ.get("DUNGEON_DISABLE_CACHE") == "1":
        return Dungeon(config)
    key = (seed, width, height, rooms)
    with _dungeon_cache_lock:
        dungeon = _dungeon_cache.get(key)
        if dungeon is not None:
            return dungeon
    dungeon = Dungeon(config)
    with _dungeon_cache_lock:
        _dungeon_cache[key] = dungeon
        if len(_dungeon_cache) > _DUNGEON_CACHE_MAX:
            first_key = next(iter(_dungeon_cache.keys()))
            if first_key != key:
                _dungeon_cache.pop(first_key, None)
    return dungeon


def clear_cache():
    with _dungeon_cache_lock:
        _dungeon_cache.clear()


def _bad_request(exc):
    log.warn(event="bad_request", path=request.path, error=str(exc))
    return jsonify({"error": str(exc)}), 400


def _lookup_from_query(seed: str) -> Dungeon:
    defaults = DungeonConfig()
    width = request.args.get("width", default=defaults.width, type=int)
    height = request.args.get("height", default=defaults.height, type=int)
    rooms = request.args.get("rooms", default=defaults.room_count, type=int)
    return get_cached_dungeon(_coerce_seed(seed), width, height, rooms)


@bp_dungeon.route("/api/dungeon/generate", methods=["POST"])
def generate_dungeon():
    """Generate a dungeon from a JSON body of config fields.

    Body JSON (all optional): any ``DungeonConfig`` field plus ``seed``
    (int, numeric string or free text hashed to an int).
    Response: ``GenerationResult.to_json()``.
    """
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data(cache=True):
            return _bad_request(ConfigurationError("request body must be a JSON object"))
        data = {}
    if not isinstance(data, dict):
        return _bad_request(ConfigurationError("request body must be a JSON object"))
    data = dict(data)
    try:
        seed = _coerce_seed(data.pop("seed", None))
        config = _check_limits(DungeonConfig.from_mapping(data))
    except ConfigurationError as exc:
        return _bad_request(exc)
    result = generate(config, seed=seed)
    return jsonify(result.to_json())


@bp_dungeon.route("/api/dungeon/config")
def default_config():
    return jsonify(DungeonConfig().to_dict())


@bp_dungeon.route("/api/dungeon/<seed>")
def dungeon_by_seed(seed):
    try:
        dungeon = _lookup_from_query(seed)
    except ConfigurationError as exc:
        return _bad_request(exc)
    return jsonify(dungeon.to_json())


@bp_dungeon.route("/api/dungeon/<seed>/ascii")
def dungeon_ascii(seed):
    try:
        dungeon = _lookup_from_query(seed)
    except ConfigurationError as exc:
        return _bad_request(exc)
    return Response(dungeon.to_ascii() + "\n", mimetype="text/plain")

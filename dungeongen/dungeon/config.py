import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from flask import current_app, has_app_context

EXIT_DISTANCES = ("manhattan", "euclidean")

# Fields whose default is None and which otherwise hold an int
_OPTIONAL_INT_FIELDS = {"extra_connections", "extra_corridors", "rock_count", "seed"}


class ConfigurationError(ValueError):
    """Raised once at entry when a DungeonConfig cannot be generated from."""


@dataclass
class DungeonConfig:
    width: int = 40
    height: int = 40
    # Rooms
    room_count: int = 6
    min_room_size: int = 4
    max_room_size: int = 8
    room_spacing: int = 1
    edge_margin: int = 1
    max_attempts_per_room: int = 50
    room_attempt_factor: int = 15
    # Corridors
    min_corridor_width: int = 2
    max_corridor_width: int = 4
    extra_connections: Optional[int] = None  # None => len(rooms) // 2 + 1
    extra_corridors: Optional[int] = None  # None => width // 4
    extra_corridor_min_distance: float = 8.0
    widen_corridors: bool = True
    widen_chance: float = 0.5
    # Dead ends
    dead_end_count: int = 3
    dead_end_min_length: int = 8
    dead_end_max_length: int = 12
    dead_end_min_width: int = 2
    dead_end_max_width: int = 3
    dead_end_lookahead: int = 5
    dead_end_attempts: int = 3
    # Obstacles
    rock_count: Optional[int] = None  # None => derived from rock_density
    rock_density: int = 5  # percent of floor cells
    chest_count: int = 2
    obstacle_overlay: bool = False
    cap_rocks_per_room: bool = True
    room_rock_ratio: float = 0.08
    obstacle_attempt_factor: int = 20
    # Landmarks
    exit_distance: str = "manhattan"
    prefer_dead_end_exit: bool = False
    spawn_corner_offset: int = 1
    seed: Optional[int] = None

    def validate(self) -> "DungeonConfig":
        """Check ranges and raise ConfigurationError on the first problem found."""
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"grid dimensions must be positive, got {self.width}x{self.height}")
        _require(self.room_count >= 0, "room_count must be >= 0")
        _require(self.min_room_size >= 1, "min_room_size must be >= 1")
        _require_range("room size", self.min_room_size, self.max_room_size)
        _require(self.room_spacing >= 0, "room_spacing must be >= 0")
        _require(self.edge_margin >= 1, "edge_margin must be >= 1")
        _require(self.max_attempts_per_room >= 1, "max_attempts_per_room must be >= 1")
        _require(self.room_attempt_factor >= 1, "room_attempt_factor must be >= 1")
        _require(self.min_corridor_width >= 1, "min_corridor_width must be >= 1")
        _require_range("corridor width", self.min_corridor_width, self.max_corridor_width)
        _require(self.extra_connections is None or self.extra_connections >= 0, "extra_connections must be >= 0")
        _require(self.extra_corridors is None or self.extra_corridors >= 0, "extra_corridors must be >= 0")
        _require(self.extra_corridor_min_distance >= 0, "extra_corridor_min_distance must be >= 0")
        _require(0.0 <= self.widen_chance <= 1.0, "widen_chance must be within [0, 1]")
        _require(self.dead_end_count >= 0, "dead_end_count must be >= 0")
        _require(self.dead_end_min_length >= 1, "dead_end_min_length must be >= 1")
        _require_range("dead end length", self.dead_end_min_length, self.dead_end_max_length)
        _require(self.dead_end_min_width >= 1, "dead_end_min_width must be >= 1")
        _require_range("dead end width", self.dead_end_min_width, self.dead_end_max_width)
        _require(self.dead_end_lookahead >= 1, "dead_end_lookahead must be >= 1")
        _require(self.dead_end_attempts >= 1, "dead_end_attempts must be >= 1")
        _require(self.rock_count is None or self.rock_count >= 0, "rock_count must be >= 0")
        _require(0 <= self.rock_density <= 100, "rock_density must be within [0, 100]")
        _require(self.chest_count >= 0, "chest_count must be >= 0")
        _require(self.room_rock_ratio >= 0, "room_rock_ratio must be >= 0")
        _require(self.obstacle_attempt_factor >= 1, "obstacle_attempt_factor must be >= 1")
        _require(
            self.exit_distance in EXIT_DISTANCES,
            f"exit_distance must be one of {', '.join(EXIT_DISTANCES)}",
        )
        _require(self.spawn_corner_offset >= 0, "spawn_corner_offset must be >= 0")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: Optional["DungeonConfig"] = None) -> "DungeonConfig":
        """Build a config from a JSON-like mapping layered over ``base`` (or defaults).

        Unknown keys and values of the wrong type raise ConfigurationError; the
        result is validated before it is returned.
        """
        known = {f.name: f for f in fields(cls)}
        template = base or cls()
        updates: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise ConfigurationError(f"unknown config key: {key}")
            updates[key] = _coerce_field(key, value, getattr(cls, key, None))
        return replace(template, **updates).validate()


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigurationError(message)


def _require_range(label: str, low, high) -> None:
    if low > high:
        raise ConfigurationError(f"{label} range is inverted: min {low} > max {high}")


def _coerce_field(key: str, value: Any, default: Any) -> Any:
    if key in _OPTIONAL_INT_FIELDS:
        if value is None or (isinstance(value, int) and not isinstance(value, bool)):
            return value
        raise ConfigurationError(f"{key} must be an integer or null")
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        raise ConfigurationError(f"{key} must be a boolean")
    if isinstance(default, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise ConfigurationError(f"{key} must be an integer")
    if isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise ConfigurationError(f"{key} must be a number")
    if isinstance(default, str):
        if isinstance(value, str):
            return value.lower()
        raise ConfigurationError(f"{key} must be a string")
    return value


def _env_flag(raw: str) -> bool:
    return raw.lower() not in {"0", "false", "no", ""}


def _config_flag(value: Any) -> bool:
    # Flask config may hold strings loaded from env files
    if isinstance(value, str):
        return _env_flag(value.strip())
    return bool(value)


def apply_overrides(config: DungeonConfig) -> DungeonConfig:
    """Layer environment variables, then Flask app config, over ``config``.

    Flask app config has the highest precedence so tests and the API server can
    flip policy flags without touching the process environment.
    """
    env_map = {
        "DUNGEON_OBSTACLE_OVERLAY": "obstacle_overlay",
        "DUNGEON_PREFER_DEAD_END_EXIT": "prefer_dead_end_exit",
    }
    updates: Dict[str, Any] = {}
    for env_key, attr in env_map.items():
        if env_key in os.environ:
            updates[attr] = _env_flag(os.environ.get(env_key, ""))
    if os.environ.get("DUNGEON_EXIT_DISTANCE"):
        updates["exit_distance"] = os.environ["DUNGEON_EXIT_DISTANCE"].strip().lower()
    if has_app_context():
        cfg = current_app.config
        for env_key, attr in env_map.items():
            if cfg.get(env_key) is not None:
                updates[attr] = _config_flag(cfg.get(env_key))
        if cfg.get("DUNGEON_EXIT_DISTANCE"):
            updates["exit_distance"] = str(cfg["DUNGEON_EXIT_DISTANCE"]).lower()
    if not updates:
        return config
    return replace(config, **updates).validate()


def metrics_enabled() -> bool:
    """Generation metrics toggle (env DUNGEON_ENABLE_GENERATION_METRICS, Flask config wins)."""
    enabled = _env_flag(os.environ.get("DUNGEON_ENABLE_GENERATION_METRICS", "1"))
    if has_app_context() and "DUNGEON_ENABLE_GENERATION_METRICS" in current_app.config:
        enabled = _config_flag(current_app.config["DUNGEON_ENABLE_GENERATION_METRICS"])
    return enabled


__all__ = ["DungeonConfig", "ConfigurationError", "EXIT_DISTANCES", "apply_overrides", "metrics_enabled"]

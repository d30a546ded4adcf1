"""Public dungeon package interface."""

from .config import ConfigurationError, DungeonConfig  # noqa: F401
from .dungeon import Dungeon, GenerationResult, generate  # noqa: F401
from .rooms import Room  # noqa: F401
from .tiles import (  # noqa: F401
    CHEST,
    DEAD_END,
    EMPTY,
    EXIT,
    FLOOR,
    FLOOR_LIKE,
    ROCK,
    SPAWN,
    WALL,
    CellKind,
    is_floor_like,
)

__all__ = [
    "Dungeon",
    "DungeonConfig",
    "ConfigurationError",
    "GenerationResult",
    "Room",
    "generate",
    "CellKind",
    "EMPTY",
    "FLOOR",
    "WALL",
    "SPAWN",
    "EXIT",
    "ROCK",
    "CHEST",
    "DEAD_END",
    "FLOOR_LIKE",
    "is_floor_like",
]

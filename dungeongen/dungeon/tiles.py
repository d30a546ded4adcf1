# Cell kinds centralized for modular imports
from enum import Enum


class CellKind(str, Enum):
    EMPTY = " "
    FLOOR = "."
    WALL = "#"
    SPAWN = "S"
    EXIT = "X"
    ROCK = "o"
    CHEST = "$"
    DEAD_END = ","  # grown branch; walkable like FLOOR

    def __str__(self) -> str:
        return self.value


EMPTY = CellKind.EMPTY
FLOOR = CellKind.FLOOR
WALL = CellKind.WALL
SPAWN = CellKind.SPAWN
EXIT = CellKind.EXIT
ROCK = CellKind.ROCK
CHEST = CellKind.CHEST
DEAD_END = CellKind.DEAD_END

# Anything a character could stand on. Wall derivation, obstacle adjacency and
# dead-end lookahead all read this one set.
FLOOR_LIKE = frozenset({FLOOR, DEAD_END, SPAWN, EXIT, CHEST})

# Cells that may still receive a landmark or an obstacle
OPEN_FLOOR = frozenset({FLOOR, DEAD_END})


def is_floor_like(kind: CellKind) -> bool:
    return kind in FLOOR_LIKE


def kind_name(kind: CellKind) -> str:
    """Lower-case name used in JSON payloads ('floor', 'dead_end', ...)."""
    return kind.name.lower()


__all__ = [
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
    "OPEN_FLOOR",
    "is_floor_like",
    "kind_name",
]

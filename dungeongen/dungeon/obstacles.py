"""Rock and chest scattering.

Rocks either replace the floor kind (``ROCK``) or, in overlay mode, sit in a
side set while the grid keeps ``FLOOR`` underneath. Either way the rock
positions are excluded when counting open neighbours, so overlay and replace
mode apply the same rules.
"""
from __future__ import annotations

from typing import AbstractSet, Dict, List, Sequence, Set, Tuple

from dungeongen.logging_utils import get_logger

from .cells import Coord2D, Grid
from .config import DungeonConfig
from .rooms import Room, room_at
from .tiles import CHEST, DEAD_END, FLOOR, OPEN_FLOOR, ROCK

log = get_logger("dungeongen.dungeon.obstacles")

MIN_ROOM_NEIGHBORS = 2
MIN_CORRIDOR_NEIGHBORS = 3
MIN_CHEST_NEIGHBORS = 2


def open_neighbors(grid: Grid, x: int, y: int, rocks: AbstractSet[Coord2D] = frozenset()) -> int:
    """Floor-like 8-neighbours of (x,y) that are not rocks."""
    return grid.count_floor_like(x, y, exclude=rocks)


def is_valid_rock_position(grid: Grid, rooms: Sequence[Room], pos: Coord2D, rocks: AbstractSet[Coord2D]) -> bool:
    x, y = pos
    if grid[x][y] not in OPEN_FLOOR or pos in rocks:
        return False
    if any(n in rocks for n in grid.neighbors_8(x, y)):
        return False
    needed = MIN_ROOM_NEIGHBORS if room_at(rooms, x, y, interior=True) else MIN_CORRIDOR_NEIGHBORS
    return open_neighbors(grid, x, y, rocks) >= needed


def rock_target(grid: Grid, config: DungeonConfig) -> int:
    if config.rock_count is not None:
        return config.rock_count
    return len(grid.positions_of(OPEN_FLOOR)) * config.rock_density // 100


def scatter_rocks(grid: Grid, rooms: Sequence[Room], config: DungeonConfig, rng) -> List[Coord2D]:
    """Place rocks by rejection sampling; returns positions in placement order."""
    target = rock_target(grid, config)
    pool = grid.positions_of(OPEN_FLOOR)
    placed: List[Coord2D] = []
    if target <= 0 or not pool:
        return placed
    rock_set: Set[Coord2D] = set()
    attempts = target * config.obstacle_attempt_factor
    while len(placed) < target and attempts > 0:
        attempts -= 1
        pos = pool[rng.randrange(len(pool))]
        if not is_valid_rock_position(grid, rooms, pos, rock_set):
            continue
        rock_set.add(pos)
        placed.append(pos)
        if not config.obstacle_overlay:
            grid[pos[0]][pos[1]] = ROCK
    return placed


def cap_room_rocks(
    grid: Grid, rooms: Sequence[Room], rocks: List[Coord2D], config: DungeonConfig, rng
) -> int:
    """Remove random rocks from any room holding more than its share. Mutates ``rocks``."""
    removed = 0
    for room in rooms:
        inside = [r for r in rocks if room.contains(*r)]
        cap = max(1, int(room.area * config.room_rock_ratio))
        excess = len(inside) - cap
        if excess <= 0:
            continue
        for pos in rng.sample(inside, excess):
            rocks.remove(pos)
            if not config.obstacle_overlay:
                grid[pos[0]][pos[1]] = FLOOR
            removed += 1
    return removed


def _try_chest(grid: Grid, pos: Coord2D, rocks: AbstractSet[Coord2D], kinds) -> bool:
    x, y = pos
    if grid[x][y] not in kinds or pos in rocks:
        return False
    if open_neighbors(grid, x, y, rocks) < MIN_CHEST_NEIGHBORS:
        return False
    grid[x][y] = CHEST
    return True


def scatter_chests(
    grid: Grid,
    branches: Sequence[Sequence[Coord2D]],
    config: DungeonConfig,
    rng,
    rocks: AbstractSet[Coord2D] = frozenset(),
) -> List[Coord2D]:
    """Chests go on dead-end tips first, then on random open cells."""
    target = config.chest_count
    placed: List[Coord2D] = []
    for branch in branches:
        if len(placed) >= target:
            break
        tip = branch[-1]
        if _try_chest(grid, tip, rocks, (DEAD_END,)):
            placed.append(tip)
    pool = [p for p in grid.positions_of(OPEN_FLOOR) if p not in rocks]
    attempts = target * config.obstacle_attempt_factor
    while len(placed) < target and attempts > 0 and pool:
        attempts -= 1
        pos = pool[rng.randrange(len(pool))]
        if _try_chest(grid, pos, rocks, OPEN_FLOOR):
            placed.append(pos)
    return placed


def scatter_obstacles(
    grid: Grid, rooms: Sequence[Room], branches: Sequence[Sequence[Coord2D]], config: DungeonConfig, rng
) -> Tuple[List[Coord2D], List[Coord2D], Dict[str, int]]:
    """Rocks, per-room rock cap, then chests. Returns (rocks, chests, stats)."""
    rocks = scatter_rocks(grid, rooms, config, rng)
    placed = len(rocks)
    removed = cap_room_rocks(grid, rooms, rocks, config, rng) if config.cap_rocks_per_room else 0
    overlay = frozenset(rocks) if config.obstacle_overlay else frozenset()
    chests = scatter_chests(grid, branches, config, rng, overlay)
    log.debug(event="obstacles_scattered", rocks=len(rocks), removed=removed, chests=len(chests))
    return rocks, chests, {"rocks_placed": placed, "rocks_removed": removed, "chests_placed": len(chests)}


__all__ = [
    "open_neighbors",
    "is_valid_rock_position",
    "rock_target",
    "scatter_rocks",
    "cap_room_rocks",
    "scatter_chests",
    "scatter_obstacles",
]

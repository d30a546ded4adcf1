"""Spawn and exit selection.

Exit distance is straight-line (manhattan or euclidean) from the spawn, not a
walked path length.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from dungeongen.logging_utils import get_logger

from .cells import Coord2D, Grid
from .config import DungeonConfig
from .rooms import Room, room_at
from .tiles import EXIT, FLOOR, FLOOR_LIKE, OPEN_FLOOR, SPAWN

log = get_logger("dungeongen.dungeon.landmarks")


def manhattan(a: Coord2D, b: Coord2D) -> float:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def euclidean(a: Coord2D, b: Coord2D) -> float:
    return math.dist(a, b)


DISTANCES: Dict[str, Callable[[Coord2D, Coord2D], float]] = {
    "manhattan": manhattan,
    "euclidean": euclidean,
}


def _nearest_floor(grid: Grid, target: Coord2D) -> Optional[Coord2D]:
    best = None
    best_d = None
    for x, y in grid.positions():
        if grid[x][y] not in FLOOR_LIKE:
            continue
        d = manhattan((x, y), target)
        if best_d is None or d < best_d:
            best, best_d = (x, y), d
    return best


def place_spawn(
    grid: Grid, rooms: Sequence[Room], corridor_cells: Sequence[Coord2D], config: DungeonConfig, rng
) -> Tuple[Optional[Coord2D], bool]:
    """Pick the spawn cell and stamp it. Returns (position or None, used_fallback)."""
    candidates = [(x, y) for x, y in corridor_cells if grid[x][y] == FLOOR and not room_at(rooms, x, y)]
    if candidates:
        spawn = candidates[rng.randrange(len(candidates))]
        fallback = False
    else:
        corner = (config.spawn_corner_offset, config.spawn_corner_offset)
        spawn = _nearest_floor(grid, corner)
        fallback = True
        if spawn is None:
            log.warn(event="spawn_unplaced", reason="no_floor")
            return None, True
        log.debug(event="spawn_fallback", corner=corner, spawn=spawn)
    grid[spawn[0]][spawn[1]] = SPAWN
    return spawn, fallback


def _farthest(candidates: List[Coord2D], spawn: Coord2D, dist) -> Optional[Coord2D]:
    best = None
    best_d = -1.0
    for pos in candidates:
        d = dist(pos, spawn)
        # strict comparison keeps the first cell in scan order on ties
        if d > best_d:
            best, best_d = pos, d
    return best


def place_exit(
    grid: Grid, rooms: Sequence[Room], spawn: Optional[Coord2D], config: DungeonConfig
) -> Optional[Coord2D]:
    """Stamp the exit on the open cell farthest from ``spawn``.

    With ``prefer_dead_end_exit`` only cells with at most two floor-like
    neighbours are considered, and a pick inside a room interior is replaced
    by the farthest candidate outside every room interior.
    """
    if spawn is None:
        return None
    dist = DISTANCES[config.exit_distance]
    candidates = [p for p in grid.positions_of(OPEN_FLOOR) if p != spawn]
    if not candidates:
        log.warn(event="exit_unplaced", reason="no_candidates")
        return None
    exit_pos = None
    if config.prefer_dead_end_exit:
        narrow = [(x, y) for x, y in candidates if grid.count_floor_like(x, y) <= 2]
        exit_pos = _farthest(narrow, spawn, dist)
        if exit_pos is not None and room_at(rooms, *exit_pos, interior=True):
            ranked = sorted(narrow, key=lambda p: -dist(p, spawn))
            exit_pos = next((p for p in ranked if not room_at(rooms, *p, interior=True)), None)
    if exit_pos is None:
        exit_pos = _farthest(candidates, spawn, dist)
    grid[exit_pos[0]][exit_pos[1]] = EXIT
    return exit_pos


__all__ = ["place_spawn", "place_exit", "manhattan", "euclidean", "DISTANCES"]

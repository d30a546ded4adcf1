"""Corridor carving: room chain, loop connections, floor-pair extras, widening.

Every corridor is an L-shaped path stepped one cell at a time. At each step a
band of ``width`` cells perpendicular to the travel direction is stamped,
clipped to the grid interior so the outer ring stays free for walls. Carving
is purely additive: only EMPTY cells become FLOOR, and each converted cell is
appended to the run's corridor cell list.
"""
from __future__ import annotations

import math
from typing import Dict, List, Tuple

from .cells import Coord2D, Grid
from .config import DungeonConfig
from .rooms import Room
from .tiles import EMPTY, FLOOR, FLOOR_LIKE


def band_offsets(width: int) -> range:
    """Offsets of a band of ``width`` cells centred on the step position."""
    return range(-(width // 2), width - width // 2)


def _stamp(grid: Grid, x: int, y: int, corridor_cells: List[Coord2D]) -> int:
    if grid.is_interior(x, y) and grid[x][y] == EMPTY:
        grid[x][y] = FLOOR
        corridor_cells.append((x, y))
        return 1
    return 0


def carve_corridor(
    grid: Grid,
    start: Coord2D,
    end: Coord2D,
    width: int,
    rng,
    corridor_cells: List[Coord2D],
) -> int:
    """Carve an L-shaped corridor from ``start`` to ``end``; returns cells converted."""
    x, y = start
    tx, ty = end
    offsets = band_offsets(width)
    carved = 0

    def walk_x():
        nonlocal x, carved
        while x != tx:
            x += 1 if tx > x else -1
            for k in offsets:
                carved += _stamp(grid, x, y + k, corridor_cells)

    def walk_y():
        nonlocal y, carved
        while y != ty:
            y += 1 if ty > y else -1
            for k in offsets:
                carved += _stamp(grid, x + k, y, corridor_cells)

    if rng.random() < 0.5:
        walk_x()
        walk_y()
    else:
        walk_y()
        walk_x()
    return carved


def _corridor_width(config: DungeonConfig, rng) -> int:
    return rng.randint(config.min_corridor_width, config.max_corridor_width)


def connect_rooms(grid: Grid, rooms: List[Room], config: DungeonConfig, rng, corridor_cells: List[Coord2D]) -> int:
    """Chain rooms in list order, then add random room-pair loops. Returns corridors carved."""
    if len(rooms) <= 1:
        return 0
    carved = 0
    for a, b in zip(rooms, rooms[1:]):
        carve_corridor(grid, a.center, b.center, _corridor_width(config, rng), rng, corridor_cells)
        carved += 1
    extra = config.extra_connections
    if extra is None:
        extra = len(rooms) // 2 + 1
    for _ in range(extra):
        ia = rng.randrange(len(rooms))
        ib = rng.randrange(len(rooms))
        if ia == ib:
            continue
        carve_corridor(grid, rooms[ia].center, rooms[ib].center, _corridor_width(config, rng), rng, corridor_cells)
        carved += 1
    return carved


def add_extra_corridors(
    grid: Grid, rooms: List[Room], config: DungeonConfig, rng, corridor_cells: List[Coord2D]
) -> int:
    """Join random far-apart floor tiles for additional exploration paths.

    Only runs once at least two rooms exist; a lone room gets no corridors.
    """
    if len(rooms) < 2:
        return 0
    draws = config.extra_corridors
    if draws is None:
        draws = grid.width // 4
    carved = 0
    for _ in range(draws):
        floor_tiles = grid.positions_of((FLOOR,))
        if len(floor_tiles) < 2:
            break
        a = floor_tiles[rng.randrange(len(floor_tiles))]
        b = floor_tiles[rng.randrange(len(floor_tiles))]
        if a == b or math.dist(a, b) <= config.extra_corridor_min_distance:
            continue
        carve_corridor(grid, a, b, _corridor_width(config, rng), rng, corridor_cells)
        carved += 1
    return carved


def widen_corridors(grid: Grid, config: DungeonConfig, rng, corridor_cells: List[Coord2D]) -> int:
    """Smooth pinch points: floor cells with <= 3 floor neighbours grow into empty space.

    Reads a snapshot so cells added in this pass do not trigger further growth.
    """
    snapshot = grid.snapshot()
    corridor_set = set(corridor_cells)
    widened = 0
    for x in range(1, grid.width - 1):
        for y in range(1, grid.height - 1):
            if snapshot[x][y] not in FLOOR_LIKE:
                continue
            if snapshot.count_floor_like(x, y) > 3:
                continue
            for nx, ny in snapshot.neighbors_8(x, y):
                if not grid.is_interior(nx, ny) or snapshot[nx][ny] != EMPTY:
                    continue
                if grid[nx][ny] != EMPTY or rng.random() >= config.widen_chance:
                    continue
                grid[nx][ny] = FLOOR
                widened += 1
                if (x, y) in corridor_set:
                    corridor_cells.append((nx, ny))
    return widened


def carve_corridors(
    grid: Grid, rooms: List[Room], config: DungeonConfig, rng
) -> Tuple[List[Coord2D], Dict[str, int]]:
    """Run the whole corridor stage; returns (corridor_cells, stats)."""
    corridor_cells: List[Coord2D] = []
    stats = {
        "corridors_carved": connect_rooms(grid, rooms, config, rng, corridor_cells),
        "extra_corridors_carved": add_extra_corridors(grid, rooms, config, rng, corridor_cells),
        "cells_widened": 0,
    }
    if config.widen_corridors:
        stats["cells_widened"] = widen_corridors(grid, config, rng, corridor_cells)
    return corridor_cells, stats

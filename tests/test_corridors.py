import random

from dungeongen.dungeon import EMPTY, FLOOR, WALL, DungeonConfig
from dungeongen.dungeon.cells import Grid
from dungeongen.dungeon.rooms import Room, place_rooms
from dungeongen.dungeon.tunnels import (
    add_extra_corridors,
    band_offsets,
    carve_corridor,
    carve_corridors,
    connect_rooms,
    widen_corridors,
)


def test_band_offsets_center_on_step():
    assert list(band_offsets(1)) == [0]
    assert list(band_offsets(2)) == [-1, 0]
    assert list(band_offsets(3)) == [-1, 0, 1]
    assert list(band_offsets(4)) == [-2, -1, 0, 1]


def test_single_width_corridor_is_an_l_path():
    for seed in range(6):
        grid = Grid(16, 12)
        cells = []
        carved = carve_corridor(grid, (2, 2), (10, 8), 1, random.Random(seed), cells)
        # start cell is not stamped; every step converts exactly one cell
        assert carved == 8 + 6
        assert len(cells) == carved
        assert all(grid[x][y] == FLOOR for x, y in cells)
        assert cells[-1] == (10, 8)


def test_corridor_band_clipped_to_interior():
    grid = Grid(12, 12)
    cells = []
    carve_corridor(grid, (1, 1), (1, 10), 4, random.Random(0), cells)
    for x in range(12):
        for y in range(12):
            if x in (0, 11) or y in (0, 11):
                assert grid[x][y] == EMPTY
    assert cells
    assert all(grid.is_interior(x, y) for x, y in cells)


def test_carving_is_additive():
    grid = Grid(12, 6)
    grid[5][2] = WALL
    grid[7][2] = FLOOR
    cells = []
    carve_corridor(grid, (1, 2), (10, 2), 1, random.Random(1), cells)
    assert grid[5][2] == WALL
    assert (5, 2) not in cells
    # pre-existing floor is passed through but not recorded as corridor
    assert (7, 2) not in cells
    assert (6, 2) in cells and (8, 2) in cells


def test_connect_rooms_chains_in_order():
    cfg = DungeonConfig(extra_connections=0)
    grid = Grid(40, 40)
    rooms = [Room(2, 2, 4, 4), Room(20, 4, 5, 5), Room(10, 25, 6, 4)]
    for r in rooms:
        for x, y in r.cells():
            grid[x][y] = FLOOR
    cells = []
    assert connect_rooms(grid, rooms, cfg, random.Random(3), cells) == 2
    assert cells
    assert connect_rooms(grid, rooms[:1], cfg, random.Random(3), []) == 0


def test_extra_corridors_need_two_rooms():
    cfg = DungeonConfig(extra_corridors=10)
    grid = Grid(30, 30)
    room = Room(3, 3, 6, 6)
    for x, y in room.cells():
        grid[x][y] = FLOOR
    cells = []
    assert add_extra_corridors(grid, [room], cfg, random.Random(1), cells) == 0
    assert cells == []


def test_extra_corridors_join_distant_floor():
    cfg = DungeonConfig(extra_corridors=20, extra_corridor_min_distance=8.0)
    grid = Grid(40, 40)
    rooms = [Room(2, 2, 5, 5), Room(30, 30, 5, 5)]
    for r in rooms:
        for x, y in r.cells():
            grid[x][y] = FLOOR
    cells = []
    carved = add_extra_corridors(grid, rooms, cfg, random.Random(11), cells)
    assert carved > 0
    assert cells


def test_widen_full_chance_opens_every_neighbour():
    cfg = DungeonConfig(widen_chance=1.0)
    grid = Grid(10, 10)
    grid[5][5] = FLOOR
    cells = [(5, 5)]
    widened = widen_corridors(grid, cfg, random.Random(0), cells)
    assert widened == 8
    assert len(cells) == 9
    assert all(grid[x][y] == FLOOR for x, y in grid.neighbors_8(5, 5))


def test_widen_zero_chance_is_noop():
    cfg = DungeonConfig(widen_chance=0.0)
    grid = Grid(10, 10)
    grid[5][5] = FLOOR
    cells = [(5, 5)]
    assert widen_corridors(grid, cfg, random.Random(0), cells) == 0
    assert cells == [(5, 5)]


def test_widen_skips_non_corridor_sources_for_corridor_list():
    cfg = DungeonConfig(widen_chance=1.0)
    grid = Grid(10, 10)
    grid[5][5] = FLOOR
    cells = []
    assert widen_corridors(grid, cfg, random.Random(0), cells) == 8
    assert cells == []


def test_carve_corridors_stats():
    cfg = DungeonConfig()
    grid = Grid(cfg.width, cfg.height)
    rng = random.Random(8)
    rooms, _, _ = place_rooms(grid, cfg, rng)
    cells, stats = carve_corridors(grid, rooms, cfg, rng)
    assert set(stats) == {"corridors_carved", "extra_corridors_carved", "cells_widened"}
    assert stats["corridors_carved"] >= len(rooms) - 1
    assert len(cells) == len(set(cells))
    assert all(grid.is_interior(x, y) for x, y in cells)

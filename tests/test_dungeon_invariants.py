"""Structural invariants across a spread of seeds and config shapes."""

import math
from dataclasses import replace

import pytest

from dungeongen.dungeon import CHEST, DEAD_END, EXIT, FLOOR_LIKE, ROCK, SPAWN, WALL, DungeonConfig, generate
from dungeongen.dungeon.landmarks import DISTANCES
from dungeongen.dungeon.tiles import OPEN_FLOOR

from dungeon_test_utils import SWEEP_CONFIGS, chebyshev_adjacent, floor_like_neighbors, iter_cells

SEEDS = [1, 2, 3, 42, 1337, 9001]

CASES = [(i, seed) for i in range(len(SWEEP_CONFIGS)) for seed in SEEDS]


@pytest.fixture(scope="module")
def results():
    return {(i, seed): generate(replace(SWEEP_CONFIGS[i], seed=seed)) for i, seed in CASES}


@pytest.mark.parametrize("case", CASES)
def test_padded_rooms_disjoint(results, case):
    r = results[case]
    pad = r.config.room_spacing
    for i, a in enumerate(r.rooms):
        for b in r.rooms[i + 1:]:
            assert not a.padded(pad).intersects(b.padded(pad))


@pytest.mark.parametrize("case", CASES)
def test_walls_border_floor(results, case):
    r = results[case]
    g = r.grid
    for x, y in iter_cells(g, (WALL,)):
        assert floor_like_neighbors(g, x, y) >= 1 or g.is_edge(x, y)


@pytest.mark.parametrize("case", CASES)
def test_spawn_and_exit_distinct_and_stamped(results, case):
    r = results[case]
    if len(list(iter_cells(r.grid, FLOOR_LIKE))) < 2:
        pytest.skip("not enough floor for two landmarks")
    assert r.spawn is not None and r.exit is not None
    assert r.spawn != r.exit
    assert r.grid[r.spawn[0]][r.spawn[1]] == SPAWN
    assert r.grid[r.exit[0]][r.exit[1]] == EXIT
    assert len(list(iter_cells(r.grid, (SPAWN,)))) == 1
    assert len(list(iter_cells(r.grid, (EXIT,)))) == 1


@pytest.mark.parametrize("case", CASES)
def test_exit_is_farthest_from_spawn_among_corridors(results, case):
    r = results[case]
    if r.config.prefer_dead_end_exit or r.exit is None:
        pytest.skip("dead-end preference may trade distance for shape")
    dist = DISTANCES[r.config.exit_distance]
    best = dist(r.exit, r.spawn)
    for cell in r.corridor_cells:
        if cell != r.spawn:
            assert dist(cell, r.spawn) <= best


@pytest.mark.parametrize("case", CASES)
def test_dead_end_branches(results, case):
    r = results[case]
    corridor = set(r.corridor_cells)
    room_cells = {c for room in r.rooms for c in room.cells()}
    for branch in r.dead_ends:
        assert len(branch) > 2
        for x, y in branch:
            assert (x, y) not in corridor and (x, y) not in room_cells
            assert r.grid[x][y] in (DEAD_END, CHEST, ROCK, SPAWN, EXIT)


@pytest.mark.parametrize("case", CASES)
def test_obstacles_have_room_to_breathe(results, case):
    r = results[case]
    rocks = set(r.rocks)
    for i, a in enumerate(r.rocks):
        for b in r.rocks[i + 1:]:
            assert not chebyshev_adjacent(a, b)
    for x, y in list(r.rocks) + list(r.chests):
        assert floor_like_neighbors(r.grid, x, y, exclude=rocks) >= 2
    for x, y in r.chests:
        assert r.grid[x][y] == CHEST
    if r.config.obstacle_overlay:
        assert all(r.grid[x][y] in OPEN_FLOOR for x, y in r.rocks)
    else:
        assert all(r.grid[x][y] == ROCK for x, y in r.rocks)


@pytest.mark.parametrize("case", CASES)
def test_room_rock_cap(results, case):
    r = results[case]
    for room in r.rooms:
        inside = [p for p in r.rocks if room.contains(*p)]
        assert len(inside) <= max(1, int(room.area * r.config.room_rock_ratio))


def test_minimum_config_holds_invariants():
    # room_count=3 on a tiny grid, many seeds
    for seed in range(40):
        r = generate(DungeonConfig(width=14, height=14, room_count=3, min_room_size=3, max_room_size=4, seed=seed))
        for x, y in iter_cells(r.grid, (WALL,)):
            assert floor_like_neighbors(r.grid, x, y) >= 1 or r.grid.is_edge(x, y)
        if r.spawn is not None and r.exit is not None:
            assert r.spawn != r.exit
        for branch in r.dead_ends:
            assert len(branch) > 2


def test_common_case_exit_is_well_separated():
    far = 0
    seeds = range(20)
    for seed in seeds:
        r = generate(DungeonConfig(width=40, height=40, room_count=6, seed=seed))
        assert 1 <= len(r.rooms) <= 6
        if r.exit and r.spawn and math.dist(r.exit, r.spawn) > math.hypot(40, 40) / 4:
            far += 1
    assert far >= len(seeds) // 2

"""Dead-end branches grown off existing floor for exploration depth.

A branch starts on a corridor cell (any floor cell as a fallback), heads in a
cardinal direction with enough clear space, and is carved as a band of
DEAD_END cells. Branches never merge into unrelated floor: a collision past
the first step discards the whole branch.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from dungeongen.logging_utils import get_logger

from .cells import NEIGHBORS_4, Coord2D, Grid
from .config import DungeonConfig
from .tiles import DEAD_END, EMPTY, FLOOR, FLOOR_LIKE
from .tunnels import band_offsets

log = get_logger("dungeongen.dungeon.dead_ends")

Direction = Tuple[int, int]


def can_grow_in_direction(grid: Grid, pos: Coord2D, direction: Direction, lookahead: int) -> bool:
    """Whether a branch rooted at ``pos`` has clear space along ``direction``.

    The adjacent cell must be EMPTY, and for ``lookahead`` steps the centre line
    must stay EMPTY inside the interior with no floor-like cell one step to
    either side.
    """
    x, y = pos
    dx, dy = direction
    px, py = -dy, dx  # perpendicular
    for dist in range(1, lookahead + 1):
        cx, cy = x + dx * dist, y + dy * dist
        if not grid.is_interior(cx, cy) or grid[cx][cy] != EMPTY:
            return False
        for side in (-1, 1):
            sx, sy = cx + px * side, cy + py * side
            if grid.in_bounds(sx, sy) and grid[sx][sy] in FLOOR_LIKE:
                return False
    return True


def growable_directions(grid: Grid, pos: Coord2D, lookahead: int) -> List[Direction]:
    return [d for d in NEIGHBORS_4 if can_grow_in_direction(grid, pos, d, lookahead)]


def _candidates(grid: Grid, cells: Sequence[Coord2D], lookahead: int) -> List[Tuple[Coord2D, List[Direction]]]:
    out = []
    for x, y in cells:
        if grid[x][y] != FLOOR:
            continue
        dirs = growable_directions(grid, (x, y), lookahead)
        if dirs:
            out.append(((x, y), dirs))
    return out


def grow_branch(
    grid: Grid, root: Coord2D, direction: Direction, length: int, width: int
) -> Optional[List[Coord2D]]:
    """Collect the cells of one branch without stamping them.

    Returns the ordered cell list (centre-line cell last on every step, so the
    final element is the tip) or None when the branch would touch existing
    floor beyond its first step.
    """
    x, y = root
    dx, dy = direction
    px, py = -dy, dx
    # centre offset 0 goes last so the tip is on the centre line
    offsets = sorted(band_offsets(width), key=lambda k: (k == 0, k))
    collected: List[Coord2D] = []
    for dist in range(1, length + 1):
        cx, cy = x + dx * dist, y + dy * dist
        step: List[Coord2D] = []
        for k in offsets:
            bx, by = cx + px * k, cy + py * k
            if not grid.is_interior(bx, by):
                continue
            kind = grid[bx][by]
            if kind in FLOOR_LIKE:
                if dist > 1:
                    return None
                continue
            if kind != EMPTY:
                continue
            step.append((bx, by))
        collected.extend(step)
    return collected


def grow_dead_ends(
    grid: Grid, corridor_cells: Sequence[Coord2D], config: DungeonConfig, rng
) -> Tuple[List[List[Coord2D]], Dict[str, int]]:
    """Grow up to ``config.dead_end_count`` branches; returns (branches, stats)."""
    branches: List[List[Coord2D]] = []
    skipped = 0
    lookahead = config.dead_end_lookahead
    for _ in range(config.dead_end_count):
        grown = None
        for _attempt in range(config.dead_end_attempts):
            candidates = _candidates(grid, corridor_cells, lookahead)
            if not candidates:
                candidates = _candidates(grid, grid.positions_of((FLOOR,)), lookahead)
            if not candidates:
                break
            root, dirs = candidates[rng.randrange(len(candidates))]
            direction = dirs[rng.randrange(len(dirs))]
            length = rng.randint(config.dead_end_min_length, config.dead_end_max_length)
            width = rng.randint(config.dead_end_min_width, config.dead_end_max_width)
            cells = grow_branch(grid, root, direction, length, width)
            if cells is not None and len(cells) > 2:
                grown = cells
                break
        if grown is None:
            skipped += 1
            continue
        for bx, by in grown:
            grid[bx][by] = DEAD_END
        branches.append(grown)
        log.debug(event="dead_end_grown", cells=len(grown), tip=grown[-1])
    return branches, {"dead_ends_grown": len(branches), "dead_ends_skipped": skipped}

from .cells import Grid
from .tiles import EMPTY, FLOOR_LIKE, WALL


def derive_walls(grid: Grid) -> int:
    """Wall off every EMPTY cell touching floor-like space. Returns walls added.

    Reads a snapshot so new walls never feed back into the same pass.
    """
    snapshot = grid.snapshot()
    added = 0
    for x, y in snapshot.positions():
        if snapshot[x][y] != EMPTY:
            continue
        if snapshot.has_neighbor(x, y, FLOOR_LIKE):
            grid[x][y] = WALL
            added += 1
    return added


def _needs_patch(grid: Grid, x: int, y: int) -> bool:
    if grid.is_edge(x, y):
        return True
    for nx, ny in grid.neighbors_8(x, y):
        if grid[nx][ny] == EMPTY and not grid.has_neighbor(nx, ny, (WALL,)):
            return True
    return False


def patch_border_gaps(grid: Grid) -> int:
    """Close any opening left between floor-like space and the void. Returns walls added."""
    patched = 0
    for x, y in grid.positions():
        if grid[x][y] not in FLOOR_LIKE or not _needs_patch(grid, x, y):
            continue
        for nx, ny in grid.neighbors_8(x, y):
            if grid[nx][ny] == EMPTY:
                grid[nx][ny] = WALL
                patched += 1
    return patched

"""Grid container shared by every generation stage.

Storage is column-major (``grid[x][y]``) to match the loops used throughout
the generator: ``for x in range(width): for y in range(height)``. That order
is also the scan order used for tie-breaks.
"""
from __future__ import annotations

from typing import Collection, Dict, Iterator, List, Optional, Tuple

from dungeongen.logging_utils import get_logger

from .tiles import EMPTY, FLOOR_LIKE, CellKind

Coord2D = Tuple[int, int]

NEIGHBORS_4: Tuple[Coord2D, ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))
NEIGHBORS_8: Tuple[Coord2D, ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)

log = get_logger("dungeongen.dungeon.cells")


class Grid:
    __slots__ = ("width", "height", "_cells")

    def __init__(self, width: int, height: int, fill: CellKind = EMPTY):
        self.width = width
        self.height = height
        self._cells: List[List[CellKind]] = [[fill for _ in range(height)] for _ in range(width)]

    def __getitem__(self, x: int) -> List[CellKind]:
        return self._cells[x]

    # ---- Bounds ----------------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_interior(self, x: int, y: int) -> bool:
        """True when (x,y) is inside the grid and off the outermost ring."""
        return 0 < x < self.width - 1 and 0 < y < self.height - 1

    def is_edge(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and not self.is_interior(x, y)

    def set(self, x: int, y: int, kind: CellKind) -> None:
        if not self.in_bounds(x, y):
            # Stages clip before writing; this only catches regressions.
            log.error(event="oob_write", x=x, y=y, kind=kind.name)
            return
        self._cells[x][y] = kind

    # ---- Neighbourhoods --------------------------------------------------
    def neighbors_8(self, x: int, y: int) -> Iterator[Coord2D]:
        for dx, dy in NEIGHBORS_8:
            nx, ny = x + dx, y + dy
            if 0 <= nx < self.width and 0 <= ny < self.height:
                yield nx, ny

    def count_floor_like(self, x: int, y: int, exclude: Optional[Collection[Coord2D]] = None) -> int:
        """Number of floor-like 8-neighbours of (x,y), skipping positions in ``exclude``."""
        count = 0
        for nx, ny in self.neighbors_8(x, y):
            if self._cells[nx][ny] in FLOOR_LIKE and not (exclude and (nx, ny) in exclude):
                count += 1
        return count

    def has_neighbor(self, x: int, y: int, kinds: Collection[CellKind]) -> bool:
        return any(self._cells[nx][ny] in kinds for nx, ny in self.neighbors_8(x, y))

    # ---- Scans -----------------------------------------------------------
    def positions(self) -> Iterator[Coord2D]:
        for x in range(self.width):
            for y in range(self.height):
                yield x, y

    def positions_of(self, kinds: Collection[CellKind]) -> List[Coord2D]:
        return [(x, y) for x, y in self.positions() if self._cells[x][y] in kinds]

    def counts(self) -> Dict[CellKind, int]:
        counts = {kind: 0 for kind in CellKind}
        for column in self._cells:
            for kind in column:
                counts[kind] += 1
        return counts

    def snapshot(self) -> "Grid":
        copy = Grid.__new__(Grid)
        copy.width = self.width
        copy.height = self.height
        copy._cells = [list(column) for column in self._cells]
        return copy

    def rows(self, overlay: Optional[Dict[Coord2D, CellKind]] = None) -> List[str]:
        out = []
        for y in range(self.height):
            chars = []
            for x in range(self.width):
                kind = overlay.get((x, y), self._cells[x][y]) if overlay else self._cells[x][y]
                chars.append(kind.value)
            out.append("".join(chars))
        return out

    def to_ascii(self, overlay: Optional[Dict[Coord2D, CellKind]] = None) -> str:
        return "\n".join(self.rows(overlay))


__all__ = ["Grid", "Coord2D", "NEIGHBORS_4", "NEIGHBORS_8"]

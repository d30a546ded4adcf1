import random
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .cells import Grid
from .config import DungeonConfig
from .tiles import FLOOR


@dataclass(frozen=True)
class Room:
    x: int
    y: int
    w: int
    h: int

    def cells(self) -> Iterator[Tuple[int, int]]:
        for ix in range(self.x, self.x + self.w):
            for iy in range(self.y, self.y + self.h):
                yield ix, iy

    @property
    def center(self) -> Tuple[int, int]:
        return (self.x + self.w // 2, self.y + self.h // 2)

    @property
    def area(self) -> int:
        return self.w * self.h

    def padded(self, margin: int) -> "Room":
        return Room(self.x - margin, self.y - margin, self.w + 2 * margin, self.h + 2 * margin)

    def intersects(self, other: "Room") -> bool:
        return (
            self.x < other.x + other.w
            and self.x + self.w > other.x
            and self.y < other.y + other.h
            and self.y + self.h > other.y
        )

    def contains(self, px: int, py: int) -> bool:
        return self.x <= px < self.x + self.w and self.y <= py < self.y + self.h

    def contains_interior(self, px: int, py: int) -> bool:
        """Strict interior: the room's own outer ring of cells does not count."""
        return self.x < px < self.x + self.w - 1 and self.y < py < self.y + self.h - 1

    def to_dict(self):
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


def place_rooms(grid: Grid, config: DungeonConfig, rng=None):
    """Scatter non-overlapping rooms onto the grid by rejection sampling.

    Returns (rooms, target_attempted, placed_count). Running out of attempts
    just yields a smaller dungeon.
    """
    if rng is None:
        rng = random
    target = config.room_count
    attempts = target * config.room_attempt_factor
    rooms: List[Room] = []
    while len(rooms) < target and attempts > 0:
        room = None
        for _ in range(config.max_attempts_per_room):
            if attempts <= 0:
                break
            attempts -= 1
            candidate = _random_room(grid, config, rng)
            if candidate is None:
                continue
            if _room_overlaps(candidate, rooms, config.room_spacing):
                continue
            room = candidate
            break
        if room is None:
            # This slot exhausted its own budget; the overall budget decides whether to keep going
            continue
        for ix, iy in room.cells():
            grid.set(ix, iy, FLOOR)
        rooms.append(room)
    return rooms, target, len(rooms)


def _random_room(grid: Grid, config: DungeonConfig, rng):
    margin = config.edge_margin
    w = rng.randint(config.min_room_size, config.max_room_size)
    h = rng.randint(config.min_room_size, config.max_room_size)
    max_x = grid.width - w - margin
    max_y = grid.height - h - margin
    if max_x < margin or max_y < margin:
        return None
    return Room(rng.randint(margin, max_x), rng.randint(margin, max_y), w, h)


def _room_overlaps(room: Room, existing: List[Room], spacing: int) -> bool:
    padded = room.padded(spacing)
    return any(padded.intersects(r.padded(spacing)) for r in existing)


def room_at(rooms: List[Room], x: int, y: int, interior: bool = False) -> bool:
    """True when (x,y) falls inside any room (strict interior when ``interior``)."""
    if interior:
        return any(r.contains_interior(x, y) for r in rooms)
    return any(r.contains(x, y) for r in rooms)

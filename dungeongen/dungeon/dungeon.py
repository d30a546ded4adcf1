"""Generation pipeline orchestration.

A ``Dungeon`` owns one grid and every list the stages fill in. The pipeline
runs in the constructor; ``regenerate()`` clears that state and runs again.
Instances are not reentrant: never share one across threads while it is
generating.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from dungeongen.logging_utils import get_logger

from .cells import Coord2D, Grid
from .config import DungeonConfig, apply_overrides, metrics_enabled
from .dead_ends import grow_dead_ends
from .landmarks import place_exit, place_spawn
from .metrics import init_metrics
from .obstacles import scatter_obstacles
from .rooms import Room, place_rooms
from .tiles import ROCK, CellKind, kind_name
from .tunnels import carve_corridors
from .walls import derive_walls, patch_border_gaps

log = get_logger("dungeongen.dungeon")

MAX_SEED = 2**31 - 1


@dataclass
class GenerationResult:
    grid: Grid
    rooms: List[Room]
    spawn: Optional[Coord2D]
    exit: Optional[Coord2D]
    dead_ends: List[List[Coord2D]]
    corridor_cells: List[Coord2D]
    rocks: List[Coord2D]
    chests: List[Coord2D]
    seed: int
    config: DungeonConfig
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def _overlay(self):
        # Replace mode already has ROCK in the grid
        if not self.config.obstacle_overlay:
            return None
        return {pos: ROCK for pos in self.rocks}

    def to_ascii(self) -> str:
        return self.grid.to_ascii(self._overlay())

    def to_json(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "width": self.width,
            "height": self.height,
            "grid": self.grid.rows(self._overlay()),
            "legend": {kind.value: kind_name(kind) for kind in CellKind},
            "rooms": [r.to_dict() for r in self.rooms],
            "spawn": list(self.spawn) if self.spawn is not None else None,
            "exit": list(self.exit) if self.exit is not None else None,
            "dead_ends": [[list(p) for p in branch] for branch in self.dead_ends],
            "rocks": [list(p) for p in self.rocks],
            "chests": [list(p) for p in self.chests],
            "obstacle_overlay": self.config.obstacle_overlay,
            "metrics": self.metrics,
        }


class Dungeon:
    def __init__(
        self,
        config: Optional[DungeonConfig] = None,
        *,
        seed: Optional[int] = None,
        size: Optional[Tuple[int, int]] = None,
    ):
        config = config or DungeonConfig()
        if size is not None:
            config = replace(config, width=size[0], height=size[1])
        if seed is not None:
            config = replace(config, seed=seed)
        self.config = apply_overrides(config.validate())
        # 0 is a valid deterministic seed; None => random
        self.seed = self.config.seed if self.config.seed is not None else random.randint(0, MAX_SEED)
        self.enable_metrics = metrics_enabled()
        self._run_pipeline()

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    def regenerate(self, seed: Optional[int] = None) -> GenerationResult:
        """Discard the current layout and run the pipeline again.

        Reuses the same seed unless a new one is given, so a bare call
        reproduces the previous layout exactly.
        """
        if seed is not None:
            self.seed = seed
            self.config = replace(self.config, seed=seed)
        self._run_pipeline()
        return self.result

    def _reset(self):
        self._rng = random.Random(self.seed)
        self.grid = Grid(self.config.width, self.config.height)
        self.rooms: List[Room] = []
        self.corridor_cells: List[Coord2D] = []
        self.dead_ends: List[List[Coord2D]] = []
        self.rocks: List[Coord2D] = []
        self.chests: List[Coord2D] = []
        self.spawn: Optional[Coord2D] = None
        self.exit: Optional[Coord2D] = None
        self.metrics: Dict[str, Any] = init_metrics() if self.enable_metrics else {}

    def _run_pipeline(self):
        """Run the six stages in order, timing each into ``metrics['phase_ms']``."""
        self._reset()
        cfg = self.config
        rng = self._rng
        if self.enable_metrics:
            start = time.perf_counter()
            phase_times = {}

            def _phase(label, fn, *a, **k):
                ps = time.perf_counter()
                r = fn(*a, **k)
                phase_times[label] = round((time.perf_counter() - ps) * 1000, 3)
                return r
        else:
            def _phase(label, fn, *a, **k):
                return fn(*a, **k)

        self.rooms, attempted, placed = _phase("rooms", place_rooms, self.grid, cfg, rng)
        log.debug(event="rooms_placed", seed=self.seed, target=attempted, placed=placed)
        self.corridor_cells, corridor_stats = _phase("corridors", carve_corridors, self.grid, self.rooms, cfg, rng)
        log.debug(event="corridors_carved", cells=len(self.corridor_cells), **corridor_stats)
        self.dead_ends, dead_end_stats = _phase(
            "dead_ends", grow_dead_ends, self.grid, self.corridor_cells, cfg, rng
        )
        log.debug(event="dead_ends_grown", **dead_end_stats)
        self.spawn, spawn_fallback = _phase(
            "spawn", place_spawn, self.grid, self.rooms, self.corridor_cells, cfg, rng
        )
        self.exit = _phase("exit", place_exit, self.grid, self.rooms, self.spawn, cfg)
        log.debug(event="landmarks_placed", spawn=self.spawn, exit=self.exit, fallback=spawn_fallback)
        self.rocks, self.chests, obstacle_stats = _phase(
            "obstacles", scatter_obstacles, self.grid, self.rooms, self.dead_ends, cfg, rng
        )
        walls = _phase("walls", derive_walls, self.grid)
        patched = _phase("border_patch", patch_border_gaps, self.grid)
        log.debug(event="walls_derived", walls=walls, patched=patched)

        if self.enable_metrics:
            self.metrics.update(
                {
                    "rooms_attempted": attempted,
                    "rooms_placed": placed,
                    "spawn_fallback": spawn_fallback,
                    "walls_derived": walls,
                    "walls_patched": patched,
                }
            )
            self.metrics.update(corridor_stats)
            self.metrics.update(dead_end_stats)
            self.metrics.update(obstacle_stats)
        self._collect_counts()
        if self.enable_metrics:
            self.metrics["runtime_ms"] = round((time.perf_counter() - start) * 1000, 3)
            self.metrics["phase_ms"] = phase_times
        log.info(
            event="generation_complete",
            seed=self.seed,
            size=f"{cfg.width}x{cfg.height}",
            rooms=len(self.rooms),
            dead_ends=len(self.dead_ends),
            rocks=len(self.rocks),
            chests=len(self.chests),
            runtime_ms=self.metrics.get("runtime_ms"),
        )

    def _collect_counts(self):
        # seed and tile counts survive even with metrics disabled
        self.metrics["seed"] = self.seed
        for kind, count in self.grid.counts().items():
            self.metrics[f"tiles_{kind_name(kind)}"] = count

    @property
    def result(self) -> GenerationResult:
        return GenerationResult(
            grid=self.grid,
            rooms=list(self.rooms),
            spawn=self.spawn,
            exit=self.exit,
            dead_ends=[list(b) for b in self.dead_ends],
            corridor_cells=list(self.corridor_cells),
            rocks=list(self.rocks),
            chests=list(self.chests),
            seed=self.seed,
            config=self.config,
            metrics=self.metrics,
        )

    def to_ascii(self) -> str:
        return self.result.to_ascii()

    def to_json(self) -> Dict[str, Any]:
        return self.result.to_json()


def generate(config: Optional[DungeonConfig] = None, *, seed: Optional[int] = None) -> GenerationResult:
    """Build a dungeon from ``config`` (defaults when omitted) and return the result."""
    return Dungeon(config, seed=seed).result


__all__ = ["Dungeon", "GenerationResult", "generate"]

"""Stepwise generation pipeline.

``DungeonGenerator`` owns the shared occupancy grid and one object per phase,
and advances exactly one bounded unit of work per ``step()``:

    room placement -> maze growth -> connection -> dead-end removal -> done

Drivers (the Textual viewer, the HTTP blueprint, the CLI) decide when to step
and how to draw; they read state back through ``snapshot()`` or the individual
accessors, which always reflect the most recently completed step.
"""
from __future__ import annotations

import random
import time
from enum import Enum
from typing import Any, Dict, FrozenSet, List, NamedTuple, Optional, Tuple

from ..logging_utils import get_logger
from .cells import Coord, Room
from .config import (
    DEFAULT_EXTRA_CONNECTOR_CHANCE,
    DEFAULT_GRID_SIZE,
    DEFAULT_ROOM_ATTEMPTS,
    GeneratorConfig,
)
from .connectivity import ConnectionPhase
from .grid import OccupancyGrid
from .metrics import init_metrics
from .pruning import DeadEndRemovalPhase
from .rooms import RoomPlacementPhase
from .tunnels import MazeGrowthPhase

log = get_logger("carver.dungeon")


class Phase(str, Enum):
    ROOM_PLACEMENT = "room"
    MAZE_GROWTH = "maze"
    CONNECTION = "connect"
    REMOVAL = "remove"
    DONE = "done"


_NEXT_PHASE = {
    Phase.ROOM_PLACEMENT: Phase.MAZE_GROWTH,
    Phase.MAZE_GROWTH: Phase.CONNECTION,
    Phase.CONNECTION: Phase.REMOVAL,
    Phase.REMOVAL: Phase.DONE,
}


class GenerationStalled(RuntimeError):
    """Raised by ``run()`` when the step ceiling is reached before Done."""


class Snapshot(NamedTuple):
    phase: Phase
    grid_size: int
    seed: int
    rooms: Tuple[Room, ...]
    maze: FrozenSet[Coord]
    main_region: FrozenSet[Coord]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "grid_size": self.grid_size,
            "seed": self.seed,
            "rooms": [r.to_dict() for r in self.rooms],
            "maze": [list(c) for c in sorted(self.maze)],
            "main_region": [list(c) for c in sorted(self.main_region)],
        }


class DungeonGenerator:
    def __init__(self, config: Optional[GeneratorConfig] = None, *, rng: Optional[random.Random] = None):
        cfg = config or GeneratorConfig()
        self.configure(
            cfg.grid_size,
            cfg.room_attempts,
            cfg.seed,
            rng=rng,
            extra_connector_chance=cfg.extra_connector_chance,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def configure(
        self,
        grid_size: int = DEFAULT_GRID_SIZE,
        room_attempt_budget: int = DEFAULT_ROOM_ATTEMPTS,
        rng_seed: Optional[int] = None,
        *,
        rng: Optional[random.Random] = None,
        extra_connector_chance: float = DEFAULT_EXTRA_CONNECTOR_CHANCE,
    ) -> "DungeonGenerator":
        """Validate settings and start over in the room placement phase.

        A ``None`` seed is replaced by a random one so the run can be replayed.
        When ``rng`` is given it becomes the shared random source instead of a
        ``random.Random`` seeded from ``rng_seed``.
        """
        config = GeneratorConfig(
            grid_size=grid_size,
            room_attempts=room_attempt_budget,
            seed=rng_seed,
            extra_connector_chance=extra_connector_chance,
        ).validate()
        if config.seed is None:
            config.seed = random.randint(0, 2**31 - 1)
        self.config = config
        self._external_rng = rng
        self._init_state()
        return self

    def reset(self) -> None:
        """Discard all generation state; replays the same seed unless an external rng was supplied."""
        self._init_state()

    def _init_state(self) -> None:
        cfg = self.config
        self.rng = self._external_rng if self._external_rng is not None else random.Random(cfg.seed)
        self.grid = OccupancyGrid(cfg.grid_size)
        self.metrics: Dict[str, Any] = init_metrics()
        self._phase = Phase.ROOM_PLACEMENT
        self._room_phase = RoomPlacementPhase(self.grid, self.rng, cfg.room_attempts, self.metrics)
        self._maze_phase = MazeGrowthPhase(self.grid, self.rng, self.metrics)
        self._connect_phase = ConnectionPhase(self.grid, self.rng, self.metrics, cfg.extra_connector_chance)
        self._remove_phase = DeadEndRemovalPhase(self.grid, self.metrics)
        self._handlers = {
            Phase.ROOM_PLACEMENT: self._room_phase.step,
            Phase.MAZE_GROWTH: self._maze_phase.step,
            Phase.CONNECTION: self._connect_phase.step,
            Phase.REMOVAL: self._remove_phase.step,
        }

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    def step(self) -> Phase:
        """Advance the active phase by one unit of work and return the (possibly new) phase."""
        phase = self._phase
        if phase is Phase.DONE:
            return phase
        finished = self._handlers[phase]()
        self.metrics['steps'] += 1
        by_phase = self.metrics['steps_by_phase']
        by_phase[phase.value] = by_phase.get(phase.value, 0) + 1
        if finished:
            self._phase = _NEXT_PHASE[phase]
            log.debug(
                event="phase_transition",
                seed=self.config.seed,
                from_phase=phase.value,
                to_phase=self._phase.value,
                steps=self.metrics['steps'],
            )
            if self._phase is Phase.DONE:
                log.info(
                    event="generation_done",
                    seed=self.config.seed,
                    grid_size=self.config.grid_size,
                    rooms=len(self.grid.rooms),
                    maze=self.grid.maze_count(),
                    steps=self.metrics['steps'],
                )
        return self._phase

    def run(self, max_steps: Optional[int] = None) -> int:
        """Step until Done; returns the number of steps taken by this call.

        Adds per-phase wall time (ms) to ``metrics['phase_ms']``.
        """
        phase_ms = self.metrics['phase_ms']
        start = time.perf_counter()
        taken = 0
        while self._phase is not Phase.DONE:
            if max_steps is not None and taken >= max_steps:
                raise GenerationStalled(
                    f"generation did not finish within {max_steps} steps (phase={self._phase.value})"
                )
            phase = self._phase
            ps = time.perf_counter()
            self.step()
            phase_ms[phase.value] = phase_ms.get(phase.value, 0.0) + (time.perf_counter() - ps) * 1000
            taken += 1
        self.metrics['runtime_ms'] += (time.perf_counter() - start) * 1000
        return taken

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_done(self) -> bool:
        return self._phase is Phase.DONE

    @property
    def seed(self) -> int:
        return self.config.seed

    @property
    def grid_size(self) -> int:
        return self.config.grid_size

    @property
    def first_room(self) -> Optional[Room]:
        rooms = self.grid.rooms
        return rooms[0] if rooms else None

    def rooms(self) -> List[Room]:
        return list(self.grid.rooms)

    def maze_cells(self) -> FrozenSet[Coord]:
        return self.grid.maze

    def main_region_cells(self) -> FrozenSet[Coord]:
        return self.grid.main_region

    def connectors(self) -> Tuple[Coord, ...]:
        return tuple(self._connect_phase.connectors)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            phase=self._phase,
            grid_size=self.config.grid_size,
            seed=self.config.seed,
            rooms=self.grid.rooms,
            maze=self.grid.maze,
            main_region=self.grid.main_region,
        )


__all__ = ["DungeonGenerator", "GenerationStalled", "Phase", "Snapshot"]

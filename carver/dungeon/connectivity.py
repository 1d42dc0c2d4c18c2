"""Connection phase: join every room and maze region into one main region.

Steps:
    0. Collect every connector (empty cell bordering two or more distinct regions).
    1. Take the first placed room as the seed of the main region.
    2. Open a random connector touching the main region (it becomes corridor).
    3. Flood fill whatever that connector joined into the main region, one ring per step.
    4. Drop connectors that no longer join distinct regions.
    5. Repeat from 2 until no connectors remain.

Occasionally (``extra_chance``) a second connector into the same newly joined
room is opened so rooms are not all reached through a single doorway.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .cells import Coord, Room
from .grid import OccupancyGrid


class ConnectionPhase:
    def __init__(self, grid: OccupancyGrid, rng, metrics: Dict[str, Any], extra_chance: float = 0.2):
        self.grid = grid
        self.rng = rng
        self.metrics = metrics
        self.extra_chance = extra_chance
        self.connectors: List[Coord] = []
        self.flood_fill: List[Coord] = []
        self.first_room: Optional[Room] = None
        self.started = False

    def step(self) -> bool:
        """Open a connector when idle, then advance the merge fill; True when finished."""
        if not self.started:
            self.started = True
            self.connectors = self.scan_connectors()
            self.metrics['connectors_initial'] = len(self.connectors)
            rooms = self.grid.rooms
            self.first_room = rooms[0] if rooms else None

        if not self.flood_fill:
            self.remove_extra_connectors()
            if not self.connectors:
                return True
            if not self.open_connector():
                # Leftover connectors join regions the main region cannot reach
                self.metrics['connectors_stranded'] = len(self.connectors)
                return True

        self.flood_fill_step()
        return False

    # ------------------------------------------------------------------
    # Connectors
    # ------------------------------------------------------------------
    def scan_connectors(self) -> List[Coord]:
        return [(x, y) for x, y in self.grid.scan_order() if self.is_connector(x, y)]

    def remove_extra_connectors(self) -> None:
        self.connectors = [c for c in self.connectors if self.is_connector(*c)]

    def is_connector(self, x: int, y: int) -> bool:
        grid = self.grid
        if not grid.is_empty(x, y):
            return False
        connects_main_region = False
        connects_maze = False
        rooms_connected = set()
        for ax, ay in grid.adjacent(x, y):
            if grid.is_main(ax, ay):
                connects_main_region = True
            elif grid.is_maze(ax, ay):
                connects_maze = True
            else:
                index = grid.room_index_at(ax, ay)
                if index is not None:
                    rooms_connected.add(index)
        unique_regions = int(connects_main_region) + int(connects_maze) + len(rooms_connected)
        return unique_regions > 1

    def in_main_region(self, x: int, y: int) -> bool:
        if self.first_room is not None and self.first_room.contains(x, y):
            return True
        return self.grid.is_main(x, y)

    def touches_main_region(self, x: int, y: int) -> bool:
        return any(self.in_main_region(ax, ay) for ax, ay in self.grid.adjacent(x, y))

    def main_connectors(self) -> List[Coord]:
        return [c for c in self.connectors if self.touches_main_region(*c)]

    def open_connector(self) -> bool:
        candidates = self.main_connectors()
        if not candidates:
            return False
        connector = candidates[self.rng.randrange(len(candidates))]
        self._open(connector)
        self.metrics['connectors_opened'] += 1

        if self.rng.random() < self.extra_chance:
            room = self.room_touching_connector(*connector)
            if room is not None:
                room_connectors = self.connectors_touching_room(room)
                if room_connectors:
                    extra = room_connectors[self.rng.randrange(len(room_connectors))]
                    self._open(extra)
                    self.metrics['extra_connectors_opened'] += 1
        return True

    def room_touching_connector(self, x: int, y: int) -> Optional[Room]:
        """The room being joined through (x, y): adjacent and not yet main region."""
        for ax, ay in self.grid.adjacent(x, y):
            if not self.in_main_region(ax, ay):
                room = self.grid.room_at(ax, ay)
                if room is not None:
                    return room
        return None

    def connectors_touching_room(self, room: Room) -> List[Coord]:
        expanded = room.expanded(1)
        return [(cx, cy) for cx, cy in self.main_connectors() if expanded.contains(cx, cy)]

    def _open(self, connector: Coord) -> None:
        self.connectors.remove(connector)
        self.flood_fill.append(connector)
        self.grid.add_maze(*connector)

    # ------------------------------------------------------------------
    # Merge flood fill
    # ------------------------------------------------------------------
    def flood_fill_step(self) -> None:
        """Absorb the current fill ring into the main region and queue the next ring."""
        current = self.flood_fill
        self.flood_fill = []
        queued = set()
        for x, y in current:
            self.grid.add_main(x, y)
            for ax, ay in self.grid.adjacent(x, y):
                if (ax, ay) not in queued and self.flood_fillable(ax, ay):
                    queued.add((ax, ay))
                    self.flood_fill.append((ax, ay))

    def flood_fillable(self, x: int, y: int) -> bool:
        grid = self.grid
        if grid.is_main(x, y):
            return False
        return grid.point_in_room(x, y) or grid.is_maze(x, y)


__all__ = ["ConnectionPhase"]

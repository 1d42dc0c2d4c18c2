"""Grid occupancy model shared by every generation phase.

Tracks which cells are room, maze (corridor) or main region and answers the
bounds / intersection / adjacency questions the phases ask. Membership is kept
in sets plus a cell -> room index, so lookups cost the same however large a
region grows. All mutation goes through the methods below; there is no derived
state that could lag behind a change.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from .cells import ADJACENT_OFFSETS, DIAGONAL_OFFSETS, Coord, Room


class OccupancyGrid:
    def __init__(self, size: int):
        self.size = size
        self._rooms: List[Room] = []
        self._room_index: Dict[Coord, int] = {}
        self._maze: Set[Coord] = set()
        self._main: Set[Coord] = set()

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def rect_within_bounds(self, rect: Room) -> bool:
        # Only the high edges are checked: placement samples x, y from [0, size)
        # so the low edges can never be negative.
        return rect.x + rect.width < self.size and rect.y + rect.height < self.size

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------
    @property
    def rooms(self) -> Tuple[Room, ...]:
        return tuple(self._rooms)

    def add_room(self, room: Room) -> None:
        index = len(self._rooms)
        self._rooms.append(room)
        for cell in room.cells():
            if self.in_bounds(*cell):
                self._room_index[cell] = index

    def room_at(self, x: int, y: int) -> Optional[Room]:
        index = self._room_index.get((x, y))
        return None if index is None else self._rooms[index]

    def room_index_at(self, x: int, y: int) -> Optional[int]:
        return self._room_index.get((x, y))

    def point_in_room(self, x: int, y: int) -> bool:
        return (x, y) in self._room_index

    def rect_intersects_room(self, rect: Room) -> bool:
        return any(room.intersects(rect) for room in self._rooms)

    def rect_touches_room(self, rect: Room) -> bool:
        return self.rect_intersects_room(rect.expanded(1))

    def point_touches_room(self, x: int, y: int) -> bool:
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if (x + dx, y + dy) in self._room_index:
                    return True
        return False

    # ------------------------------------------------------------------
    # Maze / main region
    # ------------------------------------------------------------------
    def is_maze(self, x: int, y: int) -> bool:
        return (x, y) in self._maze

    def is_main(self, x: int, y: int) -> bool:
        return (x, y) in self._main

    def is_empty(self, x: int, y: int) -> bool:
        return (x, y) not in self._maze and (x, y) not in self._room_index

    def add_maze(self, x: int, y: int) -> None:
        self._maze.add((x, y))

    def add_main(self, x: int, y: int) -> None:
        self._main.add((x, y))

    def remove_maze(self, x: int, y: int) -> None:
        """Delete a corridor cell from both the maze and the main region."""
        self._maze.discard((x, y))
        self._main.discard((x, y))

    @property
    def maze(self) -> FrozenSet[Coord]:
        return frozenset(self._maze)

    @property
    def main_region(self) -> FrozenSet[Coord]:
        return frozenset(self._main)

    def maze_count(self) -> int:
        return len(self._maze)

    # ------------------------------------------------------------------
    # Neighborhoods
    # ------------------------------------------------------------------
    def adjacent(self, x: int, y: int) -> List[Coord]:
        return [(x + dx, y + dy) for dx, dy in ADJACENT_OFFSETS if self.in_bounds(x + dx, y + dy)]

    def diagonal(self, x: int, y: int) -> List[Coord]:
        return [(x + dx, y + dy) for dx, dy in DIAGONAL_OFFSETS if self.in_bounds(x + dx, y + dy)]

    def neighbors(self, x: int, y: int) -> List[Coord]:
        return self.adjacent(x, y) + self.diagonal(x, y)

    def scan_order(self):
        """Cells in generator scan order: x ascending, y descending."""
        for x in range(self.size):
            for y in range(self.size - 1, -1, -1):
                yield x, y


__all__ = ["OccupancyGrid"]

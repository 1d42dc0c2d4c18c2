"""Maze growth: fill the space between rooms with winding single-width corridors.

Growth is a randomized depth-first flood fill driven by an explicit stack of
``(x, y, direction)`` entries, where ``direction`` records the side the fill
arrived from. A cell is only claimed when the five "significant" cells for
that approach hold no maze, which keeps corridors from looping back on
themselves or touching diagonally. When the stack runs dry the grid is scanned
for the next seed; no seed left means the phase is complete.
"""
from typing import Any, Dict, List, Optional, Tuple

from .cells import Coord, Direction, significant_points
from .grid import OccupancyGrid

FillEntry = Tuple[int, int, Direction]


class MazeGrowthPhase:
    def __init__(self, grid: OccupancyGrid, rng, metrics: Dict[str, Any]):
        self.grid = grid
        self.rng = rng
        self.metrics = metrics
        self.stack: List[FillEntry] = []

    def step(self) -> bool:
        """Claim one maze cell (from the stack or a fresh seed); True when no seed remains."""
        while self.stack:
            x, y, direction = self.stack.pop()
            if self.fillable(x, y, direction):
                self._claim(x, y)
                return False
            self.metrics['fill_entries_discarded'] += 1
        seed = self.find_seed()
        if seed is None:
            return True
        self.metrics['maze_seeds'] += 1
        self._claim(*seed)
        return False

    def find_seed(self) -> Optional[Coord]:
        for x, y in self.grid.scan_order():
            if self.is_seed(x, y):
                return x, y
        return None

    def is_seed(self, x: int, y: int) -> bool:
        grid = self.grid
        if not grid.is_empty(x, y):
            return False
        if any(grid.is_maze(nx, ny) for nx, ny in grid.neighbors(x, y)):
            return False
        return not grid.point_touches_room(x, y)

    def fillable(self, x: int, y: int, direction: Direction) -> bool:
        grid = self.grid
        if not grid.is_empty(x, y):
            return False
        if any(grid.is_maze(sx, sy) for sx, sy in significant_points(x, y, direction)):
            return False
        return not grid.point_touches_room(x, y)

    def valid_directions(self, x: int, y: int) -> List[Direction]:
        last = self.grid.size - 1
        directions = []
        if x != 0:
            directions.append(Direction.LEFT)
        if x != last:
            directions.append(Direction.RIGHT)
        if y != 0:
            directions.append(Direction.DOWN)
        if y != last:
            directions.append(Direction.UP)
        return directions

    def _claim(self, x: int, y: int) -> None:
        self.grid.add_maze(x, y)
        self.metrics['maze_cells'] += 1
        directions = self.valid_directions(x, y)
        self.rng.shuffle(directions)
        for direction in directions:
            nx, ny = direction.step(x, y)
            self.stack.append((nx, ny, direction))


__all__ = ["MazeGrowthPhase", "FillEntry"]

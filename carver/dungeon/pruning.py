"""Dead-end removal: prune corridor stubs left over after connection.

A dead end is a maze cell with at most one non-empty orthogonal neighbor.
Deleting one can expose its neighbor as a new dead end, so each sub-step
re-checks the cells queued by the previous one instead of rescanning the grid.
"""
from __future__ import annotations

from typing import Any, Dict, List

from .cells import Coord
from .grid import OccupancyGrid


def is_dead_end(grid: OccupancyGrid, x: int, y: int) -> bool:
    if not grid.is_maze(x, y):
        return False
    filled = [c for c in grid.adjacent(x, y) if not grid.is_empty(*c)]
    return len(filled) <= 1


def find_dead_ends(grid: OccupancyGrid) -> List[Coord]:
    return [c for c in sorted(grid.maze) if is_dead_end(grid, *c)]


class DeadEndRemovalPhase:
    def __init__(self, grid: OccupancyGrid, metrics: Dict[str, Any]):
        self.grid = grid
        self.metrics = metrics
        self.dead_ends: List[Coord] = []

    def step(self) -> bool:
        """Run one removal sweep; True once no dead ends remain."""
        if not self.dead_ends:
            self.dead_ends = find_dead_ends(self.grid)
        self.remove_dead_ends()
        return not self.dead_ends

    def remove_dead_ends(self) -> None:
        current = self.dead_ends
        self.dead_ends = []
        for x, y in current:
            # Earlier deletions in this sweep may have changed the answer
            if not is_dead_end(self.grid, x, y):
                continue
            self.grid.remove_maze(x, y)
            self.metrics['dead_ends_removed'] += 1
            self.dead_ends.extend(self.grid.adjacent(x, y))


__all__ = ["DeadEndRemovalPhase", "is_dead_end", "find_dead_ends"]

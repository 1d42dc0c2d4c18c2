from typing import Any, Dict

from .cells import Room
from .grid import OccupancyGrid

MIN_ROOM_SIZE = 3
MAX_ROOM_SIZE = 8


def random_room(grid_size: int, rng) -> Room:
    """Sample a candidate room: random square, stretched one way, forced odd."""
    x = rng.randrange(grid_size)
    y = rng.randrange(grid_size)
    size = rng.randrange(MAX_ROOM_SIZE - MIN_ROOM_SIZE + 1) + MIN_ROOM_SIZE
    width = height = size
    rectangularity = rng.randrange(width // 2 + 1)
    if rng.randrange(2) == 0:
        width += rectangularity
    else:
        height += rectangularity
    if width % 2 == 0:
        width -= 1
    if height % 2 == 0:
        height -= 1
    return Room(x, y, width, height)


def valid_room(grid: OccupancyGrid, room: Room) -> bool:
    return grid.rect_within_bounds(room) and not grid.rect_touches_room(room)


class RoomPlacementPhase:
    """Scatter non-touching rooms until the attempt budget is spent.

    Every sampled candidate consumes one unit of budget. A step keeps sampling
    until one room is accepted or the budget runs out, so callers see at most
    one new room per step.
    """

    def __init__(self, grid: OccupancyGrid, rng, attempts: int, metrics: Dict[str, Any]):
        self.grid = grid
        self.rng = rng
        self.attempts = attempts
        self.attempted = 0
        self.metrics = metrics

    def step(self) -> bool:
        """Run one placement step; True once the phase is finished."""
        while self.attempted < self.attempts:
            self.attempted += 1
            self.metrics['rooms_attempted'] += 1
            room = random_room(self.grid.size, self.rng)
            if valid_room(self.grid, room):
                self.grid.add_room(room)
                self.metrics['rooms_placed'] += 1
                return False
        return True


__all__ = ["RoomPlacementPhase", "random_room", "valid_room", "MIN_ROOM_SIZE", "MAX_ROOM_SIZE"]

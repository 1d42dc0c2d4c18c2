from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

Coord = Tuple[int, int]


@dataclass(frozen=True)
class Room:
    """Axis-aligned room rectangle in grid cells (y grows upward)."""

    x: int
    y: int
    width: int
    height: int

    def cells(self) -> Iterator[Coord]:
        for ix in range(self.x, self.x + self.width):
            for iy in range(self.y, self.y + self.height):
                yield ix, iy

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def intersects(self, other: "Room") -> bool:
        # Strict area overlap; rectangles sharing only an edge do not intersect
        return (
            self.x < other.x + other.width
            and other.x < self.x + self.width
            and self.y < other.y + other.height
            and other.y < self.y + self.height
        )

    def expanded(self, margin: int = 1) -> "Room":
        return Room(self.x - margin, self.y - margin, self.width + 2 * margin, self.height + 2 * margin)

    @property
    def center(self) -> Coord:
        return (self.x + self.width // 2, self.y + self.height // 2)

    def to_dict(self):
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


class Direction(Enum):
    """Side a maze fill approaches a cell from; value is the (dx, dy) step taken."""

    LEFT = (-1, 0)
    UP = (0, 1)
    RIGHT = (1, 0)
    DOWN = (0, -1)

    def step(self, x: int, y: int) -> Coord:
        dx, dy = self.value
        return x + dx, y + dy


# Cells that must hold no maze before a fill arriving from each direction may
# claim (x, y): the two side cells plus the three cells ahead.
SIGNIFICANT_OFFSETS = {
    Direction.LEFT: ((0, -1), (0, 1), (-1, -1), (-1, 0), (-1, 1)),
    Direction.UP: ((-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1)),
    Direction.RIGHT: ((0, -1), (0, 1), (1, -1), (1, 0), (1, 1)),
    Direction.DOWN: ((-1, 0), (1, 0), (-1, -1), (0, -1), (1, -1)),
}

ADJACENT_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL_OFFSETS = ((-1, -1), (1, -1), (1, 1), (-1, 1))


def significant_points(x: int, y: int, direction: Direction):
    return [(x + dx, y + dy) for dx, dy in SIGNIFICANT_OFFSETS[direction]]


__all__ = [
    "Coord",
    "Room",
    "Direction",
    "SIGNIFICANT_OFFSETS",
    "ADJACENT_OFFSETS",
    "DIAGONAL_OFFSETS",
    "significant_points",
]

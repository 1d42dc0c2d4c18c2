"""Readable text snapshot of grid contents.

One character per cell; rows are returned top row first (highest y), matching
how the grid is drawn with y growing upward.
"""
from typing import List

EMPTY = "."
ROOM = "R"
TUNNEL = "T"
MAIN_ROOM = "M"  # room cell already joined to the main region
MAIN_TUNNEL = "m"  # corridor cell already joined to the main region


def tile_at(snapshot, x: int, y: int) -> str:
    cell = (x, y)
    in_main = cell in snapshot.main_region
    if cell in snapshot.maze:
        return MAIN_TUNNEL if in_main else TUNNEL
    if any(room.contains(x, y) for room in snapshot.rooms):
        return MAIN_ROOM if in_main else ROOM
    return EMPTY


def render_rows(snapshot) -> List[str]:
    size = snapshot.grid_size
    return ["".join(tile_at(snapshot, x, y) for x in range(size)) for y in range(size - 1, -1, -1)]


def char_to_type(ch: str) -> str:
    if ch in (ROOM, MAIN_ROOM):
        return "room"
    if ch in (TUNNEL, MAIN_TUNNEL):
        return "tunnel"
    return "empty"


__all__ = ["EMPTY", "ROOM", "TUNNEL", "MAIN_ROOM", "MAIN_TUNNEL", "tile_at", "render_rows", "char_to_type"]

"""Public dungeon package interface.

Stepwise rooms-and-mazes generator plus the tile characters drivers use to
print a snapshot.
"""

from .cells import Direction, Room  # noqa: F401
from .config import ConfigurationError, GeneratorConfig  # noqa: F401
from .pipeline import DungeonGenerator, GenerationStalled, Phase, Snapshot  # noqa: F401
from .tiles import EMPTY, MAIN_ROOM, MAIN_TUNNEL, ROOM, TUNNEL, render_rows  # noqa: F401

__all__ = [
    "DungeonGenerator",
    "GeneratorConfig",
    "ConfigurationError",
    "GenerationStalled",
    "Phase",
    "Snapshot",
    "Room",
    "Direction",
    "EMPTY",
    "ROOM",
    "TUNNEL",
    "MAIN_ROOM",
    "MAIN_TUNNEL",
    "render_rows",
]

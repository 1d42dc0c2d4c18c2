import pytest

from carver.dungeon import DungeonGenerator, GeneratorConfig, Phase, Room
from carver.dungeon.connectivity import ConnectionPhase
from carver.dungeon.grid import OccupancyGrid
from carver.dungeon.metrics import init_metrics
from tests.dungeon_test_utils import ScriptedRng, drive_until, expected_main_region, non_empty_cells


def two_rooms():
    """Rooms (1..3, 1..3) and (5..7, 1..3) separated by the column x=4."""
    grid = OccupancyGrid(9)
    grid.add_room(Room(1, 1, 3, 3))
    grid.add_room(Room(5, 1, 3, 3))
    return grid


def run_phase(phase):
    steps = 1
    while not phase.step():
        steps += 1
    return steps


def test_connector_tally():
    grid = two_rooms()
    phase = ConnectionPhase(grid, ScriptedRng(), init_metrics())
    assert phase.is_connector(4, 2)
    assert not phase.is_connector(4, 0)
    assert not phase.is_connector(2, 2)
    assert phase.scan_connectors() == [(4, 3), (4, 2), (4, 1)]


def test_connector_between_main_and_other_maze():
    grid = OccupancyGrid(9)
    grid.add_maze(2, 2)
    grid.add_main(2, 2)
    grid.add_maze(4, 2)
    grid.add_maze(6, 6)
    grid.add_maze(6, 4)
    phase = ConnectionPhase(grid, ScriptedRng(), init_metrics())
    assert phase.is_connector(3, 2)
    # Two pieces of non-main maze count as a single region
    assert not phase.is_connector(6, 5)
    assert not phase.is_connector(3, 3)


def test_single_connector_joins_both_rooms():
    grid = two_rooms()
    metrics = init_metrics()
    phase = ConnectionPhase(grid, ScriptedRng([1], floats=[0.5]), metrics, extra_chance=0.2)
    assert phase.step() is False
    assert grid.maze == frozenset({(4, 2)})
    assert phase.first_room == Room(1, 1, 3, 3)
    # The opened connector is absorbed first; the next ring is one cell into each room
    assert grid.main_region == frozenset({(4, 2)})
    assert sorted(phase.flood_fill) == [(3, 2), (5, 2)]
    run_phase(phase)
    expected = set(Room(1, 1, 3, 3).cells()) | set(Room(5, 1, 3, 3).cells()) | {(4, 2)}
    assert grid.main_region == frozenset(expected)
    assert phase.connectors == []
    assert metrics["connectors_initial"] == 3
    assert metrics["connectors_opened"] == 1
    assert metrics["extra_connectors_opened"] == 0


def test_extra_connector_opens_second_door_into_joined_room():
    grid = two_rooms()
    metrics = init_metrics()
    phase = ConnectionPhase(grid, ScriptedRng([1, 0], floats=[0.0]), metrics, extra_chance=0.2)
    phase.step()
    assert grid.maze == frozenset({(4, 2), (4, 3)})
    assert metrics["extra_connectors_opened"] == 1
    assert phase.connectors == [(4, 1)]
    run_phase(phase)
    assert {(4, 2), (4, 3)} <= grid.main_region
    assert (4, 1) not in grid.maze


def test_no_connectors_finishes_immediately():
    grid = OccupancyGrid(9)
    grid.add_room(Room(1, 1, 3, 3))
    metrics = init_metrics()
    phase = ConnectionPhase(grid, ScriptedRng(), metrics)
    assert phase.step() is True
    assert grid.main_region == frozenset()
    assert metrics["connectors_opened"] == 0


def test_connectors_out_of_reach_are_stranded():
    grid = OccupancyGrid(15)
    grid.add_room(Room(1, 1, 3, 3))
    grid.add_room(Room(9, 9, 3, 3))
    grid.add_room(Room(9, 5, 3, 3))
    metrics = init_metrics()
    phase = ConnectionPhase(grid, ScriptedRng(), metrics)
    assert phase.step() is True
    assert sorted(phase.connectors) == [(9, 8), (10, 8), (11, 8)]
    assert metrics["connectors_stranded"] == 3
    assert grid.main_region == frozenset()


def test_first_room_counts_as_main_before_fill():
    grid = two_rooms()
    phase = ConnectionPhase(grid, ScriptedRng(), init_metrics())
    phase.first_room = grid.rooms[0]
    assert phase.in_main_region(2, 2)
    assert not grid.is_main(2, 2)
    assert phase.touches_main_region(4, 1)
    assert not phase.touches_main_region(8, 2)


@pytest.mark.parametrize("seed", [0, 2, 4, 8, 16, 31])
def test_connection_phase_builds_main_region(seed):
    gen = DungeonGenerator(GeneratorConfig(grid_size=27, seed=seed))
    drive_until(gen, Phase.REMOVAL)
    main = set(gen.main_region_cells())
    assert main == expected_main_region(gen)
    assert main <= non_empty_cells(gen)
    if gen.metrics["connectors_stranded"] == 0:
        assert gen.connectors() == ()
    # A room is joined whole or not at all
    for room in gen.rooms():
        inside = [c in main for c in room.cells()]
        assert all(inside) or not any(inside)

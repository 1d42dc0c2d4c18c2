from carver.dungeon import EMPTY, MAIN_ROOM, MAIN_TUNNEL, ROOM, TUNNEL, Phase, Room, Snapshot, render_rows
from carver.dungeon.tiles import char_to_type, tile_at
from tests.dungeon_test_utils import finished


def make_snapshot(main=True):
    room = Room(1, 5, 3, 3)
    main_region = set(room.cells()) | {(4, 6)} if main else set()
    return Snapshot(
        phase=Phase.DONE,
        grid_size=9,
        seed=1,
        rooms=(room,),
        maze=frozenset({(4, 6), (5, 6)}),
        main_region=frozenset(main_region),
    )


def test_rows_are_top_down():
    rows = render_rows(make_snapshot())
    assert len(rows) == 9 and all(len(r) == 9 for r in rows)
    assert rows[0] == "........."
    assert rows[1] == ".MMM....."
    assert rows[2] == ".MMMmT..."
    assert rows[3] == ".MMM....."
    assert rows[8] == "........."


def test_rows_before_joining_main_region():
    rows = render_rows(make_snapshot(main=False))
    assert rows[2] == ".RRRTT..."


def test_tile_at():
    snap = make_snapshot()
    assert tile_at(snap, 0, 0) == EMPTY
    assert tile_at(snap, 2, 6) == MAIN_ROOM
    assert tile_at(snap, 4, 6) == MAIN_TUNNEL
    assert tile_at(snap, 5, 6) == TUNNEL
    assert tile_at(make_snapshot(main=False), 2, 6) == ROOM


def test_char_to_type():
    assert char_to_type("R") == "room"
    assert char_to_type("M") == "room"
    assert char_to_type("T") == "tunnel"
    assert char_to_type("m") == "tunnel"
    assert char_to_type(".") == "empty"


def test_finished_rows_match_cell_sets():
    gen = finished(17, grid_size=15)
    rows = render_rows(gen.snapshot())
    maze = gen.maze_cells()
    for row_index, row in enumerate(rows):
        y = 14 - row_index
        for x, ch in enumerate(row):
            assert (char_to_type(ch) == "tunnel") == ((x, y) in maze)
    tunnel_chars = sum(row.count(TUNNEL) + row.count(MAIN_TUNNEL) for row in rows)
    assert tunnel_chars == len(maze)

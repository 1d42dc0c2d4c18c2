"""Textual-based generation viewer (TUI).

Animates a ``DungeonGenerator`` one step every other timer tick so each phase
can be watched as it happens: rooms appear, corridors wind through the gaps,
the main region spreads out from the first room and dead ends retract.

Run with: `python run.py view [--size 27] [--seed 42]`
"""

from __future__ import annotations

from typing import Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Log, Static

from carver.dungeon import EMPTY, MAIN_ROOM, MAIN_TUNNEL, ROOM, TUNNEL, DungeonGenerator, GeneratorConfig, render_rows

BACKGROUND_COLOR = (170, 170, 170)
ROOM_COLOR = (246, 156, 196)
MAZE_COLOR = (253, 253, 149)
MAIN_REGION_COLOR = (119, 153, 204)

TILE_COLORS = {
    EMPTY: BACKGROUND_COLOR,
    ROOM: ROOM_COLOR,
    TUNNEL: MAZE_COLOR,
    MAIN_ROOM: MAIN_REGION_COLOR,
    MAIN_TUNNEL: MAIN_REGION_COLOR,
}

MIN_INTERVAL = 1 / 120
MAX_INTERVAL = 1.0


def render_snapshot(snapshot) -> Text:
    """Draw a snapshot as two-column colored blocks, one text row per grid row."""
    text = Text()
    for row in render_rows(snapshot):
        for ch in row:
            r, g, b = TILE_COLORS[ch]
            text.append("  ", style=f"on rgb({r},{g},{b})")
        text.append("\n")
    return text


class DungeonViewer(App):
    """Interactive generation viewer.

    The map redraws after every step; the side panel shows the current phase,
    seed and counters, and the event log records phase transitions and resets.
    Pressing ``r`` throws the dungeon away and starts over with a new seed.
    """

    CSS = """
    Screen { layout: vertical; }
    #map { width: auto; padding: 0 1; }
    #side { width: 1fr; }
    .panel { border: tall $primary; padding: 0 1; }
    #status { height: auto; }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "reset", "Reset"),
        ("space", "toggle_pause", "Pause"),
        ("n", "step_once", "Step"),
        ("plus", "faster", "Faster"),
        ("minus", "slower", "Slower"),
    ]

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        interval: float = 1 / 30,
        start_paused: bool = False,
    ) -> None:
        super().__init__()
        self.generator = DungeonGenerator(config)
        self.interval = interval
        self.paused = start_paused
        self._tick_count = 0
        self._step_timer = None

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Header(show_clock=False)
        with Horizontal():
            self.map_view = Static(id="map", classes="panel")
            yield self.map_view
            with Vertical(id="side"):
                self.status = Static(id="status", classes="panel")
                yield self.status
                self.event_log = Log(classes="panel")
                yield self.event_log
        yield Footer()

    def on_mount(self) -> None:
        self._step_timer = self.set_interval(self.interval, self._tick)
        self.event_log.write_line(f"seed={self.generator.seed} size={self.generator.grid_size}")
        self.redraw()

    def _tick(self) -> None:
        self._tick_count += 1
        # Every other tick, so the previous frame is visible before the next step
        if self.paused or self._tick_count % 2:
            return
        self.advance()

    def advance(self) -> None:
        gen = self.generator
        if gen.is_done:
            return
        before = gen.phase()
        after = gen.step()
        if after is not before:
            self.event_log.write_line(f"{before.value} -> {after.value} (step {gen.metrics['steps']})")
        self.redraw()

    def redraw(self) -> None:
        gen = self.generator
        self.map_view.update(render_snapshot(gen.snapshot()))
        m = gen.metrics
        lines = [
            f"phase:      {gen.phase().value}{' (paused)' if self.paused else ''}",
            f"seed:       {gen.seed}",
            f"steps:      {m['steps']}",
            f"rooms:      {len(gen.rooms())} / {m['rooms_attempted']} tried",
            f"maze cells: {len(gen.maze_cells())}",
            f"main:       {len(gen.main_region_cells())}",
            f"connectors: {len(gen.connectors())} left, {m['connectors_opened']} opened",
            f"dead ends:  {m['dead_ends_removed']} removed",
        ]
        self.status.update("\n".join(lines))

    def action_reset(self) -> None:
        cfg = self.generator.config
        self.generator.configure(
            cfg.grid_size,
            cfg.room_attempts,
            None,
            extra_connector_chance=cfg.extra_connector_chance,
        )
        self.event_log.write_line(f"reset: seed={self.generator.seed}")
        self.redraw()

    def action_toggle_pause(self) -> None:
        self.paused = not self.paused
        self.redraw()

    def action_step_once(self) -> None:
        self.advance()

    def action_faster(self) -> None:
        self._retime(max(MIN_INTERVAL, self.interval / 2))

    def action_slower(self) -> None:
        self._retime(min(MAX_INTERVAL, self.interval * 2))

    def _retime(self, interval: float) -> None:
        self.interval = interval
        if self._step_timer is not None:
            self._step_timer.stop()
        self._step_timer = self.set_interval(self.interval, self._tick)


def run_viewer(config: Optional[GeneratorConfig] = None, interval: float = 1 / 30) -> None:
    DungeonViewer(config, interval=interval).run()

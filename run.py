"""Carver CLI entry point.

Provides subcommands for generating a dungeon in the terminal, watching the
generator animate in a Textual viewer, and running the HTTP API. Accepts
configuration via flags and environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

from carver import __version__


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Carver dungeon generator

    Generate rooms-and-mazes dungeons step by step: scatter rooms, grow maze
    corridors between them, connect everything into one region and prune dead
    ends. Configuration can be provided via CLI flags or CARVER_* environment
    variables. If both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          CARVER_GRID_SIZE       Odd grid size, at least 9 (default: 27)
          CARVER_ROOM_ATTEMPTS   Room placement attempt budget (default: 200)
          CARVER_SEED            Fixed seed (default: random)
          CARVER_EXTRA_CONNECTOR_CHANCE
                                 Chance of a second door into a newly joined room (default: 0.2)
          CARVER_LOG_LEVEL       debug|info|warn|error (default: info)
          CARVER_LOG_JSON        1 to log one JSON object per line (default: 0)
          CARVER_MAX_GRID_SIZE / CARVER_MAX_ROOM_ATTEMPTS
                                 Largest values the API accepts (default: 101 / 5000)
          HOST / PORT            Bind address for the API server (default: 0.0.0.0:5000)

        Examples:
          # Print a finished 27x27 dungeon
          python run.py generate --seed 42

          # Emit the finished dungeon as JSON
          python run.py generate --size 41 --json

          # Watch generation in the terminal
          python run.py view --size 31

          # Serve the HTTP API on a custom port
          python run.py server --port 8080
        """
    )

    parser = argparse.ArgumentParser(
        prog="carver",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Carver dungeon generator {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    def add_generation_flags(p):
        p.add_argument("--size", dest="grid_size", type=int, default=None, help="Odd grid size >= 9")
        p.add_argument("--attempts", dest="room_attempts", type=int, default=None, help="Room attempt budget")
        p.add_argument("--seed", type=int, default=None, help="Random seed (default: random)")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a dungeon and print it",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run every generation phase to completion and print the map.",
    )
    add_generation_flags(gen_parser)
    gen_parser.add_argument("--json", action="store_true", help="Print the snapshot and metrics as JSON")
    gen_parser.add_argument("--no-color", dest="no_color", action="store_true", help="Plain characters only")
    gen_parser.add_argument(
        "--max-steps", dest="max_steps", type=int, default=None, help="Abort if not done after this many steps"
    )
    gen_parser.set_defaults(command="generate")

    view_parser = subparsers.add_parser(
        "view",
        help="Watch generation in a Textual viewer",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Animate generation step by step. Keys: q quit, r reset, space pause, n step, +/- speed.",
    )
    add_generation_flags(view_parser)
    view_parser.add_argument(
        "--interval", type=float, default=1 / 30, help="Seconds between timer ticks (steps run every other tick)"
    )
    view_parser.set_defaults(command="view")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the generator HTTP API",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask development server exposing /api/generators and /api/dungeon",
    )
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)")
    server_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    server_parser.set_defaults(command="server")

    # If no subcommand provided, default to generate
    if len(argv) == 0:
        argv = ["generate"]

    return parser.parse_args(argv)


def _generator_config(args):
    from carver.dungeon import GeneratorConfig

    cfg = GeneratorConfig.from_env()
    if getattr(args, "grid_size", None) is not None:
        cfg.grid_size = args.grid_size
    if getattr(args, "room_attempts", None) is not None:
        cfg.room_attempts = args.room_attempts
    if getattr(args, "seed", None) is not None:
        cfg.seed = args.seed
    return cfg.validate()


_TILE_STYLES = {
    "R": Fore.MAGENTA,
    "M": Fore.BLUE + Style.BRIGHT,
    "T": Fore.YELLOW,
    "m": Fore.CYAN,
    ".": Style.DIM,
}


def _colorize(row: str) -> str:
    return "".join(f"{_TILE_STYLES.get(ch, '')}{ch}{Style.RESET_ALL}" for ch in row)


def _generate(args) -> int:
    from carver.dungeon import DungeonGenerator, render_rows

    config = _generator_config(args)
    if args.json:
        from carver.logging_utils import get_logger, set_level

        # Keep stdout parseable
        if get_logger("carver").enabled("info"):
            set_level("warn")
    gen = DungeonGenerator(config)
    gen.run(max_steps=args.max_steps)
    snap = gen.snapshot()
    if args.json:
        payload = snap.to_dict()
        payload["rows"] = render_rows(snap)
        payload["metrics"] = gen.metrics
        print(json.dumps(payload))
        return 0
    color = not args.no_color and sys.stdout.isatty()
    if color:
        _color_init()
    for row in render_rows(snap):
        print(_colorize(row) if color else row)
    m = gen.metrics
    print(
        f"seed={gen.seed} size={gen.grid_size} rooms={len(snap.rooms)} "
        f"maze={len(snap.maze)} steps={m['steps']} dead_ends_removed={m['dead_ends_removed']}"
    )
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    from carver.dungeon import ConfigurationError, GenerationStalled
    from carver.logging_utils import log

    mode = (getattr(args, "command", None) or "generate").lower()
    log.debug(event="startup", mode=mode)
    try:
        if mode == "generate":
            return _generate(args)
        if mode == "view":
            from carver.viewer_tui import run_viewer

            run_viewer(_generator_config(args), interval=args.interval)
            return 0
        if mode == "server":
            from carver import server

            host = args.host or os.getenv("HOST", "0.0.0.0")
            port = int(args.port or os.getenv("PORT", "5000"))
            server.start_server(host, port, args.debug)
            return 0
    except ConfigurationError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except GenerationStalled as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    print(f"[ERROR] Unknown command: {mode}", file=sys.stderr)
    return 1


def cli():
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()

"""Dungeon generator CLI entry point.

Provides subcommands for printing a generated dungeon and for running the
JSON API server. Accepts configuration via flags and environment variables,
with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()


def _load_version() -> str:
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "VERSION")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.0.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Procedural dungeon generator

    Print a generated dungeon map to the terminal or run the JSON API server.
    Configuration can be provided via CLI flags or environment variables. If
    both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                          Bind address for the API server (default: 0.0.0.0)
          PORT                          Port for the API server (default: 5000)
          DUNGEON_OBSTACLE_OVERLAY      Keep floor under rocks (1/0)
          DUNGEON_PREFER_DEAD_END_EXIT  Prefer dead-end-like exit cells (1/0)
          DUNGEON_EXIT_DISTANCE         manhattan | euclidean
          DUNGEONGEN_LOG_LEVEL          debug | info | warn | error

        Examples:
          # Print a dungeon for seed 42
          python run.py generate --seed 42

          # Bigger map with more rooms, as JSON
          python run.py generate --width 80 --height 50 --rooms 12 --json

          # Run the API server on a custom port
          python run.py server --port 8080

          # Load variables from .env then run the server
          python run.py --env-file .env server
        """
    )

    parser = argparse.ArgumentParser(
        prog="dungeongen",
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
        version=f"dungeongen {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a dungeon and print it",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate one dungeon and print the map with a metrics summary",
    )
    gen_parser.add_argument("--seed", type=int, default=None, help="RNG seed (default: random)")
    gen_parser.add_argument("--width", type=int, default=None, help="Grid width (default: 40)")
    gen_parser.add_argument("--height", type=int, default=None, help="Grid height (default: 40)")
    gen_parser.add_argument("--rooms", type=int, default=None, help="Requested room count (default: 6)")
    gen_parser.add_argument(
        "--overlay",
        action="store_true",
        help="Keep rocks as an overlay on top of floor instead of replacing it",
    )
    gen_parser.add_argument(
        "--strict-exit",
        dest="strict_exit",
        action="store_true",
        help="Prefer dead-end-like cells for the exit",
    )
    gen_parser.add_argument("--json", dest="as_json", action="store_true", help="Print the result as JSON")
    gen_parser.add_argument("--no-color", dest="no_color", action="store_true", help="Disable ANSI colors")
    gen_parser.set_defaults(command="generate")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the JSON API server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask dungeon API",
    )
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)")
    server_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    server_parser.set_defaults(command="server")

    args = parser.parse_args(argv)
    # If no subcommand provided, default to generate
    if args.command is None:
        args = parser.parse_args(list(argv) + ["generate"])
    return args


_TILE_COLORS = {
    "#": Fore.WHITE + Style.DIM,
    ".": Fore.YELLOW,
    ",": Fore.YELLOW + Style.DIM,
    "S": Fore.GREEN + Style.BRIGHT,
    "X": Fore.RED + Style.BRIGHT,
    "o": Fore.CYAN,
    "$": Fore.MAGENTA + Style.BRIGHT,
}


def colorize(ascii_map: str) -> str:
    out = []
    for ch in ascii_map:
        color = _TILE_COLORS.get(ch)
        out.append(f"{color}{ch}{Style.RESET_ALL}" if color else ch)
    return "".join(out)


def _build_config(args):
    from dungeongen.dungeon import DungeonConfig

    overrides = {
        "width": args.width,
        "height": args.height,
        "room_count": args.rooms,
        "seed": args.seed,
    }
    config = DungeonConfig(**{k: v for k, v in overrides.items() if v is not None})
    if args.overlay:
        config.obstacle_overlay = True
    if args.strict_exit:
        config.prefer_dead_end_exit = True
    return config


def run_generate(args) -> int:
    from dungeongen.dungeon import ConfigurationError, generate

    try:
        result = generate(_build_config(args))
    except ConfigurationError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    if args.as_json:
        print(json.dumps(result.to_json()))
        return 0
    use_color = not args.no_color and sys.stdout.isatty()
    ascii_map = result.to_ascii()
    print(colorize(ascii_map) if use_color else ascii_map)

    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if use_color else text

    m = result.metrics
    lines = [
        "",
        f"{label('Seed:'):12} {result.seed}",
        f"{label('Size:'):12} {result.width}x{result.height}",
        f"{label('Rooms:'):12} {len(result.rooms)}/{result.config.room_count}",
        f"{label('Dead ends:'):12} {len(result.dead_ends)}",
        f"{label('Spawn:'):12} {result.spawn}",
        f"{label('Exit:'):12} {result.exit}",
        f"{label('Rocks:'):12} {len(result.rocks)}",
        f"{label('Chests:'):12} {len(result.chests)}",
    ]
    if "runtime_ms" in m:
        lines.append(f"{label('Runtime:'):12} {m['runtime_ms']} ms")
    print("\n".join(lines))
    return 0


def run_server(args) -> int:
    from dungeongen.logging_utils import log
    from dungeongen.server import start_server

    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "5000"))

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    divider = Fore.MAGENTA + "=" * 40 + Style.RESET_ALL
    lines = [
        divider,
        f"  {Fore.CYAN}{Style.BRIGHT}Dungeon API Bootup{Style.RESET_ALL}",
        divider,
        f"  {Fore.YELLOW}{'Host:':12}{Style.RESET_ALL} {Fore.GREEN}{host}{Style.RESET_ALL}",
        f"  {Fore.YELLOW}{'Port:':12}{Style.RESET_ALL} {Fore.GREEN}{port}{Style.RESET_ALL}",
        f"  {Fore.YELLOW}{'Debug:':12}{Style.RESET_ALL} {Fore.GREEN}{'YES' if args.debug else 'NO'}{Style.RESET_ALL}",
        divider,
        "",
    ]
    print("\n".join(lines))
    log.info(event="startup", mode="server", host=host, port=port)
    start_server(host=host, port=port, debug=args.debug)
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    if args.command == "server":
        return run_server(args)
    return run_generate(args)


def cli():
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()

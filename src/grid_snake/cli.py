"""Command line entry point: run the server or benchmark the simulation."""

from __future__ import annotations

import argparse
import logging
import sys

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grid-snake",
        description="Authoritative multiplayer grid snake server and tools.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- serve ---
    serve_p = sub.add_parser("serve", help="Run the HTTP/WebSocket server.")
    serve_p.add_argument("--host", type=str, default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8000)
    serve_p.add_argument("--width", type=int, default=None)
    serve_p.add_argument("--height", type=int, default=None)
    serve_p.add_argument("--bots", type=int, default=None)
    serve_p.add_argument(
        "--tick-rate", type=int, default=None,
        help="Ticks per second for every match.",
    )
    serve_p.add_argument("--max-players", type=int, default=None)
    serve_p.add_argument("--seed", type=int, default=None)

    # --- benchmark ---
    bench_p = sub.add_parser(
        "benchmark", help="Measure bots-only simulation throughput.",
    )
    bench_p.add_argument("--games", type=int, default=100)
    bench_p.add_argument("--width", type=int, default=30)
    bench_p.add_argument("--height", type=int, default=20)
    bench_p.add_argument("--bots", type=int, default=2)
    bench_p.add_argument("--max-ticks", type=int, default=500)
    bench_p.add_argument("--seed", type=int, default=42)

    return parser


def _match_config(args: argparse.Namespace):
    from grid_snake.match import MatchConfig

    overrides: dict = {}
    flag_map = {
        "width": "width",
        "height": "height",
        "bots": "num_bots",
        "tick_rate": "tick_rate",
        "max_players": "max_players",
        "seed": "seed",
    }
    for cli_name, cfg_name in flag_map.items():
        val = getattr(args, cli_name, None)
        if val is not None:
            overrides[cfg_name] = val
    return MatchConfig(**overrides)


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from grid_snake.server.app import create_app

    try:
        config = _match_config(args)
    except ValueError as exc:
        logger.error("Invalid match configuration: %s", exc)
        return 2

    logger.info(
        "Serving on %s:%d (%dx%d, bots=%d, %d ticks/s).",
        args.host, args.port, config.width, config.height,
        config.num_bots, config.tick_rate,
    )
    uvicorn.run(create_app(config), host=args.host, port=args.port)
    return 0


def _run_benchmark(args: argparse.Namespace) -> int:
    from grid_snake.benchmark import benchmark_throughput

    result = benchmark_throughput(
        num_games=args.games,
        width=args.width,
        height=args.height,
        num_bots=args.bots,
        max_ticks=args.max_ticks,
        seed=args.seed,
    )
    print(result.summary())  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``grid-snake`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "serve": _run_serve,
        "benchmark": _run_benchmark,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())

"""Bots-only simulation throughput benchmark."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np

from grid_snake.game import SnakeGame

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    """Results from a throughput benchmark run."""

    total_games: int
    total_ticks: int
    stuck_games: int
    wall_time_seconds: float
    games_per_second: float
    ticks_per_second: float

    def summary(self) -> str:
        return (
            f"Benchmark: {self.total_games} games, {self.total_ticks} ticks "
            f"({self.stuck_games} ended stuck) in "
            f"{self.wall_time_seconds:.2f}s | "
            f"{self.games_per_second:.1f} games/s, "
            f"{self.ticks_per_second:.1f} ticks/s"
        )


def run_bot_game(game: SnakeGame, max_ticks: int) -> tuple[int, int | None]:
    """Steer every snake randomly until one is stuck or *max_ticks* pass.

    Returns ``(ticks_played, stuck_index)``; ``stuck_index`` is ``None``
    when the game ran out of ticks.
    """
    for tick in range(max_ticks):
        for index, snake in enumerate(game.snakes):
            options = game.get_valid_directions(snake)
            if not options:
                return tick, index
            snake.direction = options[int(game.rng.integers(len(options)))]
            game.move(snake)
    return max_ticks, None


def benchmark_throughput(
    *,
    num_games: int = 100,
    width: int = 30,
    height: int = 20,
    num_bots: int = 2,
    max_ticks: int = 500,
    seed: int | None = 42,
) -> BenchmarkResult:
    """Measure raw simulation throughput with random bots and no transport."""
    rng = np.random.default_rng(seed)
    total_ticks = 0
    stuck_games = 0

    start = time.perf_counter()
    for _ in range(num_games):
        game = SnakeGame.new(width, height, num_bots=num_bots, rng=rng)
        ticks, stuck = run_bot_game(game, max_ticks)
        total_ticks += ticks
        if stuck is not None:
            stuck_games += 1
    elapsed = time.perf_counter() - start

    result = BenchmarkResult(
        total_games=num_games,
        total_ticks=total_ticks,
        stuck_games=stuck_games,
        wall_time_seconds=elapsed,
        games_per_second=num_games / elapsed if elapsed > 0 else 0.0,
        ticks_per_second=total_ticks / elapsed if elapsed > 0 else 0.0,
    )
    logger.info(result.summary())
    return result

"""Grid Snake: authoritative multiplayer snake simulation."""

from grid_snake.errors import ContractViolation
from grid_snake.game import SnakeGame
from grid_snake.grid import CellType, Grid
from grid_snake.match import Match, MatchConfig, MatchPhase
from grid_snake.snake import Direction, Point, Snake

__all__ = [
    "CellType",
    "ContractViolation",
    "Direction",
    "Grid",
    "Match",
    "MatchConfig",
    "MatchPhase",
    "Point",
    "Snake",
    "SnakeGame",
]

"""Food placement logic."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from grid_snake.grid import CellType
from grid_snake.snake import Point

if TYPE_CHECKING:
    from grid_snake.grid import Grid

logger = logging.getLogger(__name__)


class FoodSpawner:
    """Keeps at most one food cell on the board.

    Uses an injected NumPy RNG so placement is reproducible under a seed.
    """

    def __init__(self, grid: Grid, rng: np.random.Generator | None = None) -> None:
        self.grid = grid
        self.rng = rng if rng is not None else np.random.default_rng()
        self.position: Point | None = None

    @property
    def has_food(self) -> bool:
        return self.position is not None

    def place(self) -> Point | None:
        """Put food on a uniformly chosen empty cell.

        Returns the chosen position, or ``None`` when the board is full.
        """
        empty = self.grid.empty_cells()
        if not empty:
            logger.warning("No empty cells available for food placement.")
            return None

        pos = empty[int(self.rng.integers(len(empty)))]
        self.grid.set(pos.x, pos.y, CellType.FOOD)
        self.position = pos
        return pos

    def consume(self, point: Point) -> None:
        """Forget the food at *point*; the caller repaints the cell."""
        if self.position == point:
            self.position = None

    def to_dict(self) -> dict:
        return {
            "has_food": self.has_food,
            "food": list(self.position) if self.position is not None else None,
        }

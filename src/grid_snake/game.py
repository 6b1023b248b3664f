"""Grid simulation: board occupancy, snake movement, food and legality checks."""

from __future__ import annotations

import logging

import numpy as np

from grid_snake.errors import ContractViolation
from grid_snake.food import FoodSpawner
from grid_snake.grid import CellType, Grid
from grid_snake.snake import Direction, Point, Snake, is_reverse, is_unit_axis

logger = logging.getLogger(__name__)

BOT_IDENTIFIER = ""
INITIAL_SNAKE_SIZE = 2
SPAWN_DIRECTION = Direction.RIGHT


class SnakeGame:
    """Deterministic snake simulation on a single shared board.

    The game owns the grid, the ordered snakes and a parallel ordered list
    of identifiers (``""`` marks a bot). A snake's position in
    :attr:`snakes` is its index; removing a snake shifts every later index
    down by one, so callers must re-resolve indices after
    :meth:`remove_snake`.

    Nothing here re-validates :meth:`move`: callers check
    :meth:`validate_direction` first.
    """

    def __init__(
        self,
        width: int = 30,
        height: int = 20,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.grid = Grid(width=width, height=height)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.snakes: list[Snake] = []
        self.identifiers: list[str] = []
        self.food = FoodSpawner(self.grid, rng=self.rng)

    @classmethod
    def new(
        cls,
        width: int,
        height: int,
        num_bots: int = 0,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> SnakeGame:
        """Build a board with *num_bots* bots and one food cell."""
        if rng is None:
            rng = np.random.default_rng(seed)
        game = cls(width, height, rng=rng)
        for _ in range(num_bots):
            game.add_snake(BOT_IDENTIFIER)
        game.place_food()
        return game

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def has_food(self) -> bool:
        return self.food.has_food

    # --- roster -----------------------------------------------------------

    def add_snake(self, identifier: str = BOT_IDENTIFIER) -> int:
        """Place a new two-segment snake and return its index.

        The head goes on a random empty cell whose neighbour at ``x - 1``
        is also empty; the snake starts moving ``(0, 1)``.
        """
        candidates = [
            p for p in self.grid.empty_cells()
            if self.grid.in_bounds(p.x - 1, p.y)
            and self.grid.get(p.x - 1, p.y) == CellType.EMPTY
        ]
        if not candidates:
            raise ContractViolation("board full: no room to place a new snake")

        pos0 = candidates[int(self.rng.integers(len(candidates)))]
        pos1 = Point(pos0.x - 1, pos0.y)
        snake = Snake([pos0, pos1], SPAWN_DIRECTION)
        for seg in snake.body:
            self.grid.set(seg.x, seg.y, CellType.SNAKE)

        self.snakes.append(snake)
        self.identifiers.append(identifier)
        logger.debug(
            "Placed snake %d for %r at %s.",
            len(self.snakes) - 1, identifier, list(snake.body),
        )
        return len(self.snakes) - 1

    def remove_snake(self, index: int) -> Snake:
        """Clear a snake's cells and drop it together with its identifier."""
        if not 0 <= index < len(self.snakes):
            raise ContractViolation(
                f"snake index {index} out of range [0, {len(self.snakes)})"
            )
        snake = self.snakes.pop(index)
        self.identifiers.pop(index)
        for seg in snake.body:
            self.grid.set(seg.x, seg.y, CellType.EMPTY)
        return snake

    def index_of(self, identifier: str) -> int:
        """Return the index of the only snake owned by *identifier*."""
        matches = [i for i, ident in enumerate(self.identifiers) if ident == identifier]
        if len(matches) != 1:
            raise ContractViolation(
                f"expected exactly one snake for {identifier!r}, found {len(matches)}"
            )
        return matches[0]

    def is_bot(self, index: int) -> bool:
        return self.identifiers[index] == BOT_IDENTIFIER

    def display_name(self, index: int) -> str:
        """Human-readable owner of a snake, used in feedback messages."""
        return self.identifiers[index] or f"bot-{index}"

    def entity_index_at(self, point: tuple[int, int]) -> int:
        """Return the index of the snake whose body covers *point*."""
        target = Point(*point)
        for index, snake in enumerate(self.snakes):
            if target in snake.body:
                return index
        raise ContractViolation(f"no snake occupies {tuple(target)}")

    # --- food -------------------------------------------------------------

    def place_food(self) -> Point | None:
        return self.food.place()

    # --- legality ---------------------------------------------------------

    def can_change_direction(self, snake: Snake, vector: tuple[int, int]) -> bool:
        """Check bounds, body occupancy and reversal for a candidate heading."""
        head = snake.next_head(vector)
        if not self.grid.in_bounds(head.x, head.y):
            return False
        if self.grid.get(head.x, head.y) == CellType.SNAKE:
            return False
        return not is_reverse(snake.direction, vector)

    def validate_direction(self, snake: Snake, vector: tuple[int, int]) -> bool:
        """Like :meth:`can_change_direction` but rejects non-unit vectors."""
        if not is_unit_axis(vector):
            return False
        return self.can_change_direction(snake, vector)

    def get_valid_directions(self, snake: Snake) -> list[Direction]:
        """Return every direction the snake may take next; empty means stuck."""
        return [d for d in Direction if self.validate_direction(snake, d.value)]

    # --- movement ---------------------------------------------------------

    def move(self, snake: Snake) -> bool:
        """Advance *snake* one cell along its direction.

        Returns True if the snake ate and grew.
        """
        new_head = snake.next_head()

        if self.grid.get(new_head.x, new_head.y) == CellType.FOOD:
            snake.body.appendleft(new_head)
            self.grid.set(new_head.x, new_head.y, CellType.SNAKE)
            self.food.consume(new_head)
            self.place_food()
            return True

        tail = snake.body.pop()
        self.grid.set(tail.x, tail.y, CellType.EMPTY)
        snake.body.appendleft(new_head)
        self.grid.set(new_head.x, new_head.y, CellType.SNAKE)
        return False

    def to_dict(self) -> dict:
        """Return a self-contained, serializable snapshot of the board."""
        return {
            **self.grid.to_dict(),
            **self.food.to_dict(),
            "snakes": [
                {"id": ident, **snake.to_dict()}
                for ident, snake in zip(self.identifiers, self.snakes, strict=True)
            ],
        }

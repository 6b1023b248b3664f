"""Points, directions and the snake body."""

from __future__ import annotations

import enum
from collections import deque
from collections.abc import Iterable
from typing import NamedTuple


class Point(NamedTuple):
    """An immutable board coordinate."""

    x: int
    y: int


class Direction(enum.Enum):
    """Axis unit vectors as ``(dx, dy)``.

    ``+y`` reads as "right" and ``+x`` as "down".
    """

    RIGHT = (0, 1)
    DOWN = (1, 0)
    LEFT = (0, -1)
    UP = (-1, 0)


_UNIT_VECTORS: frozenset[tuple[int, int]] = frozenset(d.value for d in Direction)


def is_unit_axis(vector: tuple[int, int]) -> bool:
    """Return True only for one of the four axis unit vectors."""
    return tuple(vector) in _UNIT_VECTORS


def is_reverse(current: Direction, candidate: tuple[int, int]) -> bool:
    """Check whether *candidate* points straight back along *current*."""
    dx, dy = current.value
    cx, cy = candidate
    return dx + cx == 0 and dy + cy == 0


class Snake:
    """A snake as an ordered deque of body points.

    The head is ``body[0]``; the tail is ``body[-1]``. Board consistency
    is the simulation's job; the snake only knows its own segments.
    """

    def __init__(
        self,
        body: Iterable[Point],
        direction: Direction = Direction.RIGHT,
    ) -> None:
        self.body: deque[Point] = deque(Point(*p) for p in body)
        if not self.body:
            raise ValueError("Snake body must have at least one segment.")
        self.direction = direction

    @property
    def head(self) -> Point:
        """Return the head coordinate."""
        return self.body[0]

    @property
    def tail(self) -> Point:
        return self.body[-1]

    def __len__(self) -> int:
        return len(self.body)

    def next_head(self, vector: tuple[int, int] | None = None) -> Point:
        """Compute the head position after one step along *vector*.

        Defaults to the current direction.
        """
        dx, dy = vector if vector is not None else self.direction.value
        return Point(self.head.x + dx, self.head.y + dy)

    def occupies(self, point: tuple[int, int]) -> bool:
        """Check whether the snake occupies a given cell."""
        return Point(*point) in self.body

    def to_dict(self) -> dict:
        """Serialize snake state to a dictionary."""
        return {
            "body": [list(seg) for seg in self.body],
            "direction": list(self.direction.value),
        }

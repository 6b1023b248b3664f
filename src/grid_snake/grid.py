"""Board representation for the snake game."""

from __future__ import annotations

import enum

import numpy as np

from grid_snake.snake import Point


class CellType(enum.IntEnum):
    """Integer codes stored in the board array."""

    EMPTY = 0
    SNAKE = 1
    FOOD = 2


class Grid:
    """NumPy-backed board with ``width`` x ``height`` cells.

    Cells are addressed as ``cells[x, y]``: ``x`` runs along the first
    array axis (``0 <= x < width``) and ``y`` along the second
    (``0 <= y < height``).
    """

    def __init__(self, width: int = 30, height: int = 20) -> None:
        if width < 2 or height < 2:
            raise ValueError("Grid dimensions must be at least 2×2.")
        self.width = width
        self.height = height
        self.cells = np.zeros((width, height), dtype=np.int8)

    def clear(self) -> None:
        """Reset all cells to empty."""
        self.cells[:] = CellType.EMPTY

    def in_bounds(self, x: int, y: int) -> bool:
        """Check whether a coordinate lies on the board."""
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> CellType:
        """Return the cell type at the given coordinate."""
        return CellType(self.cells[x, y])

    def set(self, x: int, y: int, cell_type: CellType) -> None:
        """Set the cell type at the given coordinate."""
        self.cells[x, y] = cell_type

    def empty_cells(self) -> list[Point]:
        """Return all empty cell coordinates in row-major order."""
        xs, ys = np.where(self.cells == CellType.EMPTY)
        return [Point(x, y) for x, y in zip(xs.tolist(), ys.tolist(), strict=True)]

    def count(self, cell_type: CellType) -> int:
        return int(np.count_nonzero(self.cells == cell_type))

    def to_dict(self) -> dict:
        """Serialize board state to a dictionary."""
        return {
            "width": self.width,
            "height": self.height,
            "cells": self.cells.tolist(),
        }

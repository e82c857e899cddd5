from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np


Coordinate = Tuple[int, int]


def is_tile_value(value: int) -> bool:
    """Return True for powers of two >= 2."""
    return value >= 2 and (value & (value - 1)) == 0


class GameGrid:
    """Fixed-size 2D cell store.

    The grid uses 0 for empty cells and powers of two for settled tiles.
    Indexing follows the board convention ``(x, y)`` with ``y = 0`` at the top;
    the backing array is stored row-major as ``grid[y, x]``.
    """

    def __init__(self, width: int = 8, height: int = 8) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int64)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Optional[int]]]) -> "GameGrid":
        """Build a grid from nested lists; ``None`` and ``0`` are empty."""
        height = len(rows)
        width = len(rows[0]) if height else 0
        new = cls(width, height)
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError("All rows must have the same length")
            for x, v in enumerate(row):
                if v:
                    new.set(x, y, int(v))
        return new

    def reset(self) -> None:
        self.grid.fill(0)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_empty(self, x: int, y: int) -> bool:
        return self.get(x, y) == 0

    def get(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise IndexError(f"Cell ({x}, {y}) outside {self.width}x{self.height} grid")
        return int(self.grid[y, x])

    def set(self, x: int, y: int, value: int) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Cell ({x}, {y}) outside {self.width}x{self.height} grid")
        value = int(value)
        if value != 0 and not is_tile_value(value):
            raise ValueError(f"Tile values must be powers of two >= 2, got {value}")
        self.grid[y, x] = value

    def clear(self, x: int, y: int) -> None:
        self.set(x, y, 0)

    def cells(self) -> Iterable[Tuple[int, int, int]]:
        """Yield ``(x, y, value)`` for every non-empty cell in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                v = int(self.grid[y, x])
                if v:
                    yield x, y, v

    def max_value(self) -> int:
        return int(self.grid.max()) if self.grid.size else 0

    def copy(self) -> "GameGrid":
        new_grid = GameGrid(self.width, self.height)
        new_grid.grid = self.grid.copy()
        return new_grid

    def freeze(self) -> "GameGrid":
        """Make the backing array read-only and return self."""
        self.grid.flags.writeable = False
        return self

    @property
    def frozen(self) -> bool:
        return not self.grid.flags.writeable

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()

    def to_list(self) -> List[List[int]]:
        return [[int(v) for v in row] for row in self.grid]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameGrid):
            return NotImplemented
        return self.grid.shape == other.grid.shape and bool(np.array_equal(self.grid, other.grid))

    def __hash__(self) -> int:
        return hash((self.grid.shape, self.grid.tobytes()))

    def __repr__(self) -> str:
        return f"GameGrid({self.width}x{self.height}, tiles={int(np.count_nonzero(self.grid))})"

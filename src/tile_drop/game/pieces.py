from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Iterator, Optional, Protocol, Tuple

from .grid import GameGrid


Offset = Tuple[int, int]

SINGLE_CELL: Tuple[Offset, ...] = ((0, 0),)


class UniformSource(Protocol):
    """Anything that yields uniform floats in [0, 1); ``random.Random`` qualifies."""

    def random(self) -> float: ...


@dataclass(frozen=True)
class Piece:
    value: int
    x: int
    y: int = 0
    shape: Tuple[Offset, ...] = SINGLE_CELL  # (dx, dy) offsets from the top-left anchor

    def cells(self) -> Iterator[Tuple[int, int]]:
        for dx, dy in self.shape:
            yield self.x + dx, self.y + dy

    def moved(self, dx: int = 0, dy: int = 0) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)


class PieceGenerator:
    """Spawns single-cell pieces: value 2 (or 4), random column, top row."""

    def __init__(
        self,
        source: Optional[UniformSource] = None,
        cols: int = 8,
        two_probability: float = 0.8,
        seed: Optional[int] = None,
    ) -> None:
        self.source: UniformSource = source if source is not None else random.Random(seed)
        self.cols = int(cols)
        self.two_probability = float(two_probability)

    def generate(self) -> Piece:
        value = 2 if self.source.random() < self.two_probability else 4
        x = min(int(self.source.random() * self.cols), self.cols - 1)
        return Piece(value=value, x=x, y=0)


def is_valid_position(piece: Piece, grid: GameGrid) -> bool:
    for x, y in piece.cells():
        if not grid.in_bounds(x, y):
            return False
        if grid.grid[y, x] != 0:
            return False
    return True


def move_horizontal(piece: Piece, direction: int, grid: GameGrid) -> Piece:
    if direction not in (-1, 1):
        raise ValueError(f"direction must be -1 or 1, got {direction}")
    moved = piece.moved(dx=direction)
    if is_valid_position(moved, grid):
        return moved
    return piece


def hard_drop(piece: Piece, grid: GameGrid) -> Piece:
    """Return ``piece`` at its resting row without committing it."""
    while True:
        below = piece.moved(dy=1)
        if not is_valid_position(below, grid):
            return piece
        piece = below

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .grid import GameGrid


@dataclass
class ResolutionResult:
    grid: GameGrid
    score: int
    max_value: int
    merges: int = 0
    passes: int = 0


def apply_gravity(grid: GameGrid) -> GameGrid:
    """Compact every column downward, keeping the top-to-bottom order of tiles."""
    out = GameGrid(grid.width, grid.height)
    for x in range(grid.width):
        column = grid.grid[:, x]
        tiles = column[column != 0]
        if tiles.size:
            out.grid[grid.height - tiles.size :, x] = tiles
    return out


def _merge_pass(board: np.ndarray) -> tuple[int, int, int]:
    """One row-major scan of right-then-down merges, in place.

    The downward check reads the cell after a rightward merge may already have
    doubled it, so a single cell can merge twice in one pass.
    Returns ``(merges, score, largest_new_value)``.
    """
    height, width = board.shape
    merges = 0
    score = 0
    largest = 0
    for y in range(height):
        for x in range(width):
            if board[y, x] == 0:
                continue
            if x < width - 1 and board[y, x] == board[y, x + 1]:
                board[y, x] *= 2
                board[y, x + 1] = 0
                value = int(board[y, x])
                score += value
                largest = max(largest, value)
                merges += 1
            if y < height - 1 and board[y, x] == board[y + 1, x]:
                board[y, x] *= 2
                board[y + 1, x] = 0
                value = int(board[y, x])
                score += value
                largest = max(largest, value)
                merges += 1
    return merges, score, largest


def resolve(grid: GameGrid) -> ResolutionResult:
    """Merge and apply gravity until a full pass produces no merges.

    The input grid is left untouched.
    """
    current = grid.copy()
    total_score = 0
    total_merges = 0
    max_value = current.max_value()
    passes = 0
    while True:
        merges, score, largest = _merge_pass(current.grid)
        passes += 1
        if merges == 0:
            break
        total_merges += merges
        total_score += score
        max_value = max(max_value, largest)
        current = apply_gravity(current)
    return ResolutionResult(
        grid=current,
        score=total_score,
        max_value=max_value,
        merges=total_merges,
        passes=passes,
    )

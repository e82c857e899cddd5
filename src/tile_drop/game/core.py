from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Union

import numpy as np

from .grid import GameGrid
from .pieces import Piece, PieceGenerator, UniformSource, hard_drop, is_valid_position, move_horizontal
from .rules import resolve


logger = logging.getLogger(__name__)


class Command(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    SOFT_DROP = 2
    HARD_DROP = 3
    TICK = 4
    TOGGLE_PAUSE = 5
    RESTART = 6


class SessionStatus(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


_COMMAND_ALIASES: Dict[str, Command] = {
    "moveleft": Command.MOVE_LEFT,
    "left": Command.MOVE_LEFT,
    "moveright": Command.MOVE_RIGHT,
    "right": Command.MOVE_RIGHT,
    "softdrop": Command.SOFT_DROP,
    "down": Command.SOFT_DROP,
    "harddrop": Command.HARD_DROP,
    "drop": Command.HARD_DROP,
    "tick": Command.TICK,
    "togglepause": Command.TOGGLE_PAUSE,
    "pause": Command.TOGGLE_PAUSE,
    "restart": Command.RESTART,
}


def parse_command(command: Union[Command, str]) -> Command:
    """Map a host-level command name to a ``Command``.

    Accepts ``Command`` members and names such as ``"moveLeft"``,
    ``"move_left"`` or ``"MOVE_LEFT"``. Anything else raises ``ValueError``.
    """
    if isinstance(command, Command):
        return command
    if isinstance(command, str):
        key = command.replace("_", "").replace("-", "").lower()
        if key in _COMMAND_ALIASES:
            return _COMMAND_ALIASES[key]
    raise ValueError(f"Unrecognized command: {command!r}")


@dataclass
class GameConfig:
    rows: int = 8
    cols: int = 8
    two_probability: float = 0.8
    tick_interval_ms: int = 1000
    random_seed: Optional[int] = None
    max_episode_steps: int = 10000

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("Grid dimensions must be positive")
        if not 0.0 <= self.two_probability <= 1.0:
            raise ValueError("two_probability must be within [0, 1]")
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of a session."""

    grid: GameGrid
    current_piece: Piece
    next_piece: Piece
    score: int = 0
    highest_tile: int = 0
    status: SessionStatus = SessionStatus.PLAYING

    @property
    def game_over(self) -> bool:
        return self.status is SessionStatus.GAME_OVER

    @property
    def paused(self) -> bool:
        return self.status is SessionStatus.PAUSED

    def view(self) -> np.ndarray:
        """Grid copy with the falling piece drawn in; the grid itself is untouched."""
        state = self.grid.clone_state()
        if not self.game_over:
            for x, y in self.current_piece.cells():
                if self.grid.in_bounds(x, y) and state[y, x] == 0:
                    state[y, x] = self.current_piece.value
        return state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grid": self.view(),
            "current_piece": {
                "value": self.current_piece.value,
                "x": self.current_piece.x,
                "y": self.current_piece.y,
            },
            "next_value": self.next_piece.value,
            "score": self.score,
            "highest_tile": self.highest_tile,
            "status": self.status.value,
        }


def new_game(generator: PieceGenerator, rows: int = 8, cols: int = 8) -> GameState:
    current = generator.generate()
    upcoming = generator.generate()
    return GameState(
        grid=GameGrid(cols, rows).freeze(),
        current_piece=current,
        next_piece=upcoming,
    )


def _commit(state: GameState, piece: Piece, generator: PieceGenerator) -> GameState:
    grid = state.grid.copy()
    for x, y in piece.cells():
        # An occupied spawn cell is never overwritten; the commit ends the game anyway.
        if grid.in_bounds(x, y) and grid.is_empty(x, y):
            grid.set(x, y, piece.value)
    result = resolve(grid)
    score = state.score + result.score
    highest = max(state.highest_tile, result.max_value)
    logger.debug(
        "Committed %d at (%d, %d): +%d points over %d merges",
        piece.value, piece.x, piece.y, result.score, result.merges,
    )
    if piece.y <= 0:
        logger.debug("Game over with score %d, highest tile %d", score, highest)
        return replace(
            state,
            grid=result.grid.freeze(),
            current_piece=piece,
            score=score,
            highest_tile=highest,
            status=SessionStatus.GAME_OVER,
        )
    return replace(
        state,
        grid=result.grid.freeze(),
        current_piece=state.next_piece,
        next_piece=generator.generate(),
        score=score,
        highest_tile=highest,
    )


def transition(state: GameState, command: Union[Command, str], generator: PieceGenerator) -> GameState:
    """Apply one command and return the next state.

    Rejected and no-op commands return ``state`` itself, so callers can use
    identity to detect that nothing happened.
    """
    command = parse_command(command)

    if command == Command.RESTART:
        logger.debug("Restarting session")
        return new_game(generator, state.grid.height, state.grid.width)
    if state.status is SessionStatus.GAME_OVER:
        return state
    if command == Command.TOGGLE_PAUSE:
        paused = state.status is SessionStatus.PLAYING
        logger.debug("Session %s", "paused" if paused else "resumed")
        return replace(state, status=SessionStatus.PAUSED if paused else SessionStatus.PLAYING)
    if state.status is SessionStatus.PAUSED:
        return state

    piece = state.current_piece
    if command in (Command.MOVE_LEFT, Command.MOVE_RIGHT):
        moved = move_horizontal(piece, -1 if command == Command.MOVE_LEFT else 1, state.grid)
        if moved is piece:
            return state
        return replace(state, current_piece=moved)
    if command in (Command.TICK, Command.SOFT_DROP):
        below = piece.moved(dy=1)
        if is_valid_position(below, state.grid):
            return replace(state, current_piece=below)
        return _commit(state, piece, generator)
    # HARD_DROP
    return _commit(state, hard_drop(piece, state.grid), generator)


class GameSession:
    """Mutable facade over ``transition`` for hosts.

    Every transition runs under one lock, so a timer thread and an input
    thread can drive the same session.
    """

    def __init__(self, config: Optional[GameConfig] = None, source: Optional[UniformSource] = None) -> None:
        self.config = config or GameConfig()
        self.generator = PieceGenerator(
            source,
            cols=self.config.cols,
            two_probability=self.config.two_probability,
            seed=self.config.random_seed,
        )
        self._lock = threading.Lock()
        # bumped on every status change and every restart
        self.status_changes = 0
        self._state = new_game(self.generator, self.config.rows, self.config.cols)

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def game_over(self) -> bool:
        return self._state.game_over

    def snapshot(self) -> GameState:
        return self._state

    def dispatch(self, command: Union[Command, str]) -> GameState:
        command = parse_command(command)
        with self._lock:
            before = self._state
            self._state = transition(before, command, self.generator)
            if command == Command.RESTART or self._state.status is not before.status:
                self.status_changes += 1
            return self._state

    def tick(self) -> GameState:
        return self.dispatch(Command.TICK)

    def move_left(self) -> GameState:
        return self.dispatch(Command.MOVE_LEFT)

    def move_right(self) -> GameState:
        return self.dispatch(Command.MOVE_RIGHT)

    def soft_drop(self) -> GameState:
        return self.dispatch(Command.SOFT_DROP)

    def hard_drop(self) -> GameState:
        return self.dispatch(Command.HARD_DROP)

    def toggle_pause(self) -> GameState:
        return self.dispatch(Command.TOGGLE_PAUSE)

    def restart(self) -> GameState:
        return self.dispatch(Command.RESTART)

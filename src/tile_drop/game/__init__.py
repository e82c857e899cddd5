"""Game module for tile-drop.

Exports the engine and its supporting classes:
- GameGrid: fixed-size cell store
- Piece / PieceGenerator: falling piece model and spawner
- resolve / apply_gravity: merge resolution
- GameSession / transition: state machine and its host facade
- TickDriver: gravity clock hook
"""

from .grid import GameGrid
from .pieces import Piece, PieceGenerator, UniformSource, hard_drop, is_valid_position, move_horizontal
from .rules import ResolutionResult, apply_gravity, resolve
from .core import (
    Command,
    GameConfig,
    GameSession,
    GameState,
    SessionStatus,
    new_game,
    parse_command,
    transition,
)
from .clock import TickDriver

__all__ = [
    "GameGrid",
    "Piece",
    "PieceGenerator",
    "UniformSource",
    "hard_drop",
    "is_valid_position",
    "move_horizontal",
    "ResolutionResult",
    "apply_gravity",
    "resolve",
    "Command",
    "GameConfig",
    "GameSession",
    "GameState",
    "SessionStatus",
    "new_game",
    "parse_command",
    "transition",
    "TickDriver",
]

from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tile_drop.game import is_valid_position

from .tile_drop_env import TileDropEnv


class ColumnDropActionWrapper(gym.Wrapper):
    """Replaces move/drop actions with Discrete(cols): pick a column, then hard drop.

    The piece slides toward the chosen column until blocked, so an unreachable
    column drops the piece at the closest reachable one. ``get_action_mask()``
    returns the columns reachable from the current position.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.unwrapped, TileDropEnv)
        self.cols = int(env.unwrapped.config.cols)
        self.action_space = spaces.Discrete(self.cols)

    def step(self, action):  # type: ignore[override]
        target = int(action)
        session = self.env.unwrapped.session
        while not session.game_over and session.state.current_piece.x != target:
            before = session.state
            if before.current_piece.x > target:
                after = session.move_left()
            else:
                after = session.move_right()
            if after is before:
                break
        return self.env.step(TileDropEnv.ACT_HARD_DROP)

    def get_action_mask(self) -> np.ndarray:
        state = self.env.unwrapped.session.state
        piece = state.current_piece
        mask = np.zeros((self.cols,), dtype=np.bool_)
        if state.game_over:
            return mask
        mask[piece.x] = True
        for direction in (-1, 1):
            probe = piece.moved(dx=direction)
            while is_valid_position(probe, state.grid):
                mask[probe.x] = True
                probe = probe.moved(dx=direction)
        return mask

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tile_drop.game import Command, GameConfig, GameSession, GameState


def color_for_value(v: int) -> Tuple[int, int, int]:
    """Warm ramp keyed on log2 of the tile; empty cells are dark."""
    if v <= 0:
        return (30, 30, 36)
    level = min(int(v).bit_length() - 1, 12)  # 2 -> 1, 4096 -> 12
    t = level / 12.0
    return (int(250 - 60 * t), int(235 - 175 * t), int(180 - 120 * t))


def grid_to_ansi(grid: np.ndarray) -> str:
    lines = []
    for row in grid:
        lines.append(" ".join(f"{int(v):>5}" if v else "    ." for v in row))
    return "\n".join(lines)


class TileDropEnv(gym.Env):
    """
    Agent-facing wrapper around ``GameSession``.

    Actions (4 total):
      0: Move Left
      1: Move Right
      2: Soft Drop (one row down, commits when blocked)
      3: Hard Drop

    Reward is the engine score gained by the step, plus ``invalid_action_penalty``
    when a move is rejected by the board.
    """

    metadata = {"render_modes": ["rgb_array", "ansi"], "render_fps": 4}

    ACT_MOVE_LEFT = 0
    ACT_MOVE_RIGHT = 1
    ACT_SOFT_DROP = 2
    ACT_HARD_DROP = 3

    ACTION_TO_COMMAND = {
        ACT_MOVE_LEFT: Command.MOVE_LEFT,
        ACT_MOVE_RIGHT: Command.MOVE_RIGHT,
        ACT_SOFT_DROP: Command.SOFT_DROP,
        ACT_HARD_DROP: Command.HARD_DROP,
    }

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        invalid_action_penalty: float = 0.0,
    ) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.session = GameSession(self.config)
        self.render_mode = render_mode
        self.invalid_action_penalty = float(invalid_action_penalty)

        rows, cols = self.config.rows, self.config.cols
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(rows, cols), dtype=np.int32),
                # Spawned values are 2 or 4
                "current_value": spaces.Discrete(5),
                "next_value": spaces.Discrete(5),
                "piece_x": spaces.Discrete(cols),
                "piece_y": spaces.Discrete(rows),
            }
        )
        self.action_space = spaces.Discrete(len(self.ACTION_TO_COMMAND))

        self._steps = 0

    # ---------- Helpers ----------
    def _get_obs(self) -> Dict[str, Any]:
        state = self.session.state
        piece = state.current_piece
        return {
            "grid": state.grid.clone_state().astype(np.int32),
            "current_value": int(piece.value),
            "next_value": int(state.next_piece.value),
            "piece_x": int(piece.x),
            "piece_y": int(min(max(piece.y, 0), self.config.rows - 1)),
        }

    def _get_info(self) -> Dict[str, Any]:
        state = self.session.state
        return {
            "score": state.score,
            "highest_tile": state.highest_tile,
            "status": state.status.value,
            "steps": self._steps,
        }

    # ---------- Gym API ----------
    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[dict] = None,
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        # np.random.Generator exposes random(), so it can feed the piece spawner directly
        self.session = GameSession(self.config, source=self.np_random)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        action = int(action)
        if action not in self.ACTION_TO_COMMAND:
            raise ValueError(f"Invalid action {action}; expected 0..{self.action_space.n - 1}")

        before: GameState = self.session.state
        after = self.session.dispatch(self.ACTION_TO_COMMAND[action])

        reward_components: Dict[str, float] = {"score": float(after.score - before.score)}
        if after is before:
            reward_components["invalid"] = self.invalid_action_penalty

        self._steps += 1
        terminated = bool(after.game_over)
        truncated = self._steps >= self.config.max_episode_steps

        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        info["engine_score_delta"] = after.score - before.score
        return self._get_obs(), reward, terminated, truncated, info

    def render(self):
        state = self.session.state
        grid = state.view()
        if self.render_mode == "rgb_array":
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color_for_value(int(grid[y, x]))
            return img
        if self.render_mode == "ansi":
            return f"{grid_to_ansi(grid)}\nScore: {state.score}  Next: {state.next_piece.value}"
        return None

    def close(self) -> None:
        pass

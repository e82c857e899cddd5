from __future__ import annotations

import argparse
from typing import Optional

import gymnasium as gym
import numpy as np

import tile_drop.env  # noqa: F401  ensure registration
from tile_drop.env.wrappers import ColumnDropActionWrapper


def build_env(column_drop: bool = False) -> gym.Env:
    env = gym.make("TileDrop-8x8-v0")
    if column_drop:
        env = ColumnDropActionWrapper(env)
    return env


def run_random(steps: int = 200, seed: Optional[int] = None, column_drop: bool = False) -> dict:
    env = build_env(column_drop)
    obs, info = env.reset(seed=seed)
    rng = np.random.default_rng(seed)
    total_reward = 0.0
    episodes = 0
    best_tile = 0
    for _ in range(steps):
        if column_drop:
            # Prefer reachable columns
            valid = np.flatnonzero(env.get_action_mask())
            action = int(rng.choice(valid)) if valid.size else int(rng.integers(env.action_space.n))
        else:
            action = int(rng.integers(env.action_space.n))
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        best_tile = max(best_tile, int(info["highest_tile"]))
        if terminated or truncated:
            episodes += 1
            obs, info = env.reset()
    env.close()
    return {"total_reward": total_reward, "episodes": episodes, "highest_tile": best_tile}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play tile-drop with a uniformly random agent")
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--column-drop", action="store_true",
                   help="Act on columns (move then hard drop) instead of single moves")
    return p


def main() -> None:
    args = build_parser().parse_args()
    result = run_random(args.steps, args.seed, args.column_drop)
    print(
        f"Random agent total reward: {result['total_reward']:.2f}  "
        f"episodes finished: {result['episodes']}  highest tile: {result['highest_tile']}"
    )


if __name__ == "__main__":  # pragma: no cover
    main()

"""Gymnasium environments for tile-drop."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Register default tile-drop environment (4 discrete actions)
register(
    id="TileDrop-8x8-v0",
    entry_point="tile_drop.env.tile_drop_env:TileDropEnv",
)

__all__ = ["TileDrop-8x8-v0"]

"""Gymnasium environments for the falling-block engine."""

from __future__ import annotations

from gymnasium.envs.registration import register

register(
    id="Tetris-v0",
    entry_point="tetris_engine.env.tetris_env:TetrisEnv",
)

__all__ = ["Tetris-v0"]

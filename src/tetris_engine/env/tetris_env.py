from __future__ import annotations

import random
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tetris_engine.game import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    Command,
    FrameQueue,
    GameConfig,
    TetrisEngine,
    TetrominoType,
)


class EnvAction(IntEnum):
    NOOP = 0
    LEFT = 1
    RIGHT = 2
    SOFT_DROP = 3
    ROTATE = 4
    HARD_DROP = 5


ACTION_TO_COMMAND: Dict[EnvAction, Command] = {
    EnvAction.LEFT: Command.MOVE_LEFT,
    EnvAction.RIGHT: Command.MOVE_RIGHT,
    EnvAction.SOFT_DROP: Command.SOFT_DROP,
    EnvAction.ROTATE: Command.ROTATE,
    EnvAction.HARD_DROP: Command.HARD_DROP,
}

RGB_CELL = 12


def _palette() -> np.ndarray:
    colors = np.zeros((len(TetrominoType) + 1, 3), dtype=np.uint8)
    colors[0] = (30, 30, 36)
    colors[TetrominoType.I] = (0, 240, 240)
    colors[TetrominoType.J] = (0, 0, 240)
    colors[TetrominoType.L] = (240, 160, 0)
    colors[TetrominoType.O] = (240, 240, 0)
    colors[TetrominoType.S] = (0, 240, 0)
    colors[TetrominoType.T] = (160, 0, 240)
    colors[TetrominoType.Z] = (240, 0, 0)
    return colors


class TetrisEnv(gym.Env):
    """Single-player environment over :class:`TetrisEngine`.

    Each step applies one input command, then advances a virtual clock by
    ``frame_ms`` so gravity runs through the same scheduler as interactive
    play. The reward is the engine's score delta.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 20}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 frame_ms: int = 50, max_episode_steps: int = 10000) -> None:
        super().__init__()
        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"unsupported render_mode {render_mode!r}")
        self.config = config or GameConfig()
        self.render_mode = render_mode
        self.frame_ms = int(frame_ms)
        self.max_episode_steps = int(max_episode_steps)

        n_types = len(TetrominoType)
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_types, high=n_types, shape=(BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8),
                "next_piece": spaces.Discrete(n_types + 1),
            }
        )
        self.action_space = spaces.Discrete(len(EnvAction))

        self.frames = FrameQueue()
        self.clock = 0
        self.engine = self._make_engine(self.config.random_seed)
        self._steps = 0

    def _make_engine(self, seed: Optional[int]) -> TetrisEngine:
        self.frames = FrameQueue()
        self.clock = 0
        return TetrisEngine(self.config, rng=random.Random(seed), frames=self.frames)

    def _get_obs(self) -> Dict[str, Any]:
        state = self.engine.state
        return {
            "board": state.board_with_piece().astype(np.int8),
            "next_piece": int(state.next_piece),
        }

    def _get_info(self) -> Dict[str, Any]:
        state = self.engine.state
        return {
            "score": state.score,
            "lines": state.lines,
            "level": state.level,
            "holes": state.grid.count_holes(),
            "max_height": state.grid.get_max_height(),
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is None:
            seed = int(self.np_random.integers(0, 2**31 - 1))
        self.engine.stop()
        self.engine = self._make_engine(seed)
        self.engine.start()
        # First frame only sets the gravity baseline
        self.frames.advance(self.clock)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        before = self.engine.state.score
        command = ACTION_TO_COMMAND.get(EnvAction(int(action)))
        if command is not None:
            self.engine.dispatch(command)
        self.clock += self.frame_ms
        self.frames.advance(self.clock)
        self._steps += 1

        state = self.engine.state
        reward = float(state.score - before)
        terminated = bool(state.game_over)
        truncated = not terminated and self._steps >= self.max_episode_steps
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        board = np.abs(self.engine.state.board_with_piece())
        img = _palette()[board]
        return np.repeat(np.repeat(img, RGB_CELL, axis=0), RGB_CELL, axis=1)

    def close(self) -> None:
        self.engine.stop()

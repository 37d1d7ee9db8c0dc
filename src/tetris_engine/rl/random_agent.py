from __future__ import annotations

import argparse
import logging
from typing import Optional

import gymnasium as gym

import tetris_engine.env  # noqa: F401


def run_random(steps: int = 500, seed: Optional[int] = None) -> float:
    env = gym.make("Tetris-v0")
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            print(f"Episode {episodes}: score {info['score']} lines {info['lines']} level {info['level']}")
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f}")
    return total_reward


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=500)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-level", default="WARNING")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper())
    run_random(steps=args.steps, seed=args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()

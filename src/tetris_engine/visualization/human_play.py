from __future__ import annotations

import argparse
import logging
import textwrap
from typing import Dict, List, Optional

import pygame

from tetris_engine.game import Command, FrameQueue, GameConfig, GameState, TetrisEngine, comment_for
from .renderer import Renderer


KEY_TO_COMMAND: Dict[int, Command] = {
    pygame.K_LEFT: Command.MOVE_LEFT,
    pygame.K_RIGHT: Command.MOVE_RIGHT,
    pygame.K_DOWN: Command.SOFT_DROP,
    pygame.K_UP: Command.ROTATE,
    pygame.K_SPACE: Command.HARD_DROP,
    pygame.K_p: Command.PAUSE,
    pygame.K_r: Command.RESTART,
}


def command_for_key(key: int, state: GameState) -> Optional[Command]:
    """Translate a key press; only restart gets through once the game is over."""
    command = KEY_TO_COMMAND.get(key)
    if state.game_over and command is not Command.RESTART:
        return None
    return command


def run(seed: Optional[int] = None, cell_size: int = 30) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        frames = FrameQueue()
        engine = TetrisEngine(GameConfig(random_seed=seed), frames=frames)
        renderer = Renderer(cell_size=cell_size)
        screen = pygame.display.set_mode(renderer.window_size)
        pygame.display.set_caption("Falling Blocks")

        comment: List[str] = []

        def on_game_over(state: GameState) -> None:
            if state.score > 0:
                comment[:] = textwrap.wrap(comment_for(state.score), width=28)

        def on_state_change(state: GameState) -> None:
            if not state.game_over:
                comment.clear()

        engine.subscribe(on_state_change=on_state_change, on_game_over=on_game_over)
        engine.start()

        running = True
        while running:
            # Input handling
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                        continue
                    command = command_for_key(event.key, engine.state)
                    if command is not None:
                        engine.dispatch(command)

            # Gravity
            frames.advance(pygame.time.get_ticks())

            renderer.draw(screen, engine.state, comment)
            clock.tick(60)
        engine.stop()
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play the falling-block game with the keyboard.")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=30)
    p.add_argument("--log-level", default="WARNING")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper())
    run(seed=args.seed, cell_size=args.cell_size)


if __name__ == "__main__":  # pragma: no cover
    main()

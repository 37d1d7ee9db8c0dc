from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .collision import can_fall as piece_can_fall
from .collision import collides, drop_distance, spawn, try_rotate
from .grid import GameGrid, clear_lines
from .pieces import TetrominoType
from .rules import ScoringRules
from .scheduler import FrameSource, GravityScheduler
from .state import GameState


logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]


class Command(Enum):
    MOVE_LEFT = "moveLeft"
    MOVE_RIGHT = "moveRight"
    SOFT_DROP = "softDrop"
    ROTATE = "rotate"
    HARD_DROP = "hardDrop"
    PAUSE = "pause"
    RESTART = "restart"


@dataclass
class GameConfig:
    random_seed: Optional[int] = None
    rules: ScoringRules = field(default_factory=ScoringRules)


class Subscription:
    """Handle returned by :meth:`TetrisEngine.subscribe`."""

    def __init__(self, engine: "TetrisEngine", on_state_change: Optional[StateListener],
                 on_game_over: Optional[StateListener]) -> None:
        self._engine = engine
        self.on_state_change = on_state_change
        self.on_game_over = on_game_over

    @property
    def active(self) -> bool:
        return self._engine is not None

    def cancel(self) -> None:
        if self._engine is None:
            return
        self._engine._subscriptions.remove(self)
        self._engine = None


class TetrisEngine:
    """Falling-block game state machine.

    The engine owns the only reference to the current :class:`GameState` and
    replaces it on every accepted command. Commands return the snapshot in
    effect afterwards; subscribers receive each new snapshot as it is
    published. When a frame source is given, the engine also owns a
    :class:`GravityScheduler` that is (re)started by :meth:`start`.

    A new engine holds a fresh game that no command has touched yet;
    :meth:`start` replaces it and begins scheduling gravity.
    """

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None,
                 frames: Optional[FrameSource] = None, state: Optional[GameState] = None) -> None:
        self.config = config or GameConfig()
        self.rules = self.config.rules
        self.rng = rng if rng is not None else random.Random(self.config.random_seed)
        self._subscriptions: List[Subscription] = []
        self.scheduler: Optional[GravityScheduler] = GravityScheduler(self, frames) if frames is not None else None
        # Resuming from a given snapshot is mainly for tooling and tests
        self._state = state if state is not None else self._new_game()

    @property
    def state(self) -> GameState:
        return self._state

    # ---------- Notifications ----------
    def subscribe(self, on_state_change: Optional[StateListener] = None,
                  on_game_over: Optional[StateListener] = None) -> Subscription:
        subscription = Subscription(self, on_state_change, on_game_over)
        self._subscriptions.append(subscription)
        return subscription

    def _publish(self, state: GameState) -> GameState:
        was_over = self._state.game_over
        self._state = state
        for sub in list(self._subscriptions):
            if sub.on_state_change is not None:
                sub.on_state_change(state)
        if state.game_over and not was_over:
            logger.info("Game over: score=%d lines=%d level=%d", state.score, state.lines, state.level)
            for sub in list(self._subscriptions):
                if sub.on_game_over is not None:
                    sub.on_game_over(state)
        return self._state

    # ---------- Lifecycle ----------
    def _random_type(self) -> TetrominoType:
        return self.rng.choice(list(TetrominoType))

    def _new_game(self) -> GameState:
        next_piece = self._random_type()
        first = self._random_type()
        grid = GameGrid.empty()
        return GameState(grid=grid, active_piece=spawn(grid, first), next_piece=next_piece)

    def start(self) -> GameState:
        state = self._publish(self._new_game())
        logger.info("Game started: first=%s next=%s", state.active_piece.kind.name, state.next_piece.name)
        if self.scheduler is not None:
            self.scheduler.restart()
        return state

    def restart(self) -> GameState:
        return self.start()

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()

    def toggle_pause(self) -> GameState:
        if self._state.game_over:
            return self._state
        return self._publish(self._state.evolve(is_paused=not self._state.is_paused))

    # ---------- Piece commands ----------
    def move(self, dx: int, dy: int) -> GameState:
        state = self._state
        if not state.accepts_input:
            return state
        piece = state.active_piece
        candidate = piece.position.offset(dx, dy)
        if collides(piece.shape, candidate, state.grid):
            return state
        return self._publish(state.evolve(active_piece=piece.moved(dx, dy)))

    def tick(self) -> GameState:
        return self.move(0, 1)

    def rotate(self) -> GameState:
        state = self._state
        if not state.accepts_input:
            return state
        rotated = try_rotate(state.active_piece, state.grid)
        if rotated is None:
            return state
        return self._publish(state.evolve(active_piece=rotated))

    def hard_drop(self) -> GameState:
        state = self._state
        if not state.accepts_input:
            return state
        distance = drop_distance(state.active_piece, state.grid)
        dropped = state.evolve(
            active_piece=state.active_piece.moved(0, distance),
            score=state.score + self.rules.hard_drop_score(distance),
        )
        if self._publish(dropped) is not dropped:
            # A listener already replaced the game
            return self._state
        return self.lock()

    def can_fall(self) -> bool:
        piece = self._state.active_piece
        return piece is not None and piece_can_fall(piece, self._state.grid)

    def lock(self) -> GameState:
        """Freeze the active piece, clear lines and spawn the next piece."""
        state = self._state
        piece = state.active_piece
        if not state.accepts_input:
            return state
        locked = state.grid.with_locked(piece.cells(), piece.kind)
        cleared = clear_lines(locked)
        lines = state.lines + cleared.lines_cleared
        gained = self.rules.score_for_lines(cleared.lines_cleared, state.level)
        next_active = spawn(cleared.grid, state.next_piece)
        logger.debug("Locked %s at (%d, %d), cleared %d line(s)",
                     piece.kind.name, piece.position.x, piece.position.y, cleared.lines_cleared)
        return self._publish(state.evolve(
            grid=cleared.grid,
            active_piece=next_active,
            next_piece=self._random_type(),
            score=state.score + gained,
            lines=lines,
            level=self.rules.level_for_lines(lines),
            game_over=next_active is None,
        ))

    def gravity_interval(self) -> int:
        return self.rules.gravity_interval(self._state.level)

    # ---------- Command set ----------
    def dispatch(self, command) -> GameState:
        """Apply one command from the fixed input set.

        Accepts a :class:`Command` or its string value (``"moveLeft"``...);
        anything else is ignored.
        """
        if isinstance(command, str):
            command = _COMMANDS_BY_NAME.get(command, command)
        if command == Command.MOVE_LEFT:
            return self.move(-1, 0)
        if command == Command.MOVE_RIGHT:
            return self.move(1, 0)
        if command == Command.SOFT_DROP:
            return self.move(0, 1)
        if command == Command.ROTATE:
            return self.rotate()
        if command == Command.HARD_DROP:
            return self.hard_drop()
        if command == Command.PAUSE:
            return self.toggle_pause()
        if command == Command.RESTART:
            return self.restart()
        logger.debug("Ignoring unknown command %r", command)
        return self._state


_COMMANDS_BY_NAME = {command.value: command for command in Command}

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .grid import GameGrid
from .pieces import Piece, TetrominoType


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of one game.

    ``active_piece`` is None exactly when ``game_over`` is set, and
    ``level`` always equals ``lines // 10 + 1``.
    """
    grid: GameGrid
    active_piece: Optional[Piece]
    next_piece: TetrominoType
    score: int = 0
    level: int = 1
    lines: int = 0
    game_over: bool = False
    is_paused: bool = False

    @property
    def accepts_input(self) -> bool:
        return not self.game_over and not self.is_paused and self.active_piece is not None

    def evolve(self, **changes) -> "GameState":
        return replace(self, **changes)

    def board_with_piece(self):
        """Grid values with the active piece overlaid as negative type values."""
        board = self.grid.to_array()
        if self.active_piece is not None:
            value = -int(self.active_piece.kind)
            for x, y in self.active_piece.cells():
                if self.grid.is_inside(x, y):
                    board[y, x] = value
        return board

"""Game module for the falling-block engine.

Exports the core game engine and supporting classes:
- GameGrid: Fixed 20x10 board and line clearing
- Piece: Tetromino piece with clockwise rotation
- TetrominoType: Enum of available piece types
- ScoringRules: Score, level and gravity tables
- GameState: Immutable snapshot handed to observers
- TetrisEngine: Command set and state machine
- GravityScheduler: Timed gravity over a frame source
"""

from .grid import BOARD_HEIGHT, BOARD_WIDTH, Cell, GameGrid, clear_lines
from .pieces import Piece, Position, TetrominoType, rotate
from .collision import WALL_KICK_OFFSETS, collides, spawn
from .rules import ScoringRules
from .state import GameState
from .scheduler import FrameQueue, FrameSource, GravityScheduler, SchedulerState
from .core import Command, GameConfig, Subscription, TetrisEngine
from .commentary import bucket_for, comment_for

__all__ = [
    "BOARD_HEIGHT",
    "BOARD_WIDTH",
    "Cell",
    "GameGrid",
    "clear_lines",
    "Piece",
    "Position",
    "TetrominoType",
    "rotate",
    "WALL_KICK_OFFSETS",
    "collides",
    "spawn",
    "ScoringRules",
    "GameState",
    "FrameQueue",
    "FrameSource",
    "GravityScheduler",
    "SchedulerState",
    "Command",
    "GameConfig",
    "Subscription",
    "TetrisEngine",
    "bucket_for",
    "comment_for",
]

"""Placement legality: collision, spawning and wall-kicked rotation."""

from __future__ import annotations

from typing import Optional

from .grid import BOARD_HEIGHT, BOARD_WIDTH, GameGrid
from .pieces import BASE_SHAPES, Piece, Position, Shape, TetrominoType, rotate


# Horizontal kicks tried in order after a rotation; y never changes.
WALL_KICK_OFFSETS = (0, 1, -1, 2, -2)

SPAWN_Y = -1


def collides(shape: Shape, position: Position, grid: GameGrid) -> bool:
    """Return True if ``shape`` at ``position`` is not a legal placement.

    Rows above the board only bound-check on x; they never touch grid
    contents.
    """
    h, w = shape.shape
    for dy in range(h):
        for dx in range(w):
            if not shape[dy, dx]:
                continue
            x = position.x + dx
            y = position.y + dy
            if x < 0 or x >= BOARD_WIDTH or y >= BOARD_HEIGHT:
                return True
            if y >= 0 and grid.is_locked(x, y):
                return True
    return False


def can_fall(piece: Piece, grid: GameGrid) -> bool:
    return not collides(piece.shape, piece.position.offset(0, 1), grid)


def spawn(grid: GameGrid, kind: TetrominoType) -> Optional[Piece]:
    """Materialize ``kind`` at its spawn point, or None if the board is topped out.

    The piece appears at y=-1 but legality is checked at y=0.
    """
    shape = BASE_SHAPES[kind]
    width = shape.shape[1]
    position = Position(BOARD_WIDTH // 2 - width // 2, SPAWN_Y)
    if collides(shape, Position(position.x, 0), grid):
        return None
    return Piece(kind, shape, position)


def try_rotate(piece: Piece, grid: GameGrid) -> Optional[Piece]:
    rotated = rotate(piece.shape)
    for dx in WALL_KICK_OFFSETS:
        candidate = piece.position.offset(dx, 0)
        if not collides(rotated, candidate, grid):
            return piece.with_shape(rotated, candidate)
    return None


def drop_distance(piece: Piece, grid: GameGrid) -> int:
    """Rows the piece can fall before it would collide."""
    distance = 0
    while not collides(piece.shape, piece.position.offset(0, distance + 1), grid):
        distance += 1
    return distance

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    J = 2
    L = 3
    O = 4
    S = 5
    T = 6
    Z = 7


Shape = np.ndarray


def _frozen(rows) -> Shape:
    shape = np.array(rows, dtype=np.int8)
    shape.flags.writeable = False
    return shape


# Square matrices so clockwise rotation keeps the piece inside its box
BASE_SHAPES = {
    TetrominoType.I: _frozen([[0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0]]),
    TetrominoType.J: _frozen([[1, 0, 0], [1, 1, 1], [0, 0, 0]]),
    TetrominoType.L: _frozen([[0, 0, 1], [1, 1, 1], [0, 0, 0]]),
    TetrominoType.O: _frozen([[1, 1], [1, 1]]),
    TetrominoType.S: _frozen([[0, 1, 1], [1, 1, 0], [0, 0, 0]]),
    TetrominoType.T: _frozen([[0, 1, 0], [1, 1, 1], [0, 0, 0]]),
    TetrominoType.Z: _frozen([[1, 1, 0], [0, 1, 1], [0, 0, 0]]),
}


def rotate(shape: Shape) -> Shape:
    """Rotate a square shape 90 degrees clockwise.

    ``rotated[i][j] == shape[n - 1 - j][i]``.
    """
    h, w = shape.shape
    if h != w:
        raise ValueError(f"shape must be square, got {h}x{w}")
    return _frozen(np.rot90(shape, 1, axes=(1, 0)))


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True, eq=False)
class Piece:
    kind: TetrominoType
    shape: Shape = field(repr=False)
    position: Position

    def moved(self, dx: int, dy: int) -> "Piece":
        return Piece(self.kind, self.shape, self.position.offset(dx, dy))

    def with_shape(self, shape: Shape, position: Position) -> "Piece":
        return Piece(self.kind, shape, position)

    def cells(self) -> List[Tuple[int, int]]:
        h, w = self.shape.shape
        cells: List[Tuple[int, int]] = []
        for dy in range(h):
            for dx in range(w):
                if self.shape[dy, dx]:
                    cells.append((self.position.x + dx, self.position.y + dy))
        return cells

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.position == other.position
            and np.array_equal(self.shape, other.shape)
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.position, self.shape.tobytes()))

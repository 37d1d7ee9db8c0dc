from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .pieces import TetrominoType


BOARD_WIDTH = 10
BOARD_HEIGHT = 20

Coordinate = Tuple[int, int]


@dataclass(frozen=True)
class Cell:
    type: Optional[TetrominoType]
    locked: bool


EMPTY_CELL = Cell(type=None, locked=False)


@dataclass(frozen=True)
class LineClearResult:
    grid: "GameGrid"
    lines_cleared: int


class GameGrid:
    """Fixed 20x10 board of locked terrain.

    Cells are stored as int8: 0 for an empty cell and the tetromino value
    for a locked one, so a cell is locked iff it holds a type. The backing
    array is read-only; locking and clearing return a new grid.
    """

    def __init__(self, cells: Optional[np.ndarray] = None) -> None:
        if cells is None:
            cells = np.zeros((BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8)
        else:
            cells = np.array(cells, dtype=np.int8)
        if cells.shape != (BOARD_HEIGHT, BOARD_WIDTH):
            raise ValueError(f"grid must be {BOARD_HEIGHT}x{BOARD_WIDTH}, got shape {cells.shape}")
        cells.flags.writeable = False
        self._cells = cells

    @classmethod
    def empty(cls) -> "GameGrid":
        return cls()

    @classmethod
    def from_rows(cls, rows: Sequence[str], fill: TetrominoType = TetrominoType.I) -> "GameGrid":
        """Build a grid from text rows aligned to the bottom of the board.

        Each row has BOARD_WIDTH characters: ``.`` is empty, a tetromino
        letter locks a cell of that type and any other mark locks ``fill``.
        Rows not given at the top are empty.
        """
        if len(rows) > BOARD_HEIGHT:
            raise ValueError(f"at most {BOARD_HEIGHT} rows, got {len(rows)}")
        cells = np.zeros((BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8)
        offset = BOARD_HEIGHT - len(rows)
        for dy, row in enumerate(rows):
            if len(row) != BOARD_WIDTH:
                raise ValueError(f"row {dy} must have {BOARD_WIDTH} cells, got {len(row)}")
            for x, ch in enumerate(row):
                if ch == ".":
                    continue
                kind = TetrominoType.__members__.get(ch, fill)
                cells[offset + dy, x] = int(kind)
        return cls(cells)

    @property
    def width(self) -> int:
        return BOARD_WIDTH

    @property
    def height(self) -> int:
        return BOARD_HEIGHT

    @property
    def cells(self) -> np.ndarray:
        return self._cells

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < BOARD_WIDTH and 0 <= y < BOARD_HEIGHT

    def is_locked(self, x: int, y: int) -> bool:
        return bool(self._cells[y, x] != 0)

    def cell(self, x: int, y: int) -> Cell:
        value = int(self._cells[y, x])
        if value == 0:
            return EMPTY_CELL
        return Cell(type=TetrominoType(value), locked=True)

    def with_locked(self, cells: Iterable[Coordinate], kind: TetrominoType) -> "GameGrid":
        """Return a new grid with ``cells`` locked as ``kind``.

        Cells still above the board (negative rows) are dropped.
        """
        data = self._cells.copy()
        for x, y in cells:
            if y >= 0:
                data[y, x] = int(kind)
        return GameGrid(data)

    def full_rows(self) -> np.ndarray:
        return np.where(np.all(self._cells != 0, axis=1))[0]

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self._cells != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        return BOARD_HEIGHT - int(non_empty_rows[0])

    def count_holes(self) -> int:
        holes = 0
        for x in range(BOARD_WIDTH):
            seen_block = False
            for cell in self._cells[:, x]:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def to_array(self) -> np.ndarray:
        return self._cells.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameGrid):
            return NotImplemented
        return bool(np.array_equal(self._cells, other._cells))

    def __hash__(self) -> int:
        return hash(self._cells.tobytes())

    def __repr__(self) -> str:
        return f"GameGrid(locked={int(np.count_nonzero(self._cells))})"


def clear_lines(grid: GameGrid) -> LineClearResult:
    """Drop every full row and pad the top with empty rows."""
    full_rows = grid.full_rows()
    if full_rows.size == 0:
        return LineClearResult(grid=grid, lines_cleared=0)
    num = int(full_rows.size)
    kept = np.delete(grid.cells, full_rows, axis=0)
    new_rows = np.zeros((num, BOARD_WIDTH), dtype=np.int8)
    return LineClearResult(grid=GameGrid(np.vstack((new_rows, kept))), lines_cleared=num)

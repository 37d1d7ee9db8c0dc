import unittest

import numpy as np

from tetris_engine.game import Piece, Position, TetrominoType, rotate
from tetris_engine.game.pieces import BASE_SHAPES


class TestPieces(unittest.TestCase):
    def test_given_each_type_when_reading_base_shape_then_square_and_four_cells(self):
        for kind in TetrominoType:
            shape = BASE_SHAPES[kind]
            h, w = shape.shape
            self.assertEqual(h, w, kind.name)
            self.assertIn(h, (2, 3, 4))
            self.assertEqual(int(shape.sum()), 4, kind.name)

    def test_given_t_shape_when_rotating_then_clockwise(self):
        rotated = rotate(BASE_SHAPES[TetrominoType.T])
        np.testing.assert_array_equal(rotated, [[0, 1, 0], [0, 1, 1], [0, 1, 0]])

    def test_given_any_shape_when_rotating_then_index_formula_holds(self):
        for kind in TetrominoType:
            shape = BASE_SHAPES[kind]
            n = shape.shape[0]
            rotated = rotate(shape)
            for i in range(n):
                for j in range(n):
                    self.assertEqual(rotated[i, j], shape[n - 1 - j, i])

    def test_given_any_shape_when_rotating_four_times_then_shape_unchanged(self):
        for kind in TetrominoType:
            shape = BASE_SHAPES[kind]
            turned = shape
            for _ in range(4):
                turned = rotate(turned)
            np.testing.assert_array_equal(turned, shape)

    def test_given_non_square_shape_when_rotating_then_value_error(self):
        with self.assertRaises(ValueError):
            rotate(np.array([[1, 1, 1, 1]], dtype=np.int8))

    def test_given_piece_when_listing_cells_then_offset_by_position(self):
        piece = Piece(TetrominoType.O, BASE_SHAPES[TetrominoType.O], Position(4, -1))
        self.assertEqual(sorted(piece.cells()), [(4, -1), (4, 0), (5, -1), (5, 0)])
        moved = piece.moved(1, 2)
        self.assertEqual(moved.position, Position(5, 1))
        self.assertEqual(piece.position, Position(4, -1))

    def test_given_equal_fields_when_comparing_pieces_then_equal_by_value(self):
        a = Piece(TetrominoType.S, rotate(BASE_SHAPES[TetrominoType.S]), Position(1, 2))
        b = Piece(TetrominoType.S, rotate(BASE_SHAPES[TetrominoType.S]), Position(1, 2))
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertNotEqual(a, b.moved(0, 1))


if __name__ == "__main__":
    unittest.main()

import dataclasses
import random
import unittest

import numpy as np

from tetris_engine.game import (
    BOARD_HEIGHT,
    Cell,
    Command,
    GameConfig,
    GameGrid,
    GameState,
    Position,
    TetrisEngine,
    TetrominoType,
    rotate,
    spawn,
)
from tetris_engine.game.pieces import BASE_SHAPES, Piece


def make_engine(grid=None, piece=None, next_piece=TetrominoType.T, **fields):
    if grid is None:
        grid = GameGrid.empty()
    if piece is None:
        piece = spawn(grid, TetrominoType.O)
    state = GameState(grid=grid, active_piece=piece, next_piece=next_piece, **fields)
    return TetrisEngine(rng=random.Random(0), state=state)


def record(engine):
    changes, overs = [], []
    engine.subscribe(on_state_change=changes.append, on_game_over=overs.append)
    return changes, overs


class TestMovement(unittest.TestCase):
    def test_given_o_on_empty_board_when_moving_down_twice_then_illegal_jump_is_noop(self):
        engine = make_engine()
        self.assertEqual(engine.state.active_piece.position, Position(4, -1))
        engine.move(0, 1)
        after_two = engine.move(0, 1)
        self.assertEqual(after_two.active_piece.position, Position(4, 1))
        unchanged = engine.move(0, 20)
        self.assertIs(unchanged, after_two)
        self.assertEqual(engine.state.active_piece.position.y, 1)

    def test_given_piece_at_wall_when_moving_into_it_then_no_notification(self):
        engine = make_engine(piece=Piece(TetrominoType.O, BASE_SHAPES[TetrominoType.O], Position(0, 5)))
        changes, _ = record(engine)
        engine.move(-1, 0)
        self.assertEqual(changes, [])
        engine.move(1, 0)
        self.assertEqual(len(changes), 1)
        self.assertEqual(changes[0].active_piece.position, Position(1, 5))

    def test_given_piece_when_ticking_then_same_as_moving_down(self):
        engine = make_engine()
        state = engine.tick()
        self.assertEqual(state.active_piece.position, Position(4, 0))

    def test_given_piece_on_floor_when_ticking_then_noop(self):
        engine = make_engine(piece=Piece(TetrominoType.O, BASE_SHAPES[TetrominoType.O], Position(4, 18)))
        before = engine.state
        self.assertFalse(engine.can_fall())
        self.assertIs(engine.tick(), before)


class TestRotation(unittest.TestCase):
    def test_given_obstacles_when_rotating_then_kicked_two_columns_right(self):
        grid = GameGrid.from_rows(["...XXX...."] + [".........."] * 6)
        engine = make_engine(grid=grid, piece=Piece(TetrominoType.I, BASE_SHAPES[TetrominoType.I], Position(2, 10)))
        state = engine.rotate()
        self.assertEqual(state.active_piece.position, Position(4, 10))
        np.testing.assert_array_equal(state.active_piece.shape, rotate(BASE_SHAPES[TetrominoType.I]))

    def test_given_no_room_when_rotating_then_state_unchanged(self):
        grid = GameGrid.from_rows(["XX.XXXXXXX"] * BOARD_HEIGHT)
        vertical = rotate(BASE_SHAPES[TetrominoType.I])
        engine = make_engine(grid=grid, piece=Piece(TetrominoType.I, vertical, Position(0, 10)))
        changes, _ = record(engine)
        before = engine.state
        self.assertIs(engine.rotate(), before)
        self.assertEqual(changes, [])


class TestLocking(unittest.TestCase):
    def test_given_one_gap_in_bottom_row_when_piece_fills_it_then_one_line_at_previous_level(self):
        grid = GameGrid.from_rows(["XXXXXXXX.."])
        piece = Piece(TetrominoType.O, BASE_SHAPES[TetrominoType.O], Position(8, 18))
        engine = make_engine(grid=grid, piece=piece, score=50, lines=19, level=2)
        state = engine.lock()
        self.assertEqual(state.score, 50 + 100 * 2)
        self.assertEqual(state.lines, 20)
        self.assertEqual(state.level, 3)
        # Top half of the O dropped into the bottom row; the top row is new and empty
        self.assertEqual(state.grid.cell(8, 19), Cell(type=TetrominoType.O, locked=True))
        self.assertEqual(state.grid.cell(0, 19), Cell(type=None, locked=False))
        self.assertEqual(int(np.count_nonzero(state.grid.cells)), 2)
        self.assertFalse(np.any(state.grid.cells[0]))

    def test_given_four_full_rows_when_locking_i_then_tetris_score(self):
        grid = GameGrid.from_rows([".XXXXXXXXX"] * 4)
        vertical = rotate(BASE_SHAPES[TetrominoType.I])
        engine = make_engine(grid=grid, piece=Piece(TetrominoType.I, vertical, Position(-2, 16)), lines=3)
        state = engine.lock()
        self.assertEqual(state.score, 800)
        self.assertEqual(state.lines, 7)
        self.assertEqual(state.level, 1)
        self.assertEqual(int(np.count_nonzero(state.grid.cells)), 0)

    def test_given_lock_when_spawning_then_previous_next_piece_becomes_active(self):
        engine = make_engine(piece=Piece(TetrominoType.O, BASE_SHAPES[TetrominoType.O], Position(0, 18)),
                             next_piece=TetrominoType.S)
        state = engine.lock()
        self.assertEqual(state.active_piece.kind, TetrominoType.S)
        self.assertEqual(state.active_piece.position, Position(4, -1))
        self.assertIn(state.next_piece, list(TetrominoType))

    def test_given_piece_partly_above_board_when_locking_then_hidden_cells_dropped(self):
        engine = make_engine(piece=Piece(TetrominoType.O, BASE_SHAPES[TetrominoType.O], Position(0, -1)))
        state = engine.lock()
        self.assertEqual(int(np.count_nonzero(state.grid.cells)), 2)
        self.assertTrue(state.grid.is_locked(0, 0))
        self.assertTrue(state.grid.is_locked(1, 0))

    def test_given_lock_when_grid_replaced_then_previous_snapshot_untouched(self):
        engine = make_engine(piece=Piece(TetrominoType.O, BASE_SHAPES[TetrominoType.O], Position(0, 18)))
        before = engine.state
        after = engine.lock()
        self.assertIsNot(after.grid, before.grid)
        self.assertEqual(int(np.count_nonzero(before.grid.cells)), 0)


class TestHardDrop(unittest.TestCase):
    def test_given_empty_board_when_hard_dropping_then_two_points_per_row_and_locked(self):
        engine = make_engine()
        changes, _ = record(engine)
        state = engine.hard_drop()
        self.assertEqual(state.score, 19 * 2)
        self.assertEqual(len(changes), 2)
        self.assertEqual(changes[0].active_piece.position, Position(4, 18))
        for x, y in [(4, 18), (5, 18), (4, 19), (5, 19)]:
            self.assertEqual(state.grid.cell(x, y).type, TetrominoType.O)
        self.assertEqual(state.active_piece.kind, TetrominoType.T)

    def test_given_gap_under_spawn_when_hard_dropping_then_drop_and_clear_points_added(self):
        engine = make_engine(grid=GameGrid.from_rows(["XXXX..XXXX"]))
        state = engine.hard_drop()
        self.assertEqual(state.score, 19 * 2 + 100)
        self.assertEqual(state.lines, 1)


class TestGameOver(unittest.TestCase):
    def _topped_out_engine(self):
        grid = GameGrid.from_rows(["....X....."] * (BOARD_HEIGHT - 1))
        piece = Piece(TetrominoType.O, BASE_SHAPES[TetrominoType.O], Position(0, 18))
        return make_engine(grid=grid, piece=piece, next_piece=TetrominoType.O)

    def test_given_stack_at_spawn_row_when_locking_then_game_over_fires_once(self):
        engine = self._topped_out_engine()
        changes, overs = record(engine)
        state = engine.lock()
        self.assertIsNone(spawn(state.grid, TetrominoType.O))
        self.assertTrue(state.game_over)
        self.assertIsNone(state.active_piece)
        self.assertEqual(overs, [state])
        self.assertIs(changes[-1], state)

        for command in (engine.tick, engine.lock, engine.rotate, engine.hard_drop, engine.toggle_pause):
            self.assertIs(command(), state)
        self.assertIs(engine.move(1, 0), state)
        self.assertEqual(len(overs), 1)

    def test_given_restart_from_game_over_listener_when_locking_then_current_game_returned(self):
        engine = self._topped_out_engine()
        engine.subscribe(on_game_over=lambda state: engine.restart())
        state = engine.lock()
        self.assertIs(state, engine.state)
        self.assertFalse(state.game_over)

    def test_given_restart_from_game_over_listener_when_hard_dropping_then_current_game_returned(self):
        engine = self._topped_out_engine()
        engine.subscribe(on_game_over=lambda state: engine.restart())
        state = engine.hard_drop()
        self.assertIs(state, engine.state)
        self.assertFalse(state.game_over)
        self.assertEqual(state.score, 0)

    def test_given_game_over_when_restarting_then_fresh_game(self):
        engine = self._topped_out_engine()
        engine.lock()
        state = engine.restart()
        self.assertFalse(state.game_over)
        self.assertFalse(state.is_paused)
        self.assertIsNotNone(state.active_piece)
        self.assertEqual((state.score, state.lines, state.level), (0, 0, 1))
        self.assertEqual(int(np.count_nonzero(state.grid.cells)), 0)


class TestPause(unittest.TestCase):
    def test_given_paused_game_when_commanding_then_noop_until_resumed(self):
        engine = make_engine()
        paused = engine.toggle_pause()
        self.assertTrue(paused.is_paused)
        self.assertIs(engine.move(1, 0), paused)
        self.assertIs(engine.rotate(), paused)
        self.assertIs(engine.hard_drop(), paused)
        self.assertIs(engine.tick(), paused)
        resumed = engine.toggle_pause()
        self.assertFalse(resumed.is_paused)
        self.assertEqual(engine.move(1, 0).active_piece.position, Position(5, -1))

    def test_given_paused_game_when_locking_then_grid_untouched(self):
        piece = Piece(TetrominoType.O, BASE_SHAPES[TetrominoType.O], Position(0, 18))
        engine = make_engine(piece=piece)
        paused = engine.toggle_pause()
        self.assertIs(engine.lock(), paused)
        self.assertFalse(engine.state.grid.is_locked(0, 19))
        self.assertEqual(engine.state.active_piece, piece)


class TestCommandsAndNotifications(unittest.TestCase):
    def test_given_string_commands_when_dispatching_then_mapped_to_command_set(self):
        engine = make_engine()
        self.assertEqual(engine.dispatch("moveLeft").active_piece.position, Position(3, -1))
        self.assertEqual(engine.dispatch(Command.MOVE_RIGHT).active_piece.position, Position(4, -1))
        self.assertEqual(engine.dispatch(Command.SOFT_DROP).active_piece.position, Position(4, 0))
        self.assertTrue(engine.dispatch("pause").is_paused)
        self.assertFalse(engine.dispatch(Command.PAUSE).is_paused)

    def test_given_unknown_command_when_dispatching_then_ignored(self):
        engine = make_engine()
        before = engine.state
        self.assertIs(engine.dispatch("jump"), before)
        self.assertIs(engine.dispatch(None), before)
        self.assertIs(engine.dispatch(42), before)

    def test_given_restart_command_when_dispatching_then_new_game(self):
        engine = make_engine(score=900, lines=5)
        state = engine.dispatch(Command.RESTART)
        self.assertEqual(state.score, 0)
        self.assertEqual(state.lines, 0)

    def test_given_cancelled_subscription_when_mutating_then_not_notified(self):
        engine = make_engine()
        changes, _ = record(engine)
        extra = []
        sub = engine.subscribe(on_state_change=extra.append)
        engine.move(1, 0)
        sub.cancel()
        sub.cancel()
        engine.move(1, 0)
        self.assertFalse(sub.active)
        self.assertEqual(len(extra), 1)
        self.assertEqual(len(changes), 2)

    def test_given_snapshot_when_assigning_then_frozen(self):
        engine = make_engine()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            engine.state.score = 10
        with self.assertRaises(ValueError):
            engine.state.active_piece.shape[0, 0] = 0

    def test_given_start_when_called_then_published_fresh_game(self):
        engine = TetrisEngine(GameConfig(random_seed=3))
        changes, _ = record(engine)
        state = engine.start()
        self.assertEqual(changes, [state])
        self.assertIsNone(engine.scheduler)
        self.assertEqual(state.active_piece.position.y, -1)

    def test_given_same_seed_when_starting_then_same_pieces(self):
        a = TetrisEngine(GameConfig(random_seed=42)).start()
        b = TetrisEngine(GameConfig(random_seed=42)).start()
        self.assertEqual(a.active_piece.kind, b.active_piece.kind)
        self.assertEqual(a.next_piece, b.next_piece)


class TestInvariants(unittest.TestCase):
    def test_given_random_play_when_applying_commands_then_invariants_hold(self):
        for seed in range(5):
            rng = random.Random(seed)
            engine = TetrisEngine(rng=random.Random(seed))
            engine.start()

            def gravity():
                return engine.tick() if engine.can_fall() else engine.lock()

            actions = [
                lambda: engine.move(-1, 0),
                lambda: engine.move(1, 0),
                lambda: engine.move(0, 1),
                engine.rotate,
                engine.hard_drop,
                gravity,
                gravity,
                gravity,
            ]
            previous = engine.state.score
            for _ in range(800):
                state = rng.choice(actions)()
                self.assertIs(state, engine.state)
                self.assertGreaterEqual(state.score, previous)
                self.assertEqual(state.level, state.lines // 10 + 1)
                self.assertEqual(state.active_piece is None, state.game_over)
                self.assertEqual(state.grid.cells.shape, (20, 10))
                previous = state.score
                if state.game_over:
                    break


if __name__ == "__main__":
    unittest.main()

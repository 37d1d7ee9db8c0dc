from __future__ import annotations

from typing import List, Optional, Tuple

import pygame

from tetris_engine.game import BOARD_HEIGHT, BOARD_WIDTH, GameState, TetrominoType
from tetris_engine.game.pieces import BASE_SHAPES


def _color_for_value(v: int) -> Tuple[int, int, int]:
    palette = {
        0: (20, 20, 26),
        int(TetrominoType.I): (0, 240, 240),
        int(TetrominoType.J): (0, 0, 240),
        int(TetrominoType.L): (240, 160, 0),
        int(TetrominoType.O): (240, 240, 0),
        int(TetrominoType.S): (0, 240, 0),
        int(TetrominoType.T): (160, 0, 240),
        int(TetrominoType.Z): (240, 0, 0),
    }
    return palette.get(abs(v), (200, 200, 200))


class Renderer:
    """Draws :class:`GameState` snapshots; never touches the engine."""

    def __init__(self, cell_size: int = 30, margin: int = 20, panel_width: int = 180) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None

    @property
    def window_size(self) -> Tuple[int, int]:
        width = self.margin * 3 + BOARD_WIDTH * self.cell_size + self.panel_width
        height = self.margin * 2 + BOARD_HEIGHT * self.cell_size
        return width, height

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None or self._big_font is None:
            self._font = pygame.font.SysFont(None, 26)
            self._big_font = pygame.font.SysFont(None, 44)
        return self._font, self._big_font

    def _grid_surface(self, state: GameState) -> pygame.Surface:
        board = state.board_with_piece()
        surf = pygame.Surface((BOARD_WIDTH * self.cell_size, BOARD_HEIGHT * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(BOARD_HEIGHT):
            for x in range(BOARD_WIDTH):
                rect = pygame.Rect(x * self.cell_size, y * self.cell_size, self.cell_size - 1, self.cell_size - 1)
                pygame.draw.rect(surf, _color_for_value(int(board[y, x])), rect)
        return surf

    def _draw_panel(self, screen: pygame.Surface, state: GameState) -> None:
        font, _ = self._fonts()
        x0 = self.margin * 2 + BOARD_WIDTH * self.cell_size
        y0 = self.margin
        screen.blit(font.render("Next", True, (230, 230, 230)), (x0, y0))
        preview = self.cell_size * 3 // 4
        shape = BASE_SHAPES[state.next_piece]
        for py in range(shape.shape[0]):
            for px in range(shape.shape[1]):
                if shape[py, px]:
                    rect = pygame.Rect(x0 + px * preview, y0 + 30 + py * preview, preview - 1, preview - 1)
                    pygame.draw.rect(screen, _color_for_value(int(state.next_piece)), rect)
        stats = [
            f"Score: {state.score}",
            f"Level: {state.level}",
            f"Lines: {state.lines}",
            "",
            "Arrows: move/rotate",
            "Space: hard drop",
            "P: pause  R: restart",
        ]
        y_text = y0 + 30 + preview * 4 + 20
        for i, txt in enumerate(stats):
            screen.blit(font.render(txt, True, (230, 230, 230)), (x0, y_text + i * 24))

    def _draw_overlay(self, screen: pygame.Surface, state: GameState, message_lines: List[str]) -> None:
        font, big_font = self._fonts()
        if state.game_over:
            title = "GAME OVER"
            lines = [f"Final score: {state.score}"] + message_lines
        elif state.is_paused:
            title = "PAUSED"
            lines = []
        else:
            return
        board_w = BOARD_WIDTH * self.cell_size
        board_h = BOARD_HEIGHT * self.cell_size
        shade = pygame.Surface((board_w, board_h), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 170))
        screen.blit(shade, (self.margin, self.margin))
        center_x = self.margin + board_w // 2
        y = self.margin + board_h // 3
        text = big_font.render(title, True, (255, 255, 255))
        screen.blit(text, text.get_rect(center=(center_x, y)))
        for i, line in enumerate(lines):
            img = font.render(line, True, (230, 230, 230))
            screen.blit(img, img.get_rect(center=(center_x, y + 50 + i * 26)))

    def draw(self, screen: pygame.Surface, state: GameState, message_lines: Optional[List[str]] = None) -> None:
        screen.fill((10, 10, 14))
        screen.blit(self._grid_surface(state), (self.margin, self.margin))
        self._draw_panel(screen, state)
        self._draw_overlay(screen, state, message_lines or [])
        pygame.display.flip()

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import pygame

from falling_blocks.game import AppState, BoardPicture, color_for_value


def _color_for_value(v: int, active: bool = False) -> Tuple[int, int, int]:
    r, g, b = color_for_value(v)
    if active:
        # Lighten the falling piece so it stands out from locked cells.
        return (min(255, r + 15), min(255, g + 15), min(255, b + 15))
    return (r, g, b)


@dataclass
class Renderer(BoardPicture):
    """Render sink that draws its recorded picture of the board with pygame."""

    width: int = 10
    height: int = 20
    cell_size: int = 30
    margin: int = 20

    def window_size(self) -> Tuple[int, int]:
        side_panel_w = 6 * self.cell_size
        return (
            self.margin * 3 + self.width * self.cell_size + side_panel_w,
            self.margin * 2 + self.height * self.cell_size,
        )

    def _cell_rect(self, x: int, y: int) -> pygame.Rect:
        # Board row 0 is at the bottom of the window.
        top = self.margin + (self.height - 1 - y) * self.cell_size
        left = self.margin + x * self.cell_size
        return pygame.Rect(left, top, self.cell_size - 1, self.cell_size - 1)

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        screen.fill((10, 10, 14))
        for y in range(self.height):
            for x in range(self.width):
                pygame.draw.rect(screen, _color_for_value(0), self._cell_rect(x, y))
        for pos, update in self.cells.items():
            if 0 <= pos.x < self.width and 0 <= pos.y < self.height:
                pygame.draw.rect(screen, _color_for_value(update.kind, update.active), self._cell_rect(pos.x, pos.y))

        panel_x = self.margin * 2 + self.width * self.cell_size
        score_s = font.render(f"Score: {self.score}", True, (230, 230, 230))
        screen.blit(score_s, (panel_x, self.margin))

        if self.app_state is AppState.GAME_OVER:
            text = font.render("Game Over - press R to restart", True, (255, 128, 0))
            rect = text.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2))
            screen.blit(text, rect)
        pygame.display.flip()

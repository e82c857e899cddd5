from __future__ import annotations

from typing import Optional

import pygame

from tile_drop.env.tile_drop_env import color_for_value
from tile_drop.game import GameState


def banner_text(state: GameState) -> Optional[str]:
    if state.game_over:
        return f"Game Over - Final score: {state.score} - Press R to restart"
    if state.paused:
        return "Paused - Press P to resume"
    return None


class Renderer:
    def __init__(self, cell_size: int = 56, margin: int = 20, panel_width: int = 180) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, rows: int, cols: int) -> tuple[int, int]:
        return (
            cols * self.cell_size + self.margin * 3 + self.panel_width,
            rows * self.cell_size + self.margin * 2,
        )

    def _font_for(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 28)
        return self._font

    def _draw_tile(self, surf: pygame.Surface, x: int, y: int, value: int) -> None:
        rect = pygame.Rect(x, y, self.cell_size - 2, self.cell_size - 2)
        pygame.draw.rect(surf, color_for_value(value), rect)
        if value:
            label = self._font_for().render(str(value), True, (40, 30, 20))
            surf.blit(label, label.get_rect(center=rect.center))

    def _grid_surface(self, state: GameState) -> pygame.Surface:
        grid = state.view()
        h, w = grid.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                self._draw_tile(surf, x * self.cell_size, y * self.cell_size, int(grid[y, x]))
        return surf

    def draw(self, screen: pygame.Surface, state: GameState) -> None:
        font = self._font_for()
        screen.fill((10, 10, 14))
        screen.blit(self._grid_surface(state), (self.margin, self.margin))

        x0 = self.margin * 2 + state.grid.width * self.cell_size
        y0 = self.margin
        lines = [
            f"Score: {state.score}",
            f"Highest: {state.highest_tile}",
            "Next:",
        ]
        for i, txt in enumerate(lines):
            screen.blit(font.render(txt, True, (230, 230, 230)), (x0, y0 + i * 28))
        self._draw_tile(screen, x0, y0 + len(lines) * 28, state.next_piece.value)

        help_y = y0 + len(lines) * 28 + self.cell_size + 20
        for i, txt in enumerate(["Arrows: move/drop", "Space: hard drop", "P: pause  R: restart"]):
            screen.blit(font.render(txt, True, (150, 150, 160)), (x0, help_y + i * 24))

        banner = banner_text(state)
        if banner is not None:
            text = font.render(banner, True, (255, 110, 110))
            screen.blit(text, text.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2)))
        pygame.display.flip()

"""Home screen and error banner."""
from __future__ import annotations

import pygame

from enso_haiku.ui.constants import (
    BANNER_ALPHA,
    BANNER_H,
    BANNER_W,
    BG_COLOR,
    ERROR_COLOR,
    HOME_INSTRUCTIONS,
    HOME_RING_COLOR,
    TEXT_DIM,
    TITLE,
    TITLE_COLOR,
)


def _blit_centered(surface: pygame.Surface, image: pygame.Surface, x: float, y: float) -> None:
    surface.blit(image, image.get_rect(center=(round(x), round(y))))


def draw_home(
    surface: pygame.Surface,
    title_font: pygame.font.Font,
    body_font: pygame.font.Font,
    interval: float,
) -> None:
    """Draw the instructions shown before the first start."""
    surface.fill(BG_COLOR)
    w, h = surface.get_size()
    cx, cy = w / 2, h / 2

    _blit_centered(surface, title_font.render(TITLE, True, TITLE_COLOR), cx, cy - 150)

    line_h = 32
    start_y = cy - 50
    for i, line in enumerate(HOME_INSTRUCTIONS):
        if not line:
            continue
        text = line.format(interval=interval)
        _blit_centered(surface, body_font.render(text, True, TEXT_DIM), cx, start_y + i * line_h)

    ring = pygame.Surface((164, 164), pygame.SRCALPHA)
    pygame.draw.circle(ring, (*HOME_RING_COLOR, int(0.3 * 255)), (82, 82), 80, 2)
    _blit_centered(surface, ring, cx, cy + 200)


def draw_error(
    surface: pygame.Surface,
    message: str,
    hint: str,
    error_font: pygame.font.Font,
    hint_font: pygame.font.Font,
) -> None:
    """Draw the advisory banner for a failed generation."""
    w, h = surface.get_size()
    cx, cy = w / 2, h / 2

    panel = pygame.Surface((BANNER_W, BANNER_H), pygame.SRCALPHA)
    panel.fill((*BG_COLOR, int(BANNER_ALPHA * 255)))
    _blit_centered(surface, panel, cx, cy)

    for i, line in enumerate(message.split("\n")):
        _blit_centered(surface, error_font.render(line, True, ERROR_COLOR), cx, cy - 20 + i * 30)
    _blit_centered(surface, hint_font.render(hint, True, TEXT_DIM), cx, cy + 30)

"""Compositor — draws one frame of the scene in a fixed order."""
from __future__ import annotations

import math
from urllib.parse import urlparse

import pygame

from enso_haiku.components import Line
from enso_haiku.motion import draw_opacity
from enso_haiku.scene import Scene
from enso_haiku.session import error_message
from enso_haiku.ui.constants import (
    BG_COLOR,
    BODY_FONT,
    DOT_COLOR,
    DOT_COUNT,
    DOT_MAX_ALPHA,
    DOT_RADIUS,
    ERROR_FONT,
    GLYPH_COLOR,
    GLYPH_FONT,
    HINT_FONT,
    OUTLINE_COLOR,
    POEM_COLOR,
    POEM_FONT,
    POEM_LINE_SPACING,
    TITLE_FONT,
)
from enso_haiku.ui.overlay import draw_error, draw_home
from enso_haiku.ui.stroke import StrokeRenderer

_OUTLINE_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1), (-1, -1), (1, 1), (-1, 1), (1, -1))


def _font(spec: tuple[str, int]) -> pygame.font.Font:
    name, size = spec
    return pygame.font.SysFont(name, size)


def outlined(font: pygame.font.Font, text: str, fill: tuple, outline: tuple) -> pygame.Surface:
    """Render ``text`` with a one-pixel outline drawn under the fill."""
    base = font.render(text, True, fill)
    edge = font.render(text, True, outline)
    w, h = base.get_size()
    out = pygame.Surface((w + 2, h + 2), pygame.SRCALPHA)
    for dx, dy in _OUTLINE_OFFSETS:
        out.blit(edge, (1 + dx, 1 + dy))
    out.blit(base, (1, 1))
    return out


class Compositor:
    """Produces exactly one frame per call to ``draw``.

    Order: background, enso stroke (once started), home overlay (and stop)
    or error banner, ambient dots, ring particles, centered poem.
    """

    def __init__(self) -> None:
        if not pygame.font.get_init():
            pygame.font.init()
        self._glyph_font = _font(GLYPH_FONT)
        self._poem_font = _font(POEM_FONT)
        self._title_font = _font(TITLE_FONT)
        self._body_font = _font(BODY_FONT)
        self._error_font = _font(ERROR_FONT)
        self._hint_font = _font(HINT_FONT)
        self._stroke = StrokeRenderer()
        self._glyphs: dict[str, pygame.Surface] = {}

    def draw(self, surface: pygame.Surface, scene: Scene) -> None:
        scene.sync_size(*surface.get_size())

        surface.fill(BG_COLOR)
        if scene.started:
            self._stroke.draw(surface, scene.path, scene.geometry)

        if scene.show_home:
            draw_home(
                surface, self._title_font, self._body_font,
                scene.config.cycle_duration,
            )
            return

        if scene.session.error is not None:
            draw_error(
                surface,
                error_message(scene.session.error),
                _hint(scene.generator.base_url),
                self._error_font,
                self._hint_font,
            )

        self._draw_dots(surface, scene.clock)
        for line in scene.lines:
            self._draw_line(surface, line, scene)
        self._draw_poem(surface, scene)

    def _glyph(self, char: str) -> pygame.Surface:
        glyph = self._glyphs.get(char)
        if glyph is None:
            glyph = outlined(self._glyph_font, char, GLYPH_COLOR, OUTLINE_COLOR)
            self._glyphs[char] = glyph
        return glyph

    def _draw_dots(self, surface: pygame.Surface, clock: float) -> None:
        w, h = surface.get_size()
        size = DOT_RADIUS * 2 + 1
        for i in range(DOT_COUNT):
            alpha = (math.sin(clock + i) + 1) / 2 * DOT_MAX_ALPHA
            x = (w / (DOT_COUNT + 1)) * (i + 1)
            y = h / 3 + math.sin(clock + i) * 50
            dot = pygame.Surface((size, size), pygame.SRCALPHA)
            pygame.draw.circle(dot, (*DOT_COLOR, int(alpha * 255)), (DOT_RADIUS, DOT_RADIUS), DOT_RADIUS)
            surface.blit(dot, (x - DOT_RADIUS, y - DOT_RADIUS))

    def _draw_line(self, surface: pygame.Surface, line: Line, scene: Scene) -> None:
        for particle in line.particles:
            if not particle.visible:
                continue
            alpha = draw_opacity(particle, scene.config)
            if alpha <= 0.0:
                continue
            # Tangent to the ring; pygame rotates counter-clockwise in y-up terms.
            degrees = -math.degrees(particle.current_angle + math.pi / 2)
            image = pygame.transform.rotozoom(self._glyph(particle.char.lower()), degrees, 1.0)
            image.set_alpha(int(alpha * 255))
            surface.blit(image, image.get_rect(center=(round(particle.x), round(particle.y))))

    def _draw_poem(self, surface: pygame.Surface, scene: Scene) -> None:
        w, h = surface.get_size()
        cx, cy = w / 2, h / 2
        line_h = self._poem_font.get_height() * POEM_LINE_SPACING
        for i, text in poem_rows(scene):
            image = outlined(self._poem_font, text, POEM_COLOR, OUTLINE_COLOR)
            y = cy + (i - 1) * line_h
            surface.blit(image, image.get_rect(center=(round(cx), round(y))))


def _hint(base_url: str) -> str:
    host = urlparse(base_url).netloc or base_url
    return f"Make sure Ollama is running on {host}"


def poem_rows(scene: Scene) -> list[tuple[int, str]]:
    """``(row, text)`` pairs of the centered poem block; empty rows are skipped."""
    if not scene.session.has_content:
        return []
    return [(i, text) for i, text in enumerate(scene.texts) if text.strip()]

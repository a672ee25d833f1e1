"""Enso stroke renderer: layered arc segments and the tip bleed."""
from __future__ import annotations

import math

import pygame

from enso_haiku.geometry import Geometry
from enso_haiku.path import Bleed, PathAnimator, StrokeSegment

_BLEED_STOPS = ((0.0, 25, 0.6), (0.5, 30, 0.3), (1.0, 25, 0.0))


class StrokeRenderer:
    """Draws every circle of a PathAnimator onto a surface.

    Segments of one layer are drawn onto a shared transparent buffer which is
    then alpha-blended onto the target, so layers darken each other the way
    overlapping ink does.
    """

    def __init__(self) -> None:
        self._buffers: list[pygame.Surface] = []

    def _buffer(self, layer: int, size: tuple[int, int]) -> pygame.Surface:
        while len(self._buffers) <= layer:
            self._buffers.append(pygame.Surface(size, pygame.SRCALPHA))
        buf = self._buffers[layer]
        if buf.get_size() != size:
            buf = pygame.Surface(size, pygame.SRCALPHA)
            self._buffers[layer] = buf
        return buf

    def draw(self, surface: pygame.Surface, path: PathAnimator, geometry: Geometry) -> None:
        size = surface.get_size()
        layers = path.config.layers
        buffers = [self._buffer(i, size) for i in range(layers)]
        for buf in buffers:
            buf.fill((0, 0, 0, 0))

        bleeds: list[Bleed] = []
        for circle in range(path.config.num_circles):
            for seg in path.stroke_segments(circle, geometry):
                _draw_segment(buffers[seg.layer], seg, geometry)
            bleed = path.bleed(circle, geometry)
            if bleed is not None:
                bleeds.append(bleed)

        for buf in buffers:
            surface.blit(buf, (0, 0))
        for bleed in bleeds:
            draw_bleed(surface, bleed)


def _draw_segment(buf: pygame.Surface, seg: StrokeSegment, geometry: Geometry) -> None:
    if seg.width <= 0.5 or seg.alpha <= 0.0:
        return
    shade = int(seg.shade)
    color = (shade, shade, shade, int(seg.alpha * 255))
    half = seg.width / 2
    inner = max(0.0, seg.radius - half)
    outer = seg.radius + half
    cx, cy = geometry.center_x, geometry.center_y

    def point(r: float, a: float) -> tuple[float, float]:
        return (cx + math.cos(a) * r, cy + math.sin(a) * r)

    quad = [
        point(inner, seg.start_angle),
        point(outer, seg.start_angle),
        point(outer, seg.end_angle),
        point(inner, seg.end_angle),
    ]
    pygame.draw.polygon(buf, color, quad)
    # Round cap so consecutive segments of different widths join smoothly.
    pygame.draw.circle(buf, color, point(seg.radius, seg.end_angle), half)


def draw_bleed(surface: pygame.Surface, bleed: Bleed) -> None:
    """Radial gradient blob approximated by concentric discs."""
    radius = max(1, int(math.ceil(bleed.radius)))
    blob = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
    for r in range(radius, 0, -1):
        t = r / radius
        shade, alpha = _gradient(t)
        color = (shade, shade, shade, int(bleed.alpha * alpha * 255))
        pygame.draw.circle(blob, color, (radius, radius), r)
    surface.blit(blob, (bleed.x - radius, bleed.y - radius))


def _gradient(t: float) -> tuple[int, float]:
    """Interpolate the bleed color stops at ``t`` in [0, 1]."""
    for (t0, s0, a0), (t1, s1, a1) in zip(_BLEED_STOPS, _BLEED_STOPS[1:]):
        if t <= t1:
            k = (t - t0) / (t1 - t0)
            return int(s0 + (s1 - s0) * k), a0 + (a1 - a0) * k
    return _BLEED_STOPS[-1][1], _BLEED_STOPS[-1][2]

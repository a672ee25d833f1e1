"""Enso path animation: progress pacing and pseudo-organic stroke geometry.

Everything here is a deterministic function of the animation clock and the
per-circle start angles/directions, which are drawn from the engine's seeded
RNG when a new generation cycle resets the animation.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from enso_haiku.config import AnimationConfig
    from enso_haiku.geometry import Geometry

BASE_INK = 25
BASE_STROKE_WIDTH = 60.0
LAYER_STROKE_WIDTH = 15.0


@dataclass(frozen=True)
class StrokeSegment:
    """One short arc of one stroke layer, ready to be drawn."""

    layer: int
    start_angle: float
    end_angle: float
    radius: float
    width: float
    shade: float
    alpha: float


@dataclass(frozen=True)
class Bleed:
    """Radial ink blob at the leading tip of a stroke."""

    x: float
    y: float
    radius: float
    alpha: float


def speed_variation(clock: float) -> float:
    """Hand-drawn sweep speed factor; always within [0.3, 1.7]."""
    return (
        1.0
        + math.sin(clock * 0.5) * 0.4
        + math.sin(clock * 1.3) * 0.2
        + math.sin(clock * 2.7) * 0.1
    )


def ink_pressure(angle: float, clock: float) -> tuple[float, float, float]:
    """Return ``(pressure, intensity, noise)`` for a segment starting at ``angle``."""
    pressure = (
        0.5
        + math.sin(angle * 7.3 + clock * 2.1) * 0.35
        + math.sin(angle * 13.7 + clock * 3.4) * 0.25
        + math.sin(angle * 19.2 + clock * 1.7) * 0.15
    )
    intensity = (
        0.6
        + math.sin(angle * 11.5 + clock * 2.8) * 0.25
        + math.sin(angle * 17.3 + clock * 4.1) * 0.15
    )
    noise = math.sin(angle * 23.7 + clock * 5.3) * 0.1
    return pressure, intensity, noise


def radius_wobble(angle: float, clock: float) -> float:
    return (
        math.sin(angle * 5.1 + clock * 1.5) * 2
        + math.sin(angle * 8.7 + clock * 2.3) * 1
    )


class PathAnimator:
    """Drives ``num_circles`` enso strokes sharing one progress counter."""

    def __init__(self, config: AnimationConfig, rng: random.Random | None = None) -> None:
        self.config = config
        self.progress = 0.0
        self.clock = 0.0
        self.start_angles: list[float] = []
        self.directions: list[int] = []
        self.reset(rng if rng is not None else random.Random(0))

    @property
    def start_angle(self) -> float:
        """Angle the poem lines are laid out from."""
        return self.start_angles[0] if self.start_angles else 0.0

    def reset(self, rng: random.Random) -> None:
        """Start a new cycle: zero progress and fresh start angles/directions."""
        self.progress = 0.0
        self.start_angles = []
        self.directions = []
        for _ in range(self.config.num_circles):
            self.start_angles.append(rng.random() * math.tau)
            self.directions.append(-1 if rng.random() < 0.5 else 1)

    def advance(self) -> float:
        """Advance the clock and progress by one frame; returns the new progress."""
        self.clock += self.config.clock_step
        step = self.config.progress_speed * speed_variation(self.clock)
        self.progress = min(1.0, self.progress + step)
        return self.progress

    def sweep(self, circle: int) -> tuple[float, float]:
        """Return ``(start, end)`` angles of a circle's stroke at the current progress.

        The swept angle never exceeds a full turn minus the gap, so the
        stroke stays open.
        """
        start = self.start_angles[circle]
        swept = min(self.progress * math.tau, math.tau - self.config.gap)
        return start, start + self.directions[circle] * swept

    def stroke_segments(self, circle: int, geometry: Geometry) -> list[StrokeSegment]:
        cfg = self.config
        start, end = self.sweep(circle)
        if start == end:
            return []

        segments: list[StrokeSegment] = []
        step = (end - start) / cfg.segments
        for layer in range(cfg.layers):
            offset = layer * 0.5
            layer_opacity = cfg.ink_opacity * (1 - layer * 0.15)
            layer_radius = geometry.radius + offset - offset * 0.3
            base_width = BASE_STROKE_WIDTH + layer * LAYER_STROKE_WIDTH

            for i in range(cfg.segments):
                seg_start = start + i * step
                pressure, intensity, noise = ink_pressure(seg_start, self.clock)
                width = max(0.0, base_width * pressure * intensity * (1 + noise))
                shade = BASE_INK + layer * 2 - pressure * 5 - noise * 3
                segments.append(
                    StrokeSegment(
                        layer=layer,
                        start_angle=seg_start,
                        end_angle=seg_start + step,
                        radius=layer_radius + radius_wobble(seg_start, self.clock),
                        width=width,
                        shade=min(255.0, max(0.0, shade)),
                        alpha=min(1.0, max(0.0, layer_opacity * intensity)),
                    )
                )
        return segments

    def bleed(self, circle: int, geometry: Geometry) -> Bleed | None:
        """Ink pooling at the stroke tip, once progress passes the threshold."""
        if self.progress <= self.config.bleed_threshold:
            return None
        _, tip = self.sweep(circle)
        radius = geometry.radius + math.sin(tip * 5.1 + self.clock * 1.5) * 2
        return Bleed(
            x=geometry.center_x + math.cos(tip) * radius,
            y=geometry.center_y + math.sin(tip) * radius,
            radius=8 + math.sin(self.clock * 4) * 3,
            alpha=self.config.ink_opacity,
        )

"""Per-frame particle motion and opacity transitions."""
from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING

from enso_haiku.components import Line, Particle, visible_length

if TYPE_CHECKING:
    from enso_haiku.config import AnimationConfig
    from enso_haiku.geometry import Geometry

# Reveal fade-in runs this much faster than the standard rate.
STREAMING_FADE_FACTOR = 2.5
STEADY_FADE_FACTOR = 1.5


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def float_offsets(
    clock: float, particle_index: int, line_index: int, config: AnimationConfig
) -> tuple[float, float]:
    """Return ``(radial, perpendicular)`` floating offsets in pixels.

    A pure function of the animation clock and the particle's position so each
    letter drifts on its own phase.
    """
    radial = math.sin(clock + particle_index * 0.3 + line_index) * config.float_radius
    drift = (
        math.cos(clock * 0.7 + particle_index * 0.4 + line_index)
        * config.float_drift
    )
    return radial, drift


def step_particle(
    particle: Particle,
    particle_index: int,
    line_index: int,
    clock: float,
    geometry: Geometry,
    config: AnimationConfig,
) -> None:
    """Advance angle smoothing, floating target and spring position."""
    particle.current_angle += (
        particle.target_angle - particle.current_angle
    ) * config.angle_gain

    radial, drift = float_offsets(clock, particle_index, line_index, config)
    particle.radius = particle.base_radius + radial

    angle = particle.current_angle
    base_x = geometry.center_x + math.cos(angle) * particle.radius
    base_y = geometry.center_y + math.sin(angle) * particle.radius
    perp = angle + math.pi / 2
    particle.target_x = base_x + math.cos(perp) * drift * 0.3
    particle.target_y = base_y + math.sin(perp) * drift

    particle.velocity_x += (particle.target_x - particle.x) * config.spring
    particle.velocity_y += (particle.target_y - particle.y) * config.spring
    particle.velocity_x *= config.damping
    particle.velocity_y *= config.damping
    particle.x += particle.velocity_x
    particle.y += particle.velocity_y


def fade_out_line(line: Line, config: AnimationConfig) -> None:
    """Lower every particle's opacity; clear the displayed text once all are gone."""
    for particle in line.particles:
        particle.opacity = _clamp(particle.opacity - config.fade_out_speed)
        if particle.opacity <= 0.0:
            particle.visible = False
    if line.particles and all(p.opacity <= 0.0 for p in line.particles):
        line.displayed_text = ""


def reveal_line(line: Line, rng: random.Random, config: AnimationConfig) -> None:
    """Grow the displayed prefix by at most one character and fade in revealed letters."""
    if len(line.displayed_text) < len(line.text):
        if rng.random() < config.reveal_probability:
            line.displayed_text = line.text[: len(line.displayed_text) + 1]
    elif line.displayed_text != line.text:
        line.displayed_text = line.text

    revealed = visible_length(line.displayed_text)
    rate = config.fade_in_speed * STREAMING_FADE_FACTOR
    for i, particle in enumerate(line.particles):
        particle.visible = True
        if i < revealed:
            particle.opacity = _clamp(
                max(particle.opacity, config.opacity_floor) + rate
            )


def settle_line(line: Line, config: AnimationConfig) -> None:
    """Show the whole line and ease every particle toward full opacity."""
    line.displayed_text = line.text
    limit = visible_length(line.text)
    rate = config.fade_in_speed * STEADY_FADE_FACTOR
    for i, particle in enumerate(line.particles):
        if i >= limit:
            continue
        particle.visible = True
        particle.opacity = _clamp(max(particle.opacity, config.opacity_floor) + rate)


def update_line(
    line: Line,
    line_index: int,
    fading_out: bool,
    clock: float,
    rng: random.Random,
    geometry: Geometry,
    config: AnimationConfig,
) -> None:
    """Run one frame of opacity and motion for a single line.

    The opacity state is exactly one of fading out, streaming reveal or
    steady visible, checked in that order.
    """
    if not line.text:
        return

    if fading_out:
        fade_out_line(line, config)
    elif line.streaming:
        reveal_line(line, rng, config)
    else:
        settle_line(line, config)

    for i, particle in enumerate(line.particles):
        if not particle.visible:
            continue
        step_particle(particle, i, line_index, clock, geometry, config)


def update_lines(
    lines: list[Line],
    fading_out: bool,
    clock: float,
    rng: random.Random,
    geometry: Geometry,
    config: AnimationConfig,
) -> None:
    for index, line in enumerate(lines):
        update_line(line, index, fading_out, clock, rng, geometry, config)


def draw_opacity(particle: Particle, config: AnimationConfig) -> float:
    """Opacity actually applied when the particle is drawn."""
    return _clamp(particle.opacity) * config.particle_alpha

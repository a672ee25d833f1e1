"""Line reconciliation: keep each line's particle set in step with its text.

A line is re-derived (particles rebuilt from scratch) only when the number of
non-space characters in its text changes. While that count is stable the
existing particles, and with them their smoothed angle and position state,
are kept; only the line's text and each particle's character change.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

from enso_haiku.components import Line, Particle, visible_length

if TYPE_CHECKING:
    from enso_haiku.config import AnimationConfig
    from enso_haiku.geometry import Geometry

# Layout cursor advance for a space, in letter steps.
SPACE_ADVANCE = 0.3
# Share of a line's arc segment covered by its letters.
LETTER_SPREAD = 0.8


def letter_offsets(text: str) -> list[float]:
    """Return cursor positions of the non-space characters, centered on 0.

    Letters advance the cursor by one step and spaces by ``SPACE_ADVANCE``.
    The result is symmetric: the first and last entries are equidistant
    from 0.
    """
    positions: list[float] = []
    cursor = 0.0
    for char in text:
        if char.isspace():
            cursor += SPACE_ADVANCE
            continue
        positions.append(cursor)
        cursor += 1.0
    if not positions:
        return []
    middle = (positions[0] + positions[-1]) / 2
    return [p - middle for p in positions]


def base_angle(index: int, start_angle: float, config: AnimationConfig) -> float:
    """Center angle of the arc segment reserved for line ``index``."""
    return start_angle + index * config.segment_angle


def layout_line(
    text: str,
    index: int,
    start_angle: float,
    geometry: Geometry,
    config: AnimationConfig,
) -> Line:
    """Build a fresh Line for ``text`` with one particle per visible character."""
    clean = text.strip()
    center = base_angle(index, start_angle, config)
    offsets = letter_offsets(clean)

    span = offsets[-1] - offsets[0] if offsets else 0.0
    step = (config.segment_angle * LETTER_SPREAD) / max(span, 1.0)

    radius = geometry.radius
    particles: list[Particle] = []
    for char, offset in zip(_letters(clean), offsets):
        angle = center + offset * step
        x = geometry.center_x + math.cos(angle) * radius
        y = geometry.center_y + math.sin(angle) * radius
        particles.append(
            Particle(
                char=char,
                target_angle=angle,
                current_angle=angle,
                base_radius=radius,
                radius=radius,
                x=x,
                y=y,
                target_x=x,
                target_y=y,
                opacity=config.opacity_floor,
            )
        )

    return Line(text=clean, particles=particles, base_angle=center)


def _letters(text: str) -> list[str]:
    return [c for c in text if not c.isspace()]


def _common_prefix(a: str, b: str) -> str:
    n = 0
    for ca, cb in zip(a, b):
        if ca != cb:
            break
        n += 1
    return a[:n]


def reconcile_line(
    line: Line,
    text: str,
    index: int,
    start_angle: float,
    geometry: Geometry,
    config: AnimationConfig,
) -> tuple[Line, bool]:
    """Bring ``line`` in step with ``text``.

    Returns ``(line, rederived)``. When the visible character count is
    unchanged the same Line object comes back with its text and particle
    characters updated in place.
    Otherwise a new Line is laid out; it inherits the streaming flag and the
    part of the displayed text that still matches.
    """
    clean = text.strip()
    if visible_length(clean) == len(line.particles):
        for particle, char in zip(line.particles, _letters(clean)):
            particle.char = char
        line.text = clean
        if not clean.startswith(line.displayed_text):
            line.displayed_text = _common_prefix(line.displayed_text, clean)
        return line, False

    fresh = layout_line(clean, index, start_angle, geometry, config)
    fresh.streaming = line.streaming
    fresh.displayed_text = _common_prefix(line.displayed_text, clean)
    return fresh, True


def reconcile_lines(
    lines: list[Line],
    texts: Sequence[str],
    start_angle: float,
    geometry: Geometry,
    config: AnimationConfig,
) -> list[int]:
    """Reconcile every line in place against ``texts``.

    ``lines`` is padded with empty Lines up to ``config.num_lines``; texts
    beyond that are ignored and missing texts count as empty. Returns the
    indices of the lines that were re-derived.
    """
    while len(lines) < config.num_lines:
        lines.append(
            Line(base_angle=base_angle(len(lines), start_angle, config))
        )

    rederived: list[int] = []
    for i in range(config.num_lines):
        text = texts[i] if i < len(texts) else ""
        line, changed = reconcile_line(
            lines[i], text, i, start_angle, geometry, config
        )
        lines[i] = line
        if changed:
            rederived.append(i)
    return rederived


def relayout_lines(
    lines: list[Line],
    start_angle: float,
    geometry: Geometry,
    config: AnimationConfig,
) -> None:
    """Re-derive every line against new geometry, keeping text and flags.

    Each particle keeps its opacity and visibility, so a resize never
    interrupts a fade.
    """
    for i, old in enumerate(lines):
        fresh = layout_line(old.text, i, start_angle, geometry, config)
        fresh.streaming = old.streaming
        fresh.displayed_text = old.displayed_text
        for new, prev in zip(fresh.particles, old.particles):
            new.opacity = prev.opacity
            new.visible = prev.visible
        lines[i] = fresh

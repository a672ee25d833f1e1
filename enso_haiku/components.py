"""Particle and Line records for the text ring."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Particle:
    """One visible (non-space) character placed on the ring.

    ``target_angle`` is fixed for the particle's lifetime; ``current_angle``
    follows it through a low-pass filter. ``x``/``y`` trail
    ``target_x``/``target_y`` through a damped spring.
    """

    char: str
    target_angle: float
    current_angle: float
    base_radius: float
    radius: float
    x: float
    y: float
    target_x: float
    target_y: float
    velocity_x: float = 0.0
    velocity_y: float = 0.0
    opacity: float = 0.3
    visible: bool = True


@dataclass
class Line:
    """One poem line bound to an arc segment of the ring."""

    text: str = ""
    displayed_text: str = ""
    particles: list[Particle] = field(default_factory=list)
    base_angle: float = 0.0
    streaming: bool = False


def visible_length(text: str) -> int:
    """Number of particles a text produces: its non-whitespace characters."""
    return sum(1 for c in text if not c.isspace())

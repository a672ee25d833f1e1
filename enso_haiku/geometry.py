"""Center point and ring radius derived from the drawing surface size."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Geometry:
    width: int
    height: int
    center_x: float
    center_y: float
    radius: float

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


def compute_geometry(width: int, height: int, radius_fraction: float = 0.35) -> Geometry:
    """Return the geometry for a surface of ``width`` x ``height`` pixels."""
    if width < 0 or height < 0:
        raise ValueError(f"surface size must be non-negative, got {width}x{height}")
    return Geometry(
        width=width,
        height=height,
        center_x=width / 2,
        center_y=height / 2,
        radius=min(width, height) * radius_fraction,
    )

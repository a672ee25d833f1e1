"""Scene — the single render-session context shared by all systems."""
from __future__ import annotations

import random

from enso_haiku.components import Line
from enso_haiku.config import AnimationConfig, GeneratorConfig
from enso_haiku.geometry import Geometry, compute_geometry
from enso_haiku.path import PathAnimator
from enso_haiku.reconcile import reconcile_lines, relayout_lines
from enso_haiku.session import SessionState


class Scene:
    """Owns the lines, session state, path animation and geometry.

    Systems and command handlers receive the scene and mutate it; nothing
    else keeps a reference to its parts across frames.
    """

    def __init__(
        self,
        width: int,
        height: int,
        config: AnimationConfig | None = None,
        generator: GeneratorConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config: AnimationConfig = config if config is not None else AnimationConfig()
        self.generator: GeneratorConfig = (
            generator if generator is not None else GeneratorConfig()
        )
        self.geometry: Geometry = compute_geometry(
            width, height, self.config.radius_fraction
        )
        self.path = PathAnimator(self.config, rng)
        self.session = SessionState()
        self.lines: list[Line] = []
        self.started = False
        self.show_home = True
        self.sync_lines()

    @property
    def clock(self) -> float:
        """Animation clock shared by the stroke, the particles and the dots."""
        return self.path.clock

    @property
    def texts(self) -> tuple[str, ...]:
        return self.session.lines

    def particle_count(self) -> int:
        return sum(len(line.particles) for line in self.lines)

    def sync_lines(self) -> list[int]:
        """Reconcile the ring lines with the session's current text."""
        return reconcile_lines(
            self.lines, self.session.lines, self.path.start_angle,
            self.geometry, self.config,
        )

    def set_streaming(self, streaming: bool) -> None:
        for line in self.lines:
            line.streaming = streaming and bool(line.text)

    def resize(self, width: int, height: int) -> None:
        """Recompute geometry and re-derive the particle layout."""
        self.geometry = compute_geometry(width, height, self.config.radius_fraction)
        relayout_lines(self.lines, self.path.start_angle, self.geometry, self.config)

    def sync_size(self, width: int, height: int) -> bool:
        """Resize if the reported surface size no longer matches; True if it did."""
        if (width, height) == self.geometry.size:
            return False
        self.resize(width, height)
        return True

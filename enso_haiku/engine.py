"""Engine - per-frame system loop over a single scene."""

from __future__ import annotations

import os
import random
from typing import TYPE_CHECKING

from enso_haiku.clock import Clock
from enso_haiku.types import FrameContext, System

if TYPE_CHECKING:
    from enso_haiku.scene import Scene


class Engine:
    def __init__(self, scene: Scene, fps: int = 60, seed: int | None = None) -> None:
        self._clock = Clock(fps)
        self._scene = scene
        self._systems: list[System] = []

        if seed is None:
            seed = int.from_bytes(os.urandom(8))
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def random(self) -> random.Random:
        return self._rng

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def context(self) -> FrameContext:
        return self._clock.context(self._rng)

    def step(self) -> None:
        self._clock.advance()
        ctx = self._clock.context(self._rng)
        for system in self._systems:
            system(self._scene, ctx)

    def run(self, n: int) -> None:
        for _ in range(n):
            self.step()

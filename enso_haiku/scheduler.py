"""Regeneration scheduler driven by the frame clock."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from enso_haiku.commands import FadeOutRequested, RegenerateRequested

if TYPE_CHECKING:
    from enso_haiku.queue import CommandQueue
    from enso_haiku.scene import Scene
    from enso_haiku.types import FrameContext


class RegenerationScheduler:
    """Fixed-period timer that asks for a fade-out, then a new poem.

    Counts frames rather than wall time, so stepping the engine is enough to
    drive it in tests. Inactive until ``arm`` is called.
    """

    def __init__(self, interval: int, fade_delay: int) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if fade_delay < 0:
            raise ValueError("fade_delay must be non-negative")
        self.interval = interval
        self.fade_delay = fade_delay
        self.armed = False
        self.elapsed = 0
        self.regenerate_in: int | None = None

    @classmethod
    def from_seconds(cls, interval: float, fade_delay: float, fps: int) -> RegenerationScheduler:
        return cls(
            interval=max(1, round(interval * fps)),
            fade_delay=max(0, round(fade_delay * fps)),
        )

    def arm(self) -> None:
        """Start the period; repeated calls keep the running period."""
        if not self.armed:
            self.armed = True
            self.elapsed = 0

    def poll(self, in_flight: bool) -> list[Any]:
        """Advance one frame and return the commands due on it."""
        due: list[Any] = []
        if not self.armed:
            return due

        if self.regenerate_in is not None:
            self.regenerate_in -= 1
            if self.regenerate_in <= 0:
                self.regenerate_in = None
                due.append(RegenerateRequested())

        self.elapsed += 1
        if self.elapsed >= self.interval:
            self.elapsed = 0
            if not in_flight and self.regenerate_in is None:
                due.append(FadeOutRequested())
                if self.fade_delay == 0:
                    due.append(RegenerateRequested())
                else:
                    self.regenerate_in = self.fade_delay
        return due


def make_scheduler_system(
    scheduler: RegenerationScheduler,
    queue: CommandQueue,
) -> Callable[[Scene, FrameContext], None]:
    """Return a system that feeds due scheduler commands into the queue."""

    def scheduler_system(scene: Scene, ctx: FrameContext) -> None:
        for cmd in scheduler.poll(scene.session.in_flight):
            queue.enqueue(cmd)

    return scheduler_system

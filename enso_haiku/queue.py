"""CommandQueue: the one path by which events reach the scene."""
from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from enso_haiku.commands import Command
    from enso_haiku.scene import Scene
    from enso_haiku.types import FrameContext

logger = logging.getLogger(__name__)

Handler = Callable[["Command", "Scene", "FrameContext"], bool]


class CommandQueue:
    """Serializes key presses, scheduler ticks and stream events between frames.

    ``enqueue`` is safe to call from the generation worker (``deque.append``
    is atomic); ``drain`` runs only on the frame loop, so every handler has
    finished mutating the scene before the next system reads it.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, Handler] = {}
        self._pending: deque[Command] = deque()

    def handle(self, cmd_type: type, handler: Handler) -> None:
        """Route ``cmd_type`` to ``handler(cmd, scene, ctx) -> accepted``.

        One handler per type; registering again replaces it.
        """
        self._handlers[cmd_type] = handler

    def enqueue(self, cmd: Command) -> None:
        self._pending.append(cmd)

    def pending(self) -> int:
        return len(self._pending)

    def drain(self, scene: Scene, ctx: FrameContext) -> list[tuple[Command, bool]]:
        """Apply every queued command in arrival order.

        Returns ``[(cmd, accepted), ...]``. Commands queued by a handler
        while draining are applied in the same pass. Raises ``TypeError``
        for a command type with no handler.
        """
        results: list[tuple[Command, bool]] = []
        while self._pending:
            cmd = self._pending.popleft()
            handler = self._handlers.get(type(cmd))
            if handler is None:
                raise TypeError(f"no handler for {type(cmd).__qualname__}")
            accepted = handler(cmd, scene, ctx)
            if not accepted:
                logger.debug("frame %d: %r rejected", ctx.frame_number, cmd)
            results.append((cmd, accepted))
        return results

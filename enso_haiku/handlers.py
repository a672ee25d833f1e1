"""Command handlers: every scene mutation outside the per-frame systems."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from enso_haiku.commands import (
    ChunkReceived,
    FadeOutRequested,
    RegenerateRequested,
    Resized,
    StartPressed,
    StreamFailed,
    StreamFinished,
    StreamOpened,
)
from enso_haiku.session import (
    apply_increment,
    begin_session,
    complete_session,
    fail_session,
    open_stream,
    request_fade_out,
)

if TYPE_CHECKING:
    from enso_haiku.queue import CommandQueue
    from enso_haiku.scene import Scene
    from enso_haiku.scheduler import RegenerationScheduler
    from enso_haiku.types import FrameContext

logger = logging.getLogger(__name__)


def start_generation(scene: Scene, ctx: FrameContext) -> bool:
    """Begin a session with a fresh stroke cycle; False if one is in flight."""
    if scene.session.in_flight:
        logger.debug("generation already in flight; trigger ignored")
        return False
    scene.session = begin_session(scene.session, ctx.elapsed)
    scene.path.reset(ctx.random)
    scene.sync_lines()
    logger.info("session %d requesting", scene.session.session_id)
    return True


def _current(scene: Scene, session_id: int) -> bool:
    return scene.session.in_flight and scene.session.session_id == session_id


def register_handlers(queue: CommandQueue, scheduler: RegenerationScheduler) -> None:
    """Wire every command type to its handler."""

    def on_start(cmd: StartPressed, scene: Scene, ctx: FrameContext) -> bool:
        scene.show_home = False
        if not scene.started:
            scene.started = True
            scheduler.arm()
        return start_generation(scene, ctx)

    def on_resized(cmd: Resized, scene: Scene, ctx: FrameContext) -> bool:
        scene.resize(cmd.width, cmd.height)
        return True

    def on_fade_out(cmd: FadeOutRequested, scene: Scene, ctx: FrameContext) -> bool:
        scene.session = request_fade_out(scene.session)
        return scene.session.fading_out

    def on_regenerate(cmd: RegenerateRequested, scene: Scene, ctx: FrameContext) -> bool:
        return start_generation(scene, ctx)

    def on_opened(cmd: StreamOpened, scene: Scene, ctx: FrameContext) -> bool:
        if not _current(scene, cmd.session_id):
            return False
        scene.session = open_stream(scene.session, ctx.elapsed)
        logger.info("session %d streaming", cmd.session_id)
        return True

    def on_chunk(cmd: ChunkReceived, scene: Scene, ctx: FrameContext) -> bool:
        if not _current(scene, cmd.session_id):
            return False
        scene.session = apply_increment(scene.session, cmd.content, ctx.elapsed)
        scene.sync_lines()
        scene.set_streaming(True)
        return True

    def on_finished(cmd: StreamFinished, scene: Scene, ctx: FrameContext) -> bool:
        if not _current(scene, cmd.session_id):
            return False
        scene.session = complete_session(scene.session)
        scene.sync_lines()
        scene.set_streaming(False)
        logger.info("session %d completed: %r", cmd.session_id, scene.session.lines)
        return True

    def on_failed(cmd: StreamFailed, scene: Scene, ctx: FrameContext) -> bool:
        if not _current(scene, cmd.session_id):
            return False
        scene.session = fail_session(scene.session, cmd.error)
        scene.path.reset(ctx.random)
        scene.sync_lines()
        logger.warning(
            "session %d failed (%s): %s",
            cmd.session_id, cmd.error.kind.value, cmd.error,
        )
        return True

    queue.handle(StartPressed, on_start)
    queue.handle(Resized, on_resized)
    queue.handle(FadeOutRequested, on_fade_out)
    queue.handle(RegenerateRequested, on_regenerate)
    queue.handle(StreamOpened, on_opened)
    queue.handle(ChunkReceived, on_chunk)
    queue.handle(StreamFinished, on_finished)
    queue.handle(StreamFailed, on_failed)

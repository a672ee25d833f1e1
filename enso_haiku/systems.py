"""Frame systems: command drain, stream dispatch, stroke and particle updates.

The generation system runs the blocking stream consumer on a one-worker
thread pool. The worker never touches the scene: it only enqueues commands,
which the command system applies at the start of the next frame.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Callable

from enso_haiku.client import HAIKU_PROMPT, GeneratorClient, IncrementStream
from enso_haiku.commands import (
    ChunkReceived,
    StreamFailed,
    StreamFinished,
    StreamOpened,
)
from enso_haiku.motion import update_lines
from enso_haiku.session import SessionPhase
from enso_haiku.types import ErrorKind, GenerationError

if TYPE_CHECKING:
    from enso_haiku.queue import CommandQueue
    from enso_haiku.scene import Scene
    from enso_haiku.types import FrameContext

logger = logging.getLogger(__name__)


class GenerationSystem:
    """Dispatches the stream consumer for each requested session.

    Callable object satisfying the System protocol. Three phases per frame:
    harvest the finished worker, fail a session whose stream has stalled, and
    dispatch a worker for a newly requested session.

    Use ``make_generation_system(client, queue)`` to create an instance.
    """

    def __init__(
        self,
        client: GeneratorClient,
        queue: CommandQueue,
        prompt: str = HAIKU_PROMPT,
    ) -> None:
        self._client = client
        self._queue = queue
        self._prompt = prompt
        self._executor = ThreadPoolExecutor(max_workers=1)
        self._future: Future[None] | None = None
        self._dispatched_id = 0
        self._stop = threading.Event()

    def __call__(self, scene: Scene, ctx: FrameContext) -> None:
        if self._stop.is_set():
            return

        self._phase_harvest()
        self._phase_timeout(scene, ctx)
        self._phase_dispatch(scene)

    def shutdown(self) -> None:
        """Stop the worker pool; later calls to the system are no-ops.

        A worker mid-stream stops at its next increment.
        """
        self._stop.set()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._future = None

    def _phase_harvest(self) -> None:
        if self._future is None or not self._future.done():
            return
        future, self._future = self._future, None
        exc = future.exception()
        if exc is not None:
            logger.error("stream worker crashed: %s", exc)

    def _phase_timeout(self, scene: Scene, ctx: FrameContext) -> None:
        session = scene.session
        if not session.in_flight:
            return
        timeout = scene.generator.stream_timeout
        if ctx.elapsed - session.last_activity <= timeout:
            return
        self._queue.enqueue(
            StreamFailed(
                session.session_id,
                GenerationError(
                    ErrorKind.TIMEOUT, f"no response for {timeout:g}s"
                ),
            )
        )

    def _phase_dispatch(self, scene: Scene) -> None:
        session = scene.session
        if session.phase is not SessionPhase.REQUESTING:
            return
        if session.session_id == self._dispatched_id:
            return
        # A stalled worker from an older session still holds the only thread;
        # the new one queues behind it.
        self._dispatched_id = session.session_id
        self._future = self._executor.submit(self._consume, session.session_id)

    def _consume(self, session_id: int) -> None:
        """Worker body: read one stream and translate it into commands."""
        try:
            increments = iter(IncrementStream(self._client, self._prompt))
            self._queue.enqueue(StreamOpened(session_id))
            for increment in increments:
                if self._stop.is_set():
                    logger.debug("session %d abandoned at shutdown", session_id)
                    return
                if increment.content:
                    self._queue.enqueue(ChunkReceived(session_id, increment.content))
                if increment.done:
                    break
        except GenerationError as exc:
            self._queue.enqueue(StreamFailed(session_id, exc))
            return
        except Exception as exc:
            self._queue.enqueue(
                StreamFailed(session_id, GenerationError(ErrorKind.UNEXPECTED, str(exc)))
            )
            return
        self._queue.enqueue(StreamFinished(session_id))


def make_generation_system(
    client: GeneratorClient,
    queue: CommandQueue,
    prompt: str = HAIKU_PROMPT,
) -> GenerationSystem:
    """Create a generation system streaming ``prompt`` from ``client``.

    Call ``system.shutdown()`` when the loop stops to release the worker.
    """
    return GenerationSystem(client, queue, prompt)


def make_command_system(queue: CommandQueue) -> Callable[[Scene, FrameContext], None]:
    """Return a system that drains the command queue once per frame."""

    def command_system(scene: Scene, ctx: FrameContext) -> None:
        queue.drain(scene, ctx)

    return command_system


def make_path_system() -> Callable[[Scene, FrameContext], None]:
    """Return a system advancing the enso stroke once the scene has started."""

    def path_system(scene: Scene, ctx: FrameContext) -> None:
        if scene.started:
            scene.path.advance()

    return path_system


def make_motion_system() -> Callable[[Scene, FrameContext], None]:
    """Return a system updating every line's particles."""

    def motion_system(scene: Scene, ctx: FrameContext) -> None:
        update_lines(
            scene.lines,
            scene.session.fading_out,
            scene.clock,
            ctx.random,
            scene.geometry,
            scene.config,
        )

    return motion_system

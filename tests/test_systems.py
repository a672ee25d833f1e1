"""Tests for command handlers, frame systems and the generation lifecycle."""
import threading
import time


from enso_haiku.app import EnsoApp, parse_args
from enso_haiku.client import MockClient, ndjson_lines
from enso_haiku.commands import (
    ChunkReceived,
    FadeOutRequested,
    Resized,
    StartPressed,
    StreamFailed,
    StreamFinished,
    StreamOpened,
)
from enso_haiku.components import visible_length
from enso_haiku.config import GeneratorConfig
from enso_haiku.engine import Engine
from enso_haiku.handlers import register_handlers
from enso_haiku.queue import CommandQueue
from enso_haiku.scene import Scene
from enso_haiku.scheduler import RegenerationScheduler
from enso_haiku.session import SessionPhase
from enso_haiku.systems import (
    GenerationSystem,
    make_command_system,
    make_generation_system,
    make_motion_system,
    make_path_system,
)
from enso_haiku.types import ErrorKind, GenerationError

POEM_FRAGMENTS = ["empty room ", "remains\nthe kettle has ", "gone quiet\nonly dust moving"]
POEM = ("empty room remains", "the kettle has gone quiet", "only dust moving")


class _Rig:
    """Scene, queue and systems without a generation worker."""

    def __init__(self, generator: GeneratorConfig | None = None) -> None:
        self.scene = Scene(1000, 800, generator=generator)
        self.engine = Engine(self.scene, fps=60, seed=42)
        self.queue = CommandQueue()
        self.scheduler = RegenerationScheduler(interval=1200, fade_delay=120)
        register_handlers(self.queue, self.scheduler)
        self.engine.add_system(make_command_system(self.queue))
        self.engine.add_system(make_path_system())
        self.engine.add_system(make_motion_system())

    def send(self, *cmds) -> None:
        for cmd in cmds:
            self.queue.enqueue(cmd)
        self.engine.step()


def _run_until(app: EnsoApp, predicate, max_frames: int = 3000) -> None:
    for _ in range(max_frames):
        app.step()
        if predicate(app.scene):
            return
        time.sleep(0.001)
    raise AssertionError("condition not reached")


class TestStart:
    def test_first_press(self) -> None:
        rig = _Rig()
        assert rig.scene.show_home and not rig.scene.started
        rig.send(StartPressed())
        assert not rig.scene.show_home
        assert rig.scene.started
        assert rig.scheduler.armed
        assert rig.scene.session.phase is SessionPhase.REQUESTING
        assert rig.scene.session.session_id == 1

    def test_press_while_in_flight_is_noop(self) -> None:
        rig = _Rig()
        rig.send(StartPressed())
        rig.queue.enqueue(StartPressed())
        results = rig.queue.drain(rig.scene, rig.engine.context())
        assert results == [(StartPressed(), False)]
        assert rig.scene.session.session_id == 1

    def test_path_only_advances_once_started(self) -> None:
        rig = _Rig()
        rig.engine.run(10)
        assert rig.scene.path.progress == 0.0
        rig.send(StartPressed())
        rig.engine.run(10)
        assert rig.scene.path.progress > 0.0


class TestStreaming:
    def test_letters_grow_with_increments(self) -> None:
        rig = _Rig()
        checked = []

        def probe(scene, ctx) -> None:
            for line in scene.lines:
                assert len(line.particles) == visible_length(line.text)
                assert line.text.startswith(line.displayed_text)
            checked.append(ctx.frame_number)

        rig.engine.add_system(probe)
        rig.send(StartPressed(), StreamOpened(1), ChunkReceived(1, "silence"))
        line = rig.scene.lines[0]
        assert line.text == "silence"
        assert line.streaming
        assert len(line.particles) == 7

        previous = line.displayed_text
        rig.send(ChunkReceived(1, " falls\n"))
        line = rig.scene.lines[0]
        assert line.text == "silence falls"
        assert len(line.particles) == 12
        assert line.displayed_text.startswith(previous)

        for _ in range(200):
            before = rig.scene.lines[0].displayed_text
            rig.engine.step()
            after = rig.scene.lines[0].displayed_text
            assert len(after) - len(before) in (0, 1)
        assert rig.scene.lines[0].displayed_text == "silence falls"
        assert rig.scene.session.full_text == "silence falls\n"
        assert len(checked) > 200

    def test_same_length_update_keeps_particles(self) -> None:
        rig = _Rig()
        rig.send(StartPressed(), StreamOpened(1), ChunkReceived(1, "Here is a haiku:\nsilence"))
        particles = list(rig.scene.lines[0].particles)
        rig.send(ChunkReceived(1, " "))
        assert all(a is b for a, b in zip(particles, rig.scene.lines[0].particles))

    def test_completion_clears_streaming(self) -> None:
        rig = _Rig()
        rig.send(StartPressed(), StreamOpened(1))
        rig.send(*(ChunkReceived(1, f) for f in POEM_FRAGMENTS))
        rig.send(StreamFinished(1))
        assert rig.scene.session.phase is SessionPhase.COMPLETED
        assert not rig.scene.session.in_flight
        assert rig.scene.texts == POEM
        assert [line.text for line in rig.scene.lines] == list(POEM)
        assert not any(line.streaming for line in rig.scene.lines)

    def test_stale_session_events_rejected(self) -> None:
        rig = _Rig()
        rig.send(StartPressed())
        rig.queue.enqueue(ChunkReceived(7, "intruder"))
        results = rig.queue.drain(rig.scene, rig.engine.context())
        assert results[0][1] is False
        assert rig.scene.texts == ("", "", "")


class TestFailure:
    def test_connectivity_failure_recovers(self) -> None:
        rig = _Rig()
        rig.send(StartPressed(), StreamOpened(1), ChunkReceived(1, "half a poem"))
        rig.engine.run(30)
        error = GenerationError(ErrorKind.CONNECTIVITY, "refused")
        rig.send(StreamFailed(1, error))

        session = rig.scene.session
        assert session.phase is SessionPhase.FAILED
        assert session.error.kind is ErrorKind.CONNECTIVITY
        assert rig.scene.particle_count() == 0
        assert rig.scene.path.progress < 0.01

        rig.send(StartPressed())
        assert rig.scene.session.phase is SessionPhase.REQUESTING
        assert rig.scene.session.session_id == 2
        # The banner stays until a stream actually opens.
        assert rig.scene.session.error is error
        rig.send(StreamOpened(2))
        assert rig.scene.session.error is None


class TestFadeOut:
    def test_fade_out_clears_ring(self) -> None:
        rig = _Rig()
        rig.send(StartPressed(), StreamOpened(1))
        rig.send(*(ChunkReceived(1, f) for f in POEM_FRAGMENTS), StreamFinished(1))
        rig.engine.run(60)

        rig.send(FadeOutRequested())
        assert rig.scene.session.fading_out
        previous = {id(p): p.opacity for line in rig.scene.lines for p in line.particles}
        for _ in range(120):
            rig.engine.step()
            for line in rig.scene.lines:
                for p in line.particles:
                    assert p.opacity <= previous[id(p)]
                    previous[id(p)] = p.opacity
        assert all(o == 0.0 for o in previous.values())
        assert all(line.displayed_text == "" for line in rig.scene.lines)
        # The centered block is independent of the ring fade.
        assert rig.scene.texts == POEM

    def test_resize_mid_fade_keeps_fading(self) -> None:
        rig = _Rig()
        rig.send(StartPressed(), StreamOpened(1))
        rig.send(*(ChunkReceived(1, f) for f in POEM_FRAGMENTS), StreamFinished(1))
        rig.engine.run(60)
        rig.send(FadeOutRequested())
        rig.engine.run(30)

        def opacities() -> list[float]:
            return [p.opacity for line in rig.scene.lines for p in line.particles]

        before = opacities()
        rig.send(Resized(640, 480))
        after = opacities()
        assert all(a <= b for a, b in zip(after, before))

        rig.engine.run(120)
        rig.send(Resized(1000, 800))
        assert all(o == 0.0 for o in opacities())
        assert not any(p.visible for line in rig.scene.lines for p in line.particles)


def test_resize_relayouts():
    rig = _Rig()
    rig.send(StartPressed(), StreamOpened(1), ChunkReceived(1, "quiet"))
    rig.send(Resized(400, 300))
    assert rig.scene.geometry.size == (400, 300)
    assert all(p.base_radius == rig.scene.geometry.radius for p in rig.scene.lines[0].particles)


class _BlockingClient:
    def __init__(self) -> None:
        self.release = threading.Event()

    def stream(self, prompt: str):
        self.release.wait(5)
        return iter(())


class TestGenerationSystem:
    def test_factory(self) -> None:
        system = make_generation_system(MockClient([]), CommandQueue())
        assert isinstance(system, GenerationSystem)
        system.shutdown()

    def test_stalled_stream_times_out(self) -> None:
        client = _BlockingClient()
        rig = _Rig(generator=GeneratorConfig(stream_timeout=0.1))
        system = make_generation_system(client, rig.queue)
        rig.engine.add_system(system)
        try:
            rig.send(StartPressed())
            rig.engine.run(12)
            session = rig.scene.session
            assert session.phase is SessionPhase.FAILED
            assert session.error.kind is ErrorKind.TIMEOUT
        finally:
            client.release.set()
            system.shutdown()

    def test_shutdown_makes_system_noop(self) -> None:
        client = MockClient.from_fragments(["a\nb\nc\n"])
        rig = _Rig()
        system = make_generation_system(client, rig.queue)
        rig.engine.add_system(system)
        system.shutdown()
        rig.send(StartPressed())
        rig.engine.run(5)
        assert client.calls == []


class _EndlessClient:
    """Streams one fragment every few milliseconds until closed."""

    def __init__(self) -> None:
        self.first_line = threading.Event()
        self.closed = threading.Event()
        self.sent = 0

    def stream(self, prompt: str):
        return self._lines()

    def _lines(self):
        try:
            for _ in range(2000):
                self.sent += 1
                self.first_line.set()
                yield ndjson_lines(["void "], done=False)[0]
                time.sleep(0.005)
        finally:
            self.closed.set()


def test_shutdown_stops_worker_mid_stream():
    client = _EndlessClient()
    rig = _Rig()
    system = make_generation_system(client, rig.queue)
    rig.engine.add_system(system)
    rig.send(StartPressed())
    assert client.first_line.wait(2)

    system.shutdown()
    assert client.closed.wait(2)
    assert client.sent < 2000


class TestEnsoApp:
    def test_full_session(self) -> None:
        client = MockClient.from_fragments(["Here is a haiku:\n", *POEM_FRAGMENTS, "\n"])
        app = EnsoApp(client, 1000, 800, seed=3)
        try:
            app.press_start()
            _run_until(app, lambda scene: scene.session.phase is SessionPhase.COMPLETED)
            assert app.scene.texts == POEM
            assert app.scene.particle_count() == sum(visible_length(t) for t in POEM)
            assert len(client.calls) == 1
        finally:
            app.close()

    def test_exhaustion_without_done_completes(self) -> None:
        client = MockClient(ndjson_lines(POEM_FRAGMENTS, done=False))
        app = EnsoApp(client, 1000, 800, seed=3)
        try:
            app.press_start()
            _run_until(app, lambda scene: scene.session.phase is SessionPhase.COMPLETED)
            assert app.scene.texts == POEM
        finally:
            app.close()

    def test_failure_then_retry(self) -> None:
        client = MockClient([], error_rate=1.0)
        app = EnsoApp(client, 1000, 800, seed=3)
        try:
            app.press_start()
            _run_until(app, lambda scene: scene.session.phase is SessionPhase.FAILED)
            assert app.scene.session.error.kind is ErrorKind.CONNECTIVITY
            assert app.scene.texts == ("", "", "")

            app.press_start()
            app.step()
            assert app.scene.session.in_flight
            _run_until(app, lambda scene: scene.session.phase is SessionPhase.FAILED)
            assert len(client.calls) == 2
        finally:
            app.close()

    def test_single_flight(self) -> None:
        client = MockClient.from_fragments(POEM_FRAGMENTS, latency=0.05)
        app = EnsoApp(client, 1000, 800, seed=3)
        try:
            app.press_start()
            app.press_start()
            app.step()
            app.press_start()
            _run_until(app, lambda scene: scene.session.phase is SessionPhase.COMPLETED)
            assert len(client.calls) == 1
            assert app.scene.session.session_id == 1
        finally:
            app.close()


def test_parse_args_defaults_and_flags():
    args = parse_args([])
    assert args.model == GeneratorConfig().model
    assert args.seed is None
    assert args.size == [1280, 800]

    args = parse_args(["--model", "qwen2.5", "--interval", "30", "--size", "640", "480",
                       "--stream-timeout", "5", "--log-level", "DEBUG"])
    assert args.model == "qwen2.5"
    assert args.interval == 30.0
    assert args.size == [640, 480]
    assert args.stream_timeout == 5.0
    assert args.log_level == "DEBUG"

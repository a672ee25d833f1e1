"""Emptiness Generator — a haiku traced along an animated enso.

Controls:
  Space   Dismiss the home screen and generate a haiku
  Esc     Quit

Run:
    python -m enso_haiku
    python -m enso_haiku --model llama3.2 --interval 30
"""
from __future__ import annotations

import argparse
import logging
import sys

import pygame

from enso_haiku.client import GeneratorClient, OllamaClient
from enso_haiku.commands import Resized, StartPressed
from enso_haiku.config import AnimationConfig, GeneratorConfig
from enso_haiku.engine import Engine
from enso_haiku.handlers import register_handlers
from enso_haiku.queue import CommandQueue
from enso_haiku.scene import Scene
from enso_haiku.scheduler import RegenerationScheduler, make_scheduler_system
from enso_haiku.systems import (
    make_command_system,
    make_generation_system,
    make_motion_system,
    make_path_system,
)
from enso_haiku.ui import Compositor
from enso_haiku.ui.constants import DEFAULT_SIZE, TITLE

logger = logging.getLogger(__name__)


class EnsoApp:
    """Holds the engine, the scene and every system wired in frame order."""

    def __init__(
        self,
        client: GeneratorClient,
        width: int = DEFAULT_SIZE[0],
        height: int = DEFAULT_SIZE[1],
        config: AnimationConfig | None = None,
        generator: GeneratorConfig | None = None,
        seed: int | None = None,
    ) -> None:
        config = config if config is not None else AnimationConfig()
        scene = Scene(width, height, config=config, generator=generator)
        self.engine = Engine(scene, fps=config.frame_rate, seed=seed)
        scene.path.reset(self.engine.random)
        scene.sync_lines()

        self.queue = CommandQueue()
        self.scheduler = RegenerationScheduler.from_seconds(
            config.cycle_duration, config.fade_out_delay, config.frame_rate
        )
        register_handlers(self.queue, self.scheduler)
        self.generation = make_generation_system(client, self.queue)

        # Wire systems (order matters)
        self.engine.add_system(make_scheduler_system(self.scheduler, self.queue))
        self.engine.add_system(make_command_system(self.queue))
        self.engine.add_system(self.generation)
        self.engine.add_system(make_path_system())
        self.engine.add_system(make_motion_system())

    @property
    def scene(self) -> Scene:
        return self.engine.scene

    def press_start(self) -> None:
        self.queue.enqueue(StartPressed())

    def resize(self, width: int, height: int) -> None:
        self.queue.enqueue(Resized(width, height))

    def step(self) -> None:
        self.engine.step()

    def close(self) -> None:
        self.generation.shutdown()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = GeneratorConfig()
    anim = AnimationConfig()
    parser = argparse.ArgumentParser(description="Haiku about emptiness on an animated enso")
    parser.add_argument("--model", default=defaults.model, help="Ollama model name")
    parser.add_argument("--base-url", default=defaults.base_url, help="Ollama server URL")
    parser.add_argument("--fps", type=int, default=anim.frame_rate, help="Frames per second")
    parser.add_argument("--interval", type=float, default=anim.cycle_duration,
                        help="Seconds between haikus")
    parser.add_argument("--stream-timeout", type=float, default=defaults.stream_timeout,
                        help="Seconds without output before a generation is abandoned")
    parser.add_argument("--seed", type=int, default=None, help="Seed for stroke placement")
    parser.add_argument("--size", type=int, nargs=2, default=list(DEFAULT_SIZE),
                        metavar=("W", "H"), help="Initial window size")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = AnimationConfig(cycle_duration=args.interval, frame_rate=args.fps)
    generator = GeneratorConfig(
        base_url=args.base_url, model=args.model, stream_timeout=args.stream_timeout
    )
    client = OllamaClient(
        model=generator.model,
        base_url=generator.base_url,
        timeout=generator.request_timeout,
    )

    pygame.init()
    screen = pygame.display.set_mode(tuple(args.size), pygame.RESIZABLE)
    pygame.display.set_caption(TITLE)
    clock = pygame.time.Clock()

    width, height = screen.get_size()
    app = EnsoApp(client, width, height, config=config, generator=generator, seed=args.seed)
    compositor = Compositor()
    logger.info("using %s at %s (seed %d)", generator.model, generator.base_url, app.engine.seed)

    running = True
    try:
        while running:
            # --- Events ---
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        app.press_start()
                elif event.type == pygame.VIDEORESIZE:
                    app.resize(event.w, event.h)

            # --- Tick ---
            app.step()

            # --- Render ---
            screen = pygame.display.get_surface()
            compositor.draw(screen, app.scene)
            pygame.display.flip()
            clock.tick(config.frame_rate)
    finally:
        app.close()
        pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()

"""Animation and generator configuration dataclasses."""
from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class AnimationConfig:
    """Immutable constants for the enso stroke and the particle ring.

    Attributes:
        cycle_duration: Seconds between regenerations; one full stroke sweep
            is timed against this.
        frame_rate: Frames per second assumed when pacing the stroke.
        speed_multiplier: Scales the stroke sweep rate.
        num_circles: Concurrent enso strokes.
        num_lines: Poem lines laid out on the ring.
        gap: Angle in radians left open in the stroke and in the line layout.
        radius_fraction: Ring radius as a fraction of the shorter surface side.
        fade_in_speed: Opacity gained per frame at the standard rate.
        fade_out_speed: Opacity lost per frame while fading out.
        fade_out_delay: Seconds between a fade-out request and regeneration.
        opacity_floor: Minimum opacity of a particle that carries text.
        particle_alpha: Fraction of particle opacity applied when drawing.
        reveal_probability: Chance per frame that one more character is
            revealed on a streaming line.
        angle_gain: Low-pass gain pulling current angle toward target angle.
        spring: Spring constant pulling a particle toward its target position.
        damping: Velocity retained per frame.
        float_radius: Amplitude of the radial floating offset in pixels.
        float_drift: Amplitude of the perpendicular floating offset in pixels.
        clock_step: Animation clock increment per frame.
        ink_opacity: Base opacity of the enso stroke.
        layers: Stroke layers per circle.
        segments: Arc segments per layer.
        bleed_threshold: Progress after which the tip bleed is drawn.
    """

    cycle_duration: float = 20.0
    frame_rate: int = 60
    speed_multiplier: float = 1.5
    num_circles: int = 3
    num_lines: int = 3
    gap: float = 0.12
    radius_fraction: float = 0.35
    fade_in_speed: float = 0.02
    fade_out_speed: float = 0.015
    fade_out_delay: float = 2.0
    opacity_floor: float = 0.3
    particle_alpha: float = 0.4
    reveal_probability: float = 0.35
    angle_gain: float = 0.02
    spring: float = 0.1
    damping: float = 0.85
    float_radius: float = 5.0
    float_drift: float = 4.0
    clock_step: float = 0.01
    ink_opacity: float = 0.25
    layers: int = 3
    segments: int = 80
    bleed_threshold: float = 0.05

    @property
    def frames_per_cycle(self) -> float:
        return self.cycle_duration * self.frame_rate

    @property
    def progress_speed(self) -> float:
        """Stroke progress gained per frame before speed variation."""
        return (1.0 / self.frames_per_cycle) * self.speed_multiplier

    @property
    def segment_angle(self) -> float:
        """Arc reserved for each poem line."""
        return (math.tau - self.gap) / self.num_lines


@dataclass(frozen=True)
class GeneratorConfig:
    """Connection settings for the local Ollama generator.

    Attributes:
        base_url: Root URL of the Ollama server.
        model: Model name sent with every request.
        request_timeout: Socket timeout in seconds for connect and each read.
        stream_timeout: Seconds of frame time without an increment before an
            in-flight session is failed.
    """

    base_url: str = "http://localhost:11434"
    model: str = "llama3.2"
    request_timeout: float = 30.0
    stream_timeout: float = 60.0

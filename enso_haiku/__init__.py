"""enso-haiku - a streamed haiku traced along an animated enso."""

from enso_haiku.client import GeneratorClient, IncrementStream, MockClient, OllamaClient
from enso_haiku.components import Line, Particle
from enso_haiku.config import AnimationConfig, GeneratorConfig
from enso_haiku.engine import Engine
from enso_haiku.geometry import Geometry, compute_geometry
from enso_haiku.path import PathAnimator
from enso_haiku.queue import CommandQueue
from enso_haiku.scene import Scene
from enso_haiku.scheduler import RegenerationScheduler
from enso_haiku.session import SessionPhase, SessionState
from enso_haiku.types import ErrorKind, FrameContext, GenerationError

__all__ = [
    "AnimationConfig",
    "CommandQueue",
    "Engine",
    "ErrorKind",
    "FrameContext",
    "GenerationError",
    "GeneratorClient",
    "GeneratorConfig",
    "Geometry",
    "IncrementStream",
    "Line",
    "MockClient",
    "OllamaClient",
    "Particle",
    "PathAnimator",
    "RegenerationScheduler",
    "Scene",
    "SessionPhase",
    "SessionState",
    "compute_geometry",
]

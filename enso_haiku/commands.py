"""Commands routed through the CommandQueue."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from enso_haiku.types import GenerationError


@dataclass(frozen=True)
class StartPressed:
    """The start key was pressed."""


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class FadeOutRequested:
    pass


@dataclass(frozen=True)
class RegenerateRequested:
    pass


@dataclass(frozen=True)
class StreamOpened:
    session_id: int


@dataclass(frozen=True)
class ChunkReceived:
    session_id: int
    content: str


@dataclass(frozen=True)
class StreamFinished:
    session_id: int


@dataclass(frozen=True)
class StreamFailed:
    session_id: int
    error: GenerationError


# Input and scheduler commands come from the frame thread; stream commands
# come from the generation worker.
Command = Union[
    StartPressed,
    Resized,
    FadeOutRequested,
    RegenerateRequested,
    StreamOpened,
    ChunkReceived,
    StreamFinished,
    StreamFailed,
]

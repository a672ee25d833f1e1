"""Shared types, protocols and errors for the enso engine."""

from __future__ import annotations

import enum
import random as _random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from enso_haiku.scene import Scene


@dataclass(frozen=True, slots=True)
class FrameContext:
    frame_number: int
    dt: float
    elapsed: float
    random: _random.Random


class ErrorKind(enum.Enum):
    """Classification of a failed generation session."""

    CONNECTIVITY = "connectivity"
    STATUS = "status"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"


class GenerationError(Exception):
    """Raised when the text generator cannot deliver a stream.

    ``status`` carries the HTTP status code for ``ErrorKind.STATUS``.
    """

    def __init__(self, kind: ErrorKind, message: str, status: int | None = None) -> None:
        self.kind = kind
        self.status = status
        super().__init__(message)


System = Callable[["Scene", FrameContext], None]

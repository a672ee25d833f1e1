"""Generation session state and its pure transition functions.

``SessionState`` is immutable; every transition returns a new state. The
scene holds the current value and the command handlers swap it, so a render
frame only ever reads a complete state.
"""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field, replace

from enso_haiku.types import ErrorKind, GenerationError

logger = logging.getLogger(__name__)

POEM_LINES = 3

# Lines the model tends to open with instead of the poem itself.
_PREAMBLE_RE = re.compile(r"^(haiku|here's|here is|here)", re.IGNORECASE)


class SessionPhase(enum.Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


_RESTING = (SessionPhase.IDLE, SessionPhase.COMPLETED, SessionPhase.FAILED)


def _empty_lines() -> tuple[str, ...]:
    return ("",) * POEM_LINES


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the current generation session.

    Attributes:
        phase: Where the session is in its lifecycle.
        session_id: Increases by one for every session begun; stream events
            carry it so late events from an older session can be dropped.
        lines: The three poem lines as currently known.
        full_text: Every fragment received so far, concatenated.
        in_flight: True from ``begin_session`` until completion or failure.
        error: The error of the last failed session, until a stream opens.
        fading_out: True while the ring is asked to fade out.
        last_activity: Frame-clock seconds of the last begin or increment.
    """

    phase: SessionPhase = SessionPhase.IDLE
    session_id: int = 0
    lines: tuple[str, ...] = field(default_factory=_empty_lines)
    full_text: str = ""
    in_flight: bool = False
    error: GenerationError | None = None
    fading_out: bool = False
    last_activity: float = 0.0

    @property
    def is_idle(self) -> bool:
        return self.phase in _RESTING

    @property
    def has_content(self) -> bool:
        return any(line.strip() for line in self.lines)


def is_preamble(line: str) -> bool:
    return bool(_PREAMBLE_RE.match(line))


def split_lines(text: str) -> list[str]:
    """Non-empty stripped lines of ``text`` with preamble lines removed."""
    stripped = (line.strip() for line in text.split("\n"))
    return [line for line in stripped if line and not is_preamble(line)]


def streaming_lines(text: str) -> tuple[str, ...]:
    """Poem lines known so far, padded with empty strings."""
    found = split_lines(text)[:POEM_LINES]
    return tuple(found) + ("",) * (POEM_LINES - len(found))


def parse_poem(text: str) -> tuple[str, ...]:
    """Final lines of a finished stream.

    Fewer than three lines is not an error: the poem is left empty rather than
    padded with placeholder text.
    """
    found = split_lines(text)
    if len(found) < POEM_LINES:
        return _empty_lines()
    return tuple(found[:POEM_LINES])


def begin_session(state: SessionState, now: float = 0.0) -> SessionState:
    """Start a new session; a no-op while one is already in flight."""
    if state.in_flight:
        return state
    return replace(
        state,
        phase=SessionPhase.REQUESTING,
        session_id=state.session_id + 1,
        lines=_empty_lines(),
        full_text="",
        in_flight=True,
        fading_out=False,
        last_activity=now,
    )


def open_stream(state: SessionState, now: float = 0.0) -> SessionState:
    """The generator accepted the request: start streaming, drop the old error."""
    if state.phase is not SessionPhase.REQUESTING:
        return state
    return replace(
        state, phase=SessionPhase.STREAMING, error=None, last_activity=now
    )


def apply_increment(state: SessionState, content: str, now: float = 0.0) -> SessionState:
    """Append a streamed fragment and re-split the lines."""
    if not state.in_flight:
        return state
    full_text = state.full_text + content
    return replace(
        state,
        phase=SessionPhase.STREAMING,
        full_text=full_text,
        lines=streaming_lines(full_text),
        last_activity=now,
    )


def complete_session(state: SessionState) -> SessionState:
    """Finish the stream (done marker or exhaustion) and reparse the full text."""
    if not state.in_flight:
        return state
    return replace(
        state,
        phase=SessionPhase.COMPLETED,
        lines=parse_poem(state.full_text),
        in_flight=False,
    )


def fail_session(state: SessionState, error: GenerationError) -> SessionState:
    """Record ``error``, clear the lines and release the in-flight flag."""
    return replace(
        state,
        phase=SessionPhase.FAILED,
        lines=_empty_lines(),
        full_text="",
        in_flight=False,
        error=error,
        fading_out=False,
    )


def request_fade_out(state: SessionState) -> SessionState:
    """Ask the ring to fade out; ignored while a session is in flight."""
    if state.in_flight:
        return state
    return replace(state, fading_out=True)


def error_message(error: GenerationError) -> str:
    """Banner headline for a failed session."""
    if error.kind is ErrorKind.CONNECTIVITY:
        return "Ollama is not running. Please start Ollama and try again."
    if error.kind is ErrorKind.STATUS:
        return f"Ollama API error: {error.status}"
    if error.kind is ErrorKind.TIMEOUT:
        return "Ollama stopped responding. Press space to try again."
    return f"Error: {error}"

"""Tests for session state transitions and poem parsing."""
import dataclasses

import pytest

from enso_haiku.session import (
    SessionPhase,
    SessionState,
    apply_increment,
    begin_session,
    complete_session,
    error_message,
    fail_session,
    is_preamble,
    open_stream,
    parse_poem,
    request_fade_out,
    split_lines,
    streaming_lines,
)
from enso_haiku.types import ErrorKind, GenerationError

POEM = "empty room remains\nthe kettle has gone quiet\nonly dust moving\n"


def _streaming() -> SessionState:
    return open_stream(begin_session(SessionState()))


class TestParsing:
    @pytest.mark.parametrize(
        "line",
        ["Haiku:", "Here is a haiku", "here's one for you", "HERE you go"],
    )
    def test_preamble(self, line: str) -> None:
        assert is_preamble(line)

    def test_poem_lines_are_not_preamble(self) -> None:
        assert not is_preamble("empty room remains")

    def test_split_drops_blank_and_preamble(self) -> None:
        text = "Here is a haiku about emptiness:\n\n" + POEM
        assert split_lines(text) == [
            "empty room remains",
            "the kettle has gone quiet",
            "only dust moving",
        ]

    def test_streaming_lines_pad_to_three(self) -> None:
        assert streaming_lines("silence") == ("silence", "", "")

    def test_parse_poem_takes_first_three(self) -> None:
        assert parse_poem(POEM + "a fourth line\n") == (
            "empty room remains",
            "the kettle has gone quiet",
            "only dust moving",
        )

    def test_short_poem_is_left_empty(self) -> None:
        assert parse_poem("only one line") == ("", "", "")


class TestTransitions:
    def test_initial_state(self) -> None:
        state = SessionState()
        assert state.phase is SessionPhase.IDLE
        assert state.is_idle
        assert not state.in_flight
        assert state.lines == ("", "", "")

    def test_begin(self) -> None:
        state = begin_session(SessionState(), now=2.5)
        assert state.phase is SessionPhase.REQUESTING
        assert state.in_flight
        assert state.session_id == 1
        assert state.last_activity == 2.5

    def test_begin_is_single_flight(self) -> None:
        state = begin_session(SessionState())
        assert begin_session(state) is state

    def test_begin_clears_fade_out(self) -> None:
        state = request_fade_out(SessionState())
        assert state.fading_out
        assert not begin_session(state).fading_out

    def test_open_clears_previous_error(self) -> None:
        error = GenerationError(ErrorKind.CONNECTIVITY, "down")
        failed = fail_session(begin_session(SessionState()), error)
        state = open_stream(begin_session(failed))
        assert state.phase is SessionPhase.STREAMING
        assert state.error is None

    def test_open_ignored_outside_requesting(self) -> None:
        state = SessionState()
        assert open_stream(state) is state

    def test_increments_accumulate(self) -> None:
        state = apply_increment(_streaming(), "silence")
        assert state.lines == ("silence", "", "")
        state = apply_increment(state, " falls\n")
        assert state.lines == ("silence falls", "", "")
        assert state.full_text == "silence falls\n"

    def test_increment_ignored_when_idle(self) -> None:
        state = SessionState()
        assert apply_increment(state, "late") is state

    def test_complete_reparses(self) -> None:
        state = _streaming()
        for part in ("Here is a haiku:\n", POEM[:10], POEM[10:]):
            state = apply_increment(state, part)
        state = complete_session(state)
        assert state.phase is SessionPhase.COMPLETED
        assert state.is_idle
        assert not state.in_flight
        assert state.lines[0] == "empty room remains"

    def test_complete_with_too_few_lines(self) -> None:
        state = complete_session(apply_increment(_streaming(), "just one\n"))
        assert state.lines == ("", "", "")
        assert state.error is None

    def test_fail_clears_lines(self) -> None:
        state = apply_increment(_streaming(), POEM)
        error = GenerationError(ErrorKind.STATUS, "Ollama API error: 500", status=500)
        state = fail_session(state, error)
        assert state.phase is SessionPhase.FAILED
        assert state.error is error
        assert state.lines == ("", "", "")
        assert not state.in_flight
        assert begin_session(state).in_flight

    def test_fade_out_ignored_while_in_flight(self) -> None:
        state = begin_session(SessionState())
        assert not request_fade_out(state).fading_out

    def test_state_is_immutable(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            SessionState().in_flight = True  # type: ignore[misc]


class TestErrorMessage:
    def test_connectivity(self) -> None:
        error = GenerationError(ErrorKind.CONNECTIVITY, "refused")
        assert "not running" in error_message(error)

    def test_status(self) -> None:
        error = GenerationError(ErrorKind.STATUS, "bad", status=404)
        assert error_message(error) == "Ollama API error: 404"

    def test_unexpected(self) -> None:
        error = GenerationError(ErrorKind.UNEXPECTED, "boom")
        assert error_message(error) == "Error: boom"

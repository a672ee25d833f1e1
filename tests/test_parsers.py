"""Tests for NDJSON stream parsing."""
import json

from enso_haiku.parsers import Increment, parse_increments, parse_line


def _chunk(content: str, done: bool = False) -> str:
    return json.dumps({"message": {"role": "assistant", "content": content}, "done": done})


class TestParseLine:
    def test_content(self) -> None:
        assert parse_line(_chunk("quiet")) == Increment("quiet", False)

    def test_bytes(self) -> None:
        assert parse_line(_chunk("quiet").encode("utf-8") + b"\n") == Increment("quiet", False)

    def test_done_without_message(self) -> None:
        assert parse_line('{"done": true, "total_duration": 12}') == Increment("", True)

    def test_blank(self) -> None:
        assert parse_line("   \n") is None

    def test_malformed(self) -> None:
        assert parse_line('{"message": {"content": "hal') is None

    def test_non_object(self) -> None:
        assert parse_line("[1, 2]") is None

    def test_non_string_content_ignored(self) -> None:
        assert parse_line('{"message": {"content": 5}}') == Increment("", False)


class TestParseIncrements:
    def test_skips_malformed_and_keeps_going(self) -> None:
        lines = [_chunk("a"), "not json", "", _chunk("b"), _chunk("", done=True)]
        assert [i.content for i in parse_increments(lines)] == ["a", "b", ""]

    def test_stops_after_done(self) -> None:
        lines = [_chunk("a"), _chunk("", done=True), _chunk("ignored")]
        result = list(parse_increments(lines))
        assert result[-1].done
        assert all(i.content != "ignored" for i in result)

    def test_lazy(self) -> None:
        consumed = []

        def source():
            for line in [_chunk("a"), _chunk("b")]:
                consumed.append(line)
                yield line

        it = parse_increments(source())
        assert consumed == []
        assert next(it).content == "a"
        assert len(consumed) == 1

    def test_exhaustion_without_done(self) -> None:
        assert list(parse_increments([_chunk("a")])) == [Increment("a", False)]
